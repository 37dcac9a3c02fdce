# -*- coding: utf-8 -*-
"""Workout storage helpers (SQLite + legacy JSON file)."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..app_db import db_conn, init_app_db
from .models import WorkoutSession

logger = logging.getLogger(__name__)


class WriteError(RuntimeError):
    """Local persistence failed; the caller must report it to the user."""


def serialize_session(session: WorkoutSession) -> str:
    return session.model_dump_json(by_alias=True)


def parse_session(raw: str | Dict[str, Any]) -> WorkoutSession:
    if isinstance(raw, str):
        return WorkoutSession.model_validate_json(raw)
    return WorkoutSession.model_validate(raw)


class LocalWorkoutStore:
    """Record store keyed by id; each row keeps the full session as JSON text."""

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path

    def init(self) -> None:
        init_app_db(self.db_path)

    def upsert(self, id: str, date: str, data: str, created_at: str, updated_at: str) -> None:
        try:
            with db_conn(self.db_path) as conn:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO workouts (id, date, data, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    (id, date, data, created_at, updated_at),
                )
        except (sqlite3.Error, OSError) as exc:
            logger.error("Local upsert failed for %s: %s", id, exc)
            raise WriteError(f"Failed to save workout {id}") from exc

    def delete_by_id(self, id: str) -> None:
        try:
            with db_conn(self.db_path) as conn:
                conn.execute("DELETE FROM workouts WHERE id = ?", (id,))
        except (sqlite3.Error, OSError) as exc:
            logger.error("Local delete failed for %s: %s", id, exc)
            raise WriteError(f"Failed to delete workout {id}") from exc

    def delete_all(self) -> None:
        try:
            with db_conn(self.db_path) as conn:
                conn.execute("DELETE FROM workouts")
        except (sqlite3.Error, OSError) as exc:
            logger.error("Local wipe failed: %s", exc)
            raise WriteError("Failed to clear workouts") from exc

    def select_all(self) -> List[str]:
        with db_conn(self.db_path) as conn:
            rows = conn.execute("SELECT data FROM workouts ORDER BY date DESC").fetchall()
            return [r["data"] for r in rows]

    def select_by_id(self, id: str) -> Optional[str]:
        with db_conn(self.db_path) as conn:
            row = conn.execute("SELECT data FROM workouts WHERE id = ?", (id,)).fetchone()
            return row["data"] if row else None

    # Session-level conveniences used by the repository.

    def save_session(self, session: WorkoutSession) -> None:
        self.upsert(
            session.id,
            session.date.isoformat(),
            serialize_session(session),
            session.created_at.isoformat(),
            session.updated_at.isoformat(),
        )

    def load_sessions(self) -> List[WorkoutSession]:
        out: List[WorkoutSession] = []
        for raw in self.select_all():
            try:
                out.append(parse_session(raw))
            except ValueError as exc:
                logger.warning("Skipping unreadable local workout row: %s", exc)
        # Stored date strings may mix offsets; order on the parsed value.
        out.sort(key=lambda s: s.date.timestamp(), reverse=True)
        return out

    def load_session(self, id: str) -> Optional[WorkoutSession]:
        raw = self.select_by_id(id)
        if raw is None:
            return None
        return parse_session(raw)


class LegacyWorkoutStore:
    """Pre-SQLite format: one JSON file holding an array of session objects."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load_all(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Legacy workout file %s is unreadable: %s", self.path, exc)
            return []
        if not isinstance(data, list):
            logger.warning("Legacy workout file %s does not hold a list", self.path)
            return []
        return [item for item in data if isinstance(item, dict)]
