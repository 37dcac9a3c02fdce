# -*- coding: utf-8 -*-
"""Workout repository — local-first storage with an optional remote mirror.

Writes always land in the local store first and are never rolled back when the
remote mirror fails. Reads prefer the remote replica (to pick up the other
party's edits) and fall back to the local copy whenever it is unreachable.
Concurrent edits of the same id resolve last-write-wins on the replica.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, TypeVar

from .models import WorkoutSession
from .remote import RemoteReplica, RemoteResult, from_remote_row, to_remote_row
from .storage import LegacyWorkoutStore, LocalWorkoutStore, WriteError, parse_session
from .sync_code import normalize_sync_code

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SyncRepository:
    """Single read/write surface for workout sessions.

    The sync code is fixed for the repository's lifetime, so an operation that
    started before the user rebinds the code finishes against the old one.
    """

    def __init__(
        self,
        local: LocalWorkoutStore,
        remote: Optional[RemoteReplica] = None,
        sync_code: Optional[str] = None,
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.local = local
        self.remote = remote
        self.sync_code = normalize_sync_code(sync_code)
        self._clock = clock

    @property
    def remote_enabled(self) -> bool:
        return self.remote is not None and self.sync_code is not None

    async def _attempt(self, label: str, call: Callable[[], Awaitable[RemoteResult[T]]]) -> RemoteResult[T]:
        try:
            result = await call()
        except Exception as exc:
            result = RemoteResult.failure(f"{label} raised {type(exc).__name__}: {exc}")
        if not result.ok:
            logger.warning("Remote %s failed, continuing locally: %s", label, result.error)
        return result

    async def _fetch_remote(self) -> Optional[List[WorkoutSession]]:
        remote, code = self.remote, self.sync_code
        if remote is None or code is None:
            return None
        result = await self._attempt("select", lambda: remote.select(code))
        if not result.ok:
            return None
        try:
            sessions = [from_remote_row(row) for row in result.value or []]
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Remote rows are malformed, using local copy: %s", exc)
            return None
        for session in sessions:
            try:
                self.local.save_session(session)
            except WriteError:
                # Already logged by the store; the remote list is still returned.
                continue
        return sessions

    async def get_all_workouts(self) -> List[WorkoutSession]:
        """All sessions, newest first."""
        if self.remote_enabled:
            sessions = await self._fetch_remote()
            if sessions is not None:
                return sessions
        return self.local.load_sessions()

    async def get_workout(self, id: str) -> Optional[WorkoutSession]:
        return self.local.load_session(id)

    async def save_workout(self, session: WorkoutSession) -> WorkoutSession:
        """Persist locally (raises ``WriteError``), then mirror best-effort."""
        saved = session.model_copy(update={"updated_at": self._clock()})
        self.local.save_session(saved)

        remote, code = self.remote, self.sync_code
        if remote is not None and code is not None:
            await self._attempt("upsert", lambda: remote.upsert(to_remote_row(saved, code)))
        return saved

    async def delete_workout(self, id: str) -> None:
        self.local.delete_by_id(id)

        remote, code = self.remote, self.sync_code
        if remote is not None and code is not None:
            await self._attempt("delete", lambda: remote.delete(code, id))

    async def migrate_legacy(self, legacy: LegacyWorkoutStore) -> int:
        """Replay the pre-SQLite records into the current store.

        Ids already present locally are skipped, so edits made after an earlier
        run are kept. The legacy file is left in place.
        """
        records = legacy.load_all()
        if not records:
            return 0
        migrated = 0
        for raw in records:
            try:
                session = parse_session(raw)
            except ValueError as exc:
                logger.warning("Skipping unreadable legacy workout: %s", exc)
                continue
            if self.local.select_by_id(session.id) is not None:
                continue
            await self.save_workout(session)
            migrated += 1
        if migrated:
            logger.info("Migrated %d legacy workouts", migrated)
        return migrated
