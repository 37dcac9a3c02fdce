# -*- coding: utf-8 -*-
"""Workout services shared by the API, the realtime feed and the CLI."""

from __future__ import annotations

from typing import Optional

from ..config import Settings, settings
from .remote import SupabaseReplica, create_replica
from .repository import SyncRepository
from .storage import LegacyWorkoutStore, LocalWorkoutStore
from .sync_code import SyncCodeStore


class WorkoutServices:
    def __init__(self, cfg: Settings) -> None:
        self.local = LocalWorkoutStore(cfg.db_path)
        self.legacy = LegacyWorkoutStore(cfg.legacy_path)
        self.sync_codes = SyncCodeStore(cfg.sync_config_path)
        self.replica: Optional[SupabaseReplica] = create_replica(cfg)

    def repository(self, sync_code: Optional[str] = None) -> SyncRepository:
        """Build a repository bound to the sync code as it is right now."""
        code = sync_code if sync_code is not None else self.sync_codes.get()
        return SyncRepository(self.local, self.replica, code)


services = WorkoutServices(settings)


def get_repository() -> SyncRepository:
    return services.repository()
