from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional


class Settings:
    """Centralized configuration for the workout log backend."""

    def __init__(self) -> None:
        base_dir = Path(__file__).resolve().parent
        repo_root = base_dir.parent
        data_root_default = repo_root / "data"

        self.data_root: Path = Path(
            os.environ.get("FITLOG_DATA_ROOT") or data_root_default
        ).expanduser()
        self.db_path: Path = Path(
            os.environ.get("FITLOG_DB_PATH") or (self.data_root / "fitlog.db")
        ).expanduser()
        # Pre-SQLite record file, replayed once into the database on startup.
        self.legacy_path: Path = Path(
            os.environ.get("FITLOG_LEGACY_PATH") or (self.data_root / "workouts.json")
        ).expanduser()
        self.sync_config_path: Path = Path(
            os.environ.get("FITLOG_SYNC_CONFIG") or (self.data_root / "sync.json")
        ).expanduser()

        # ---- Remote replica (PostgREST / Supabase) ----
        self.supabase_url: Optional[str] = os.environ.get("FITLOG_SUPABASE_URL") or None
        self.supabase_key: Optional[str] = os.environ.get("FITLOG_SUPABASE_KEY") or None
        self.remote_table: str = os.environ.get("FITLOG_REMOTE_TABLE") or "workouts"
        self.remote_timeout: float = float(os.environ.get("FITLOG_REMOTE_TIMEOUT") or "30")
        self.realtime_interval: float = float(os.environ.get("FITLOG_REALTIME_INTERVAL") or "5")

        self.log_level: str = (os.environ.get("FITLOG_LOG_LEVEL") or "INFO").upper()

        cors = os.environ.get("FITLOG_CORS_ORIGINS", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def remote_enabled(self) -> bool:
        # Only wire the replica when the URL looks real and a key is present.
        return bool(
            self.supabase_url
            and self.supabase_url.startswith("http")
            and self.supabase_key
        )


settings = Settings()
