# -*- coding: utf-8 -*-
"""Sync code — client-local persistence and deep-link helpers."""

from __future__ import annotations

import json
import logging
import secrets
import string
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlparse

logger = logging.getLogger(__name__)

SYNC_CODE_PARAM = "syncCode"
_ALPHABET = string.ascii_uppercase + string.digits
_CODE_LENGTH = 8


def normalize_sync_code(code: Optional[str]) -> Optional[str]:
    if code is None:
        return None
    cleaned = code.strip().upper()
    return cleaned or None


def generate_sync_code() -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(_CODE_LENGTH))


def extract_sync_code(url: str) -> Optional[str]:
    """Read the ``syncCode`` query parameter from a shared link."""
    query = parse_qs(urlparse(url).query)
    values = query.get(SYNC_CODE_PARAM) or []
    return normalize_sync_code(values[0]) if values else None


def build_share_link(base_url: str, code: str) -> str:
    base = base_url.split("?", 1)[0]
    return f"{base}?{urlencode({SYNC_CODE_PARAM: code})}"


class SyncCodeStore:
    """Keeps the current sync code in a small JSON file next to the data."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def get(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Sync config %s is unreadable: %s", self.path, exc)
            return None
        if not isinstance(data, dict):
            return None
        value = data.get("sync_code")
        return normalize_sync_code(value) if isinstance(value, str) else None

    def set(self, code: Optional[str]) -> Optional[str]:
        code = normalize_sync_code(code)
        if code is None:
            if self.path.exists():
                self.path.unlink()
            logger.info("Sync code cleared; back to local-only mode")
            return None
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"sync_code": code}, ensure_ascii=False), encoding="utf-8")
        logger.info("Sync code bound")
        return code
