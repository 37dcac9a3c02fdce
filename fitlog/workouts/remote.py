# -*- coding: utf-8 -*-
"""Remote replica — PostgREST (Supabase) table helpers over httpx."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Protocol, Tuple, TypeVar, Union
from uuid import uuid4

import httpx

from ..config import Settings
from .models import WorkoutSession

logger = logging.getLogger(__name__)

T = TypeVar("T")

ChangeCallback = Callable[[], Union[Awaitable[None], None]]


@dataclass(frozen=True)
class RemoteResult(Generic[T]):
    """Outcome of one remote call; failures carry a message instead of raising."""

    ok: bool
    value: Optional[T] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "RemoteResult[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str) -> "RemoteResult[T]":
        return cls(ok=False, error=error)


@dataclass
class Subscription:
    id: str
    sync_code: str
    task: Optional[asyncio.Task] = field(default=None, repr=False)


class RemoteReplica(Protocol):
    async def select(self, sync_code: str, id: Optional[str] = None) -> RemoteResult[List[Dict[str, Any]]]: ...

    async def upsert(self, row: Dict[str, Any]) -> RemoteResult[None]: ...

    async def delete(self, sync_code: str, id: str) -> RemoteResult[None]: ...

    async def subscribe(self, sync_code: str, on_change: ChangeCallback) -> Subscription: ...

    async def unsubscribe(self, handle: Subscription) -> None: ...


def _utc_iso(value: datetime) -> str:
    # Naive values are local wall-clock time; timestamptz columns need an offset.
    return value.astimezone(timezone.utc).isoformat()


def to_remote_row(session: WorkoutSession, sync_code: str) -> Dict[str, Any]:
    data = session.model_dump(mode="json", by_alias=True)
    data["date"] = _utc_iso(session.date)
    data["createdAt"] = _utc_iso(session.created_at)
    data["updatedAt"] = _utc_iso(session.updated_at)
    return {
        "id": session.id,
        "sync_code": sync_code,
        "date": data["date"],
        "data": data,
        "updated_at": data["updatedAt"],
    }


def from_remote_row(row: Dict[str, Any]) -> WorkoutSession:
    """Rehydrate a replica row; column values win over the embedded payload."""
    payload = row.get("data") or {}
    if isinstance(payload, str):
        payload = json.loads(payload)
    if not isinstance(payload, dict):
        raise ValueError("Remote row payload is not an object")
    merged = dict(payload)
    merged["id"] = row["id"]
    merged["date"] = row["date"]
    for column, key, snake in (("created_at", "createdAt", "created_at"), ("updated_at", "updatedAt", "updated_at")):
        merged.pop(snake, None)
        if row.get(column):
            merged[key] = row[column]
    return WorkoutSession.model_validate(merged)


class SupabaseReplica:
    """Row access to the shared ``workouts`` table, partitioned by sync code."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        table: str = "workouts",
        timeout: float = 30.0,
        poll_interval: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.table = table
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._transport = transport
        self._subscriptions: Dict[str, Subscription] = {}

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, follow_redirects=True, transport=self._transport)

    async def select(
        self,
        sync_code: str,
        id: Optional[str] = None,
        *,
        columns: str = "*",
    ) -> RemoteResult[List[Dict[str, Any]]]:
        params = {
            "select": columns,
            "sync_code": f"eq.{sync_code}",
            "order": "date.desc",
        }
        if id:
            params["id"] = f"eq.{id}"
        try:
            async with self._client() as client:
                resp = await client.get(self.endpoint, params=params, headers=self._headers())
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            return RemoteResult.failure(f"select failed: {exc}")
        if not isinstance(data, list):
            return RemoteResult.failure("select returned a non-list payload")
        return RemoteResult.success(data)

    async def upsert(self, row: Dict[str, Any]) -> RemoteResult[None]:
        headers = self._headers()
        headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
        try:
            async with self._client() as client:
                resp = await client.post(self.endpoint, json=row, headers=headers)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            return RemoteResult.failure(f"upsert failed: {exc}")
        return RemoteResult.success()

    async def delete(self, sync_code: str, id: str) -> RemoteResult[None]:
        params = {"id": f"eq.{id}", "sync_code": f"eq.{sync_code}"}
        try:
            async with self._client() as client:
                resp = await client.delete(self.endpoint, params=params, headers=self._headers())
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            return RemoteResult.failure(f"delete failed: {exc}")
        return RemoteResult.success()

    # ---- change feed ----

    async def _fingerprint(self, sync_code: str) -> Optional[Tuple[Tuple[str, str], ...]]:
        result = await self.select(sync_code, columns="id,updated_at")
        if not result.ok or result.value is None:
            logger.debug("Change poll for %s failed: %s", sync_code, result.error)
            return None
        return tuple(sorted((str(r.get("id")), str(r.get("updated_at"))) for r in result.value))

    async def _poll(self, sync_code: str, on_change: ChangeCallback) -> None:
        last = await self._fingerprint(sync_code)
        while True:
            await asyncio.sleep(self.poll_interval)
            current = await self._fingerprint(sync_code)
            if current is None:
                continue
            if last is not None and current != last:
                logger.info("Remote change detected for sync code %s", sync_code)
                try:
                    outcome = on_change()
                    if inspect.isawaitable(outcome):
                        await outcome
                except Exception:
                    logger.exception("Change callback failed for sync code %s", sync_code)
            last = current

    async def subscribe(self, sync_code: str, on_change: ChangeCallback) -> Subscription:
        handle = Subscription(id=str(uuid4()), sync_code=sync_code)
        handle.task = asyncio.get_running_loop().create_task(self._poll(sync_code, on_change))
        self._subscriptions[handle.id] = handle
        return handle

    async def unsubscribe(self, handle: Subscription) -> None:
        self._subscriptions.pop(handle.id, None)
        if handle.task is None:
            return
        handle.task.cancel()
        try:
            await handle.task
        except asyncio.CancelledError:
            pass


def create_replica(cfg: Settings) -> Optional[SupabaseReplica]:
    if not cfg.remote_enabled or cfg.supabase_url is None or cfg.supabase_key is None:
        return None
    return SupabaseReplica(
        cfg.supabase_url,
        cfg.supabase_key,
        table=cfg.remote_table,
        timeout=cfg.remote_timeout,
        poll_interval=cfg.realtime_interval,
    )
