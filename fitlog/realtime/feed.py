# -*- coding: utf-8 -*-
"""
Realtime sync feed

Watches the remote replica for the bound sync code and pushes a fresh workout
list to every connected WebSocket whenever the other party changes something.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Protocol
from uuid import uuid4

from fastapi import WebSocket, WebSocketDisconnect

from ..workouts.deps import WorkoutServices, services
from ..workouts.remote import Subscription

logger = logging.getLogger(__name__)


class Listener(Protocol):
    async def send_json(self, data: Any) -> None: ...


class SyncFeed:
    """Remote change subscription plus the set of listeners to notify."""

    def __init__(self, workout_services: WorkoutServices):
        self.services = workout_services
        # Active WebSocket connections by id.
        self.listeners: Dict[str, Listener] = {}
        self._subscription: Optional[Subscription] = None

    @property
    def sync_code(self) -> Optional[str]:
        return self._subscription.sync_code if self._subscription else None

    async def bind(self, sync_code: Optional[str]) -> None:
        """(Re)subscribe for ``sync_code``; ``None`` just stops watching."""
        replica = self.services.replica
        if self._subscription is not None and replica is not None:
            await replica.unsubscribe(self._subscription)
        self._subscription = None
        if replica is None or sync_code is None:
            return
        self._subscription = await replica.subscribe(sync_code, self.refresh)
        logger.info("Watching remote changes for sync code %s", sync_code)

    async def close(self) -> None:
        await self.bind(None)

    async def refresh(self) -> int:
        """Re-read all workouts and push them; returns the listener count reached."""
        repository = self.services.repository()
        workouts = await repository.get_all_workouts()
        payload = {
            "type": "workouts_changed",
            "workouts": [w.model_dump(mode="json", by_alias=True) for w in workouts],
        }
        reached = 0
        for listener_id, listener in list(self.listeners.items()):
            try:
                await listener.send_json(payload)
                reached += 1
            except (WebSocketDisconnect, RuntimeError) as exc:
                logger.info("Dropping listener %s: %s", listener_id, exc)
                self.listeners.pop(listener_id, None)
        return reached

    def add_listener(self, listener: Listener) -> str:
        listener_id = str(uuid4())
        self.listeners[listener_id] = listener
        return listener_id

    def remove_listener(self, listener_id: str) -> None:
        self.listeners.pop(listener_id, None)


sync_feed = SyncFeed(services)


async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    listener_id = sync_feed.add_listener(websocket)
    logger.info("WebSocket connected: %s", listener_id)
    try:
        while True:
            # Clients only listen; anything they send is ignored.
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("WebSocket disconnected: %s", listener_id)
    finally:
        sync_feed.remove_listener(listener_id)
