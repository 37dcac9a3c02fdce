# -*- coding: utf-8 -*-
"""Workouts — API endpoints (records + sync code)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from ..realtime.feed import sync_feed
from .deps import get_repository, services
from .models import (
    ShareLinkResponse,
    SyncCodeBindRequest,
    SyncCodeResponse,
    SyncLinkRequest,
    SyncLinkResponse,
    WorkoutSaveRequest,
    WorkoutSession,
    WorkoutValidationError,
    build_session,
    validate_for_save,
)
from .repository import SyncRepository
from .storage import WriteError
from .sync_code import build_share_link, extract_sync_code, generate_sync_code

router = APIRouter(prefix="/api/workouts", tags=["Workouts"])
sync_router = APIRouter(prefix="/api/sync", tags=["Sync"])


@router.get("", response_model=List[WorkoutSession], summary="List workouts, newest first")
async def list_workouts(repository: SyncRepository = Depends(get_repository)):
    return await repository.get_all_workouts()


@router.get("/{workout_id}", response_model=WorkoutSession, summary="Get one workout")
async def get_workout(workout_id: str, repository: SyncRepository = Depends(get_repository)):
    workout = await repository.get_workout(workout_id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Workout not found")
    return workout


@router.post("", response_model=WorkoutSession, summary="Create or update a workout")
async def save_workout(request: WorkoutSaveRequest, repository: SyncRepository = Depends(get_repository)):
    try:
        validate_for_save(request)
    except WorkoutValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    try:
        return await repository.save_workout(build_session(request))
    except WriteError:
        raise HTTPException(status_code=500, detail="Save failed")


@router.delete("/{workout_id}", summary="Delete a workout")
async def delete_workout(workout_id: str, repository: SyncRepository = Depends(get_repository)):
    try:
        await repository.delete_workout(workout_id)
    except WriteError:
        raise HTTPException(status_code=500, detail="Delete failed")
    return {"status": "ok"}


def _sync_state() -> SyncCodeResponse:
    code = services.sync_codes.get()
    return SyncCodeResponse(sync_code=code, remote_enabled=code is not None and services.replica is not None)


@sync_router.get("", response_model=SyncCodeResponse, summary="Current sync code")
def get_sync_code():
    return _sync_state()


@sync_router.put("", response_model=SyncCodeResponse, summary="Bind a sync code")
async def bind_sync_code(request: SyncCodeBindRequest):
    if not request.confirmed:
        raise HTTPException(status_code=409, detail="Binding a sync code requires confirmation")
    code = services.sync_codes.set(request.code)
    await sync_feed.bind(code)
    return _sync_state()


@sync_router.delete("", response_model=SyncCodeResponse, summary="Unbind and return to local-only mode")
async def clear_sync_code():
    services.sync_codes.set(None)
    await sync_feed.bind(None)
    return _sync_state()


@sync_router.post("/generate", response_model=SyncCodeResponse, summary="Generate and bind a new sync code")
async def generate_code():
    code = services.sync_codes.set(generate_sync_code())
    await sync_feed.bind(code)
    return _sync_state()


@sync_router.post("/link", response_model=SyncLinkResponse, summary="Inspect a shared sync link")
def inspect_sync_link(request: SyncLinkRequest):
    code = extract_sync_code(request.url)
    if code is None:
        raise HTTPException(status_code=400, detail="Link does not carry a sync code")
    return SyncLinkResponse(sync_code=code, requires_confirmation=code != services.sync_codes.get())


@sync_router.get("/share", response_model=ShareLinkResponse, summary="Shareable link for the current code")
def share_link(base_url: str = Query(..., description="App URL the counterpart opens")):
    code = services.sync_codes.get()
    if code is None:
        raise HTTPException(status_code=404, detail="No sync code bound")
    return ShareLinkResponse(sync_code=code, url=build_share_link(base_url, code))
