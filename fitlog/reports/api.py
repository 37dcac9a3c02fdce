# -*- coding: utf-8 -*-
"""Reports — API endpoints."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..workouts.deps import get_repository
from ..workouts.models import WorkoutSession
from ..workouts.repository import SyncRepository
from .generator import (
    RECENT_WORKOUT_LIMIT,
    generate_dashboard_summary,
    generate_monthly_report,
    generate_weekly_report,
)
from .models import DashboardSummary, MonthlyReport, WeeklyReport

router = APIRouter(prefix="/api/reports", tags=["Reports"])


def _reference(value: Optional[date]) -> datetime:
    return datetime.combine(value, datetime.min.time()) if value else datetime.now()


async def _chronological(repository: SyncRepository) -> List[WorkoutSession]:
    # Oldest first, so the progress curve and before/after photos follow time.
    workouts = await repository.get_all_workouts()
    return sorted(workouts, key=lambda w: w.date.timestamp())


@router.get("/weekly", response_model=WeeklyReport, summary="Weekly report")
async def weekly_report(
    day: Optional[date] = Query(default=None, alias="date", description="YYYY-MM-DD, defaults to today"),
    repository: SyncRepository = Depends(get_repository),
):
    return generate_weekly_report(await _chronological(repository), _reference(day))


@router.get("/monthly", response_model=MonthlyReport, summary="Monthly report")
async def monthly_report(
    day: Optional[date] = Query(default=None, alias="date", description="YYYY-MM-DD, defaults to today"),
    repository: SyncRepository = Depends(get_repository),
):
    return generate_monthly_report(await _chronological(repository), _reference(day))


@router.get("/dashboard", response_model=DashboardSummary, summary="This week at a glance")
async def dashboard(
    day: Optional[date] = Query(default=None, alias="date", description="YYYY-MM-DD, defaults to today"),
    limit: int = Query(default=RECENT_WORKOUT_LIMIT, ge=0, le=50),
    repository: SyncRepository = Depends(get_repository),
):
    workouts = await repository.get_all_workouts()
    return generate_dashboard_summary(workouts, _reference(day), recent_limit=limit)
