# -*- coding: utf-8 -*-
"""
Report generator

Weekly / monthly rollups of workout sessions. Pure functions: no I/O, and
degenerate input (no sessions, no sets) yields zero-valued reports.

Sessions are taken in the order given; callers that want a chronological
progress curve or before/after photos must sort first.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Sequence, Tuple, Union

from ..workouts.models import BODY_PARTS, BodyPart, WorkoutSession
from .models import (
    BeforeAfterPhotos,
    DashboardSummary,
    MonthlyReport,
    ProgressComparison,
    ProgressPoint,
    TopExercise,
    WeeklyProgress,
    WeeklyReport,
)

DateLike = Union[date, datetime]

WEEKS_PER_MONTH = 5
TOP_EXERCISE_LIMIT = 5
RECENT_WORKOUT_LIMIT = 3


def _local_naive(value: DateLike) -> datetime:
    if not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    if value.tzinfo is not None:
        return value.astimezone().replace(tzinfo=None)
    return value


def week_bounds(reference: DateLike) -> Tuple[datetime, datetime]:
    """Monday 00:00 through Sunday 23:59:59.999999 of the reference week."""
    ref = _local_naive(reference)
    start = datetime.combine(ref.date() - timedelta(days=ref.weekday()), time.min)
    end = start + timedelta(days=7) - timedelta(microseconds=1)
    return start, end


def month_bounds(reference: DateLike) -> Tuple[datetime, datetime]:
    ref = _local_naive(reference)
    start = datetime(ref.year, ref.month, 1)
    last_day = calendar.monthrange(ref.year, ref.month)[1]
    end = datetime.combine(date(ref.year, ref.month, last_day), time.max)
    return start, end


def _within(sessions: Iterable[WorkoutSession], start: datetime, end: datetime) -> List[WorkoutSession]:
    return [s for s in sessions if start <= _local_naive(s.date) <= end]


def _body_part_distribution(sessions: Iterable[WorkoutSession]) -> Dict[BodyPart, int]:
    distribution: Dict[BodyPart, int] = {part: 0 for part in BODY_PARTS}
    for session in sessions:
        for exercise in session.exercises:
            distribution[exercise.body_part] += len(exercise.sets)
    return distribution


def _photos(sessions: Iterable[WorkoutSession]) -> List[str]:
    return [photo for session in sessions for photo in session.photos]


def calculate_progress_comparison(
    previous: Sequence[WorkoutSession],
    current: Sequence[WorkoutSession],
) -> List[ProgressComparison]:
    # name -> [previous max, current max]
    maxes: Dict[str, List[float]] = {}
    for slot, group in ((0, previous), (1, current)):
        for session in group:
            for exercise in session.exercises:
                entry = maxes.setdefault(exercise.name, [0.0, 0.0])
                entry[slot] = max(entry[slot], exercise.max_weight)

    items = [
        ProgressComparison(
            exercise_name=name,
            previous_week_max=prev,
            current_week_max=cur,
            improvement=(cur - prev) / prev * 100 if prev > 0 else 0.0,
        )
        for name, (prev, cur) in maxes.items()
        if cur > 0
    ]
    items.sort(key=lambda item: item.improvement, reverse=True)
    return items


def generate_weekly_report(sessions: Sequence[WorkoutSession], reference_date: DateLike) -> WeeklyReport:
    week_start, week_end = week_bounds(reference_date)
    week_sessions = _within(sessions, week_start, week_end)

    previous_start = week_start - timedelta(days=7)
    previous_end = week_end - timedelta(days=7)
    previous_sessions = _within(sessions, previous_start, previous_end)

    return WeeklyReport(
        week_start=week_start,
        week_end=week_end,
        total_sessions=len(week_sessions),
        total_duration=sum(s.duration for s in week_sessions),
        total_sets=sum(s.total_sets for s in week_sessions),
        body_part_distribution=_body_part_distribution(week_sessions),
        progress_comparison=calculate_progress_comparison(previous_sessions, week_sessions),
        photos=_photos(week_sessions),
    )


def _weekly_progress(sessions: Sequence[WorkoutSession]) -> List[WeeklyProgress]:
    buckets = [WeeklyProgress(week=week) for week in range(1, WEEKS_PER_MONTH + 1)]
    for session in sessions:
        week = math.ceil(_local_naive(session.date).day / 7)
        bucket = buckets[week - 1]
        bucket.sessions += 1
        bucket.duration += session.duration
    return buckets


def _top_exercises(sessions: Sequence[WorkoutSession]) -> List[TopExercise]:
    stats: Dict[str, TopExercise] = {}
    for session in sessions:
        for exercise in session.exercises:
            entry = stats.get(exercise.name)
            if entry is None:
                entry = stats[exercise.name] = TopExercise(name=exercise.name, total_sets=0, max_weight=0.0)
            entry.total_sets += len(exercise.sets)
            entry.max_weight = max(entry.max_weight, exercise.max_weight)
    # sorted() is stable, so equal set counts keep first-seen order.
    ranked = sorted(stats.values(), key=lambda e: e.total_sets, reverse=True)
    return ranked[:TOP_EXERCISE_LIMIT]


def generate_monthly_report(sessions: Sequence[WorkoutSession], reference_date: DateLike) -> MonthlyReport:
    month_start, month_end = month_bounds(reference_date)
    month_sessions = _within(sessions, month_start, month_end)

    photos = _photos(month_sessions)
    return MonthlyReport(
        month=month_start,
        total_sessions=len(month_sessions),
        total_duration=sum(s.duration for s in month_sessions),
        weekly_progress=_weekly_progress(month_sessions),
        body_part_distribution=_body_part_distribution(month_sessions),
        top_exercises=_top_exercises(month_sessions),
        progress_curve=[
            ProgressPoint(date=s.date, total_volume=s.total_volume) for s in month_sessions
        ],
        before_after_photos=BeforeAfterPhotos(
            before=photos[0] if photos else "",
            after=photos[-1] if photos else "",
        ),
    )


def generate_dashboard_summary(
    sessions: Sequence[WorkoutSession],
    reference_date: DateLike,
    recent_limit: int = RECENT_WORKOUT_LIMIT,
) -> DashboardSummary:
    week_start, week_end = week_bounds(reference_date)
    week_sessions = _within(sessions, week_start, week_end)
    recent = sorted(sessions, key=lambda s: _local_naive(s.date), reverse=True)
    return DashboardSummary(
        week_start=week_start,
        week_end=week_end,
        total_sessions=len(week_sessions),
        total_duration=sum(s.duration for s in week_sessions),
        total_sets=sum(s.total_sets for s in week_sessions),
        recent_workouts=recent[: max(recent_limit, 0)],
    )
