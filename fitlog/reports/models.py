# -*- coding: utf-8 -*-
"""Report models for API payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..workouts.models import BodyPart, WorkoutSession


class _ReportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProgressComparison(_ReportModel):
    exercise_name: str
    previous_week_max: float
    current_week_max: float
    # Percent; 0 when there is no previous-week max to compare against.
    improvement: float


class WeeklyReport(_ReportModel):
    week_start: datetime
    week_end: datetime
    total_sessions: int = 0
    total_duration: int = 0
    total_sets: int = 0
    body_part_distribution: Dict[BodyPart, int]
    progress_comparison: List[ProgressComparison] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list)


class WeeklyProgress(_ReportModel):
    week: int
    sessions: int = 0
    duration: int = 0


class TopExercise(_ReportModel):
    name: str
    total_sets: int
    max_weight: float


class ProgressPoint(_ReportModel):
    date: datetime
    total_volume: float


class BeforeAfterPhotos(_ReportModel):
    before: str = ""
    after: str = ""


class MonthlyReport(_ReportModel):
    month: datetime
    total_sessions: int = 0
    total_duration: int = 0
    weekly_progress: List[WeeklyProgress]
    body_part_distribution: Dict[BodyPart, int]
    top_exercises: List[TopExercise] = Field(default_factory=list)
    progress_curve: List[ProgressPoint] = Field(default_factory=list)
    before_after_photos: BeforeAfterPhotos = Field(default_factory=BeforeAfterPhotos)


class DashboardSummary(_ReportModel):
    week_start: datetime
    week_end: datetime
    total_sessions: int = 0
    total_duration: int = 0
    total_sets: int = 0
    recent_workouts: List[WorkoutSession] = Field(default_factory=list)
