# -*- coding: utf-8 -*-
"""Workout domain — Pydantic models and edit-boundary helpers."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class BodyPart(str, Enum):
    CHEST = "Chest"
    BACK = "Back"
    LEGS = "Legs"
    SHOULDERS = "Shoulders"
    ARMS = "Arms"
    GLUTES = "Glutes"
    CORE = "Core"
    CARDIO = "Cardio"
    STRETCHING = "Stretching"
    OTHER = "Other"


BODY_PARTS: List[BodyPart] = list(BodyPart)

# Labels written by the first (Chinese) version of the app.
_LEGACY_BODY_PARTS: Dict[str, BodyPart] = {
    "胸": BodyPart.CHEST,
    "背": BodyPart.BACK,
    "腿": BodyPart.LEGS,
    "肩": BodyPart.SHOULDERS,
    "手臂": BodyPart.ARMS,
    "臀": BodyPart.GLUTES,
    "核心": BodyPart.CORE,
    "有氧": BodyPart.CARDIO,
    "拉伸": BodyPart.STRETCHING,
    "其他": BodyPart.OTHER,
}

COMMON_EXERCISES: Dict[BodyPart, List[str]] = {
    BodyPart.CHEST: [
        "Barbell Bench Press", "Dumbbell Bench Press", "Incline Bench Press",
        "Decline Bench Press", "Dumbbell Fly", "Cable Crossover", "Push-up",
        "Machine Chest Press",
    ],
    BodyPart.BACK: [
        "Pull-up", "Barbell Row", "Dumbbell Row", "Seated Cable Row",
        "Lat Pulldown", "Straight-arm Pulldown", "Deadlift", "T-bar Row",
    ],
    BodyPart.LEGS: [
        "Squat", "Leg Press", "Leg Extension", "Leg Curl", "Lunge",
        "Bulgarian Split Squat", "Hack Squat", "Standing Calf Raise",
    ],
    BodyPart.SHOULDERS: [
        "Overhead Press", "Seated Dumbbell Press", "Lateral Raise",
        "Front Raise", "Face Pull", "Reverse Fly", "Upright Row", "Shrug",
    ],
    BodyPart.ARMS: [
        "Barbell Curl", "Dumbbell Curl", "Hammer Curl", "Cable Curl",
        "Triceps Pushdown", "Dip", "Close-grip Bench Press", "Overhead Triceps Extension",
    ],
    BodyPart.GLUTES: [
        "Glute Bridge", "Hip Thrust", "Donkey Kick", "Romanian Deadlift",
        "Sumo Squat", "Single-leg Deadlift",
    ],
    BodyPart.CORE: [
        "Crunch", "Plank", "Side Plank", "Russian Twist", "Hanging Leg Raise",
        "Dead Bug", "Bird Dog", "Ab Wheel",
    ],
    BodyPart.CARDIO: [
        "Running", "Elliptical", "Spin Bike", "Rowing Machine", "Jump Rope",
        "Stair Climber", "Swimming", "HIIT", "Burpee",
    ],
    BodyPart.STRETCHING: [
        "Full-body Stretch", "Leg Stretch", "Shoulder Stretch", "Back Stretch",
        "Foam Rolling", "Yoga",
    ],
    BodyPart.OTHER: ["Warm-up", "Cool-down", "Conditioning", "Functional Training"],
}


class WorkoutValidationError(ValueError):
    """Raised when a session is not complete enough to be saved."""


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExerciseSet(_CamelModel):
    set_number: int = Field(..., ge=1)
    reps: int = Field(0, ge=0)
    weight: float = Field(0.0, ge=0, description="kg")


class Exercise(_CamelModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = ""
    body_part: BodyPart = BodyPart.CHEST
    sets: List[ExerciseSet] = Field(default_factory=list)

    @field_validator("body_part", mode="before")
    @classmethod
    def _legacy_body_part(cls, value: Any) -> Any:
        if isinstance(value, str) and value in _LEGACY_BODY_PARTS:
            return _LEGACY_BODY_PARTS[value]
        return value

    @property
    def max_weight(self) -> float:
        return max((s.weight for s in self.sets), default=0.0)

    @property
    def volume(self) -> float:
        return sum(s.reps * s.weight for s in self.sets)

    def add_set(self, reps: int = 10, weight: float = 0.0) -> ExerciseSet:
        new_set = ExerciseSet(set_number=len(self.sets) + 1, reps=reps, weight=weight)
        self.sets.append(new_set)
        return new_set

    def fill_sets(self, total: int, reps: int, weight: float) -> None:
        """Replace all sets with ``total`` identical sets (quick entry)."""
        self.sets = [
            ExerciseSet(set_number=i + 1, reps=reps, weight=weight)
            for i in range(max(total, 0))
        ]

    def update_set(self, index: int, *, reps: Optional[int] = None, weight: Optional[float] = None) -> ExerciseSet:
        current = self.sets[index]
        updated = current.model_copy(
            update={
                "reps": current.reps if reps is None else reps,
                "weight": current.weight if weight is None else weight,
            }
        )
        self.sets[index] = updated
        return updated

    def remove_set(self, index: int) -> None:
        """Drop one set and renumber the rest so numbering stays 1..n."""
        remaining = [s for i, s in enumerate(self.sets) if i != index]
        self.sets = [
            s.model_copy(update={"set_number": i + 1}) for i, s in enumerate(remaining)
        ]


class WorkoutSession(_CamelModel):
    id: str
    date: datetime
    duration: int = Field(0, ge=0, description="minutes")
    exercises: List[Exercise] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list)
    notes: str = ""
    coach_feedback: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @property
    def total_sets(self) -> int:
        return sum(len(e.sets) for e in self.exercises)

    @property
    def total_volume(self) -> float:
        return sum(e.volume for e in self.exercises)


class WorkoutSaveRequest(_CamelModel):
    """Form payload; ``id`` and ``created_at`` are only present when editing."""

    id: Optional[str] = None
    date: datetime
    duration: int = Field(60, ge=0)
    exercises: List[Exercise] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list)
    notes: str = ""
    coach_feedback: Optional[str] = None
    created_at: Optional[datetime] = None


class SyncCodeResponse(BaseModel):
    sync_code: Optional[str] = None
    remote_enabled: bool = False


class SyncCodeBindRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)
    # Binding changes whose records this device sees, so the user must confirm.
    confirmed: bool = False


class SyncLinkRequest(BaseModel):
    url: str


class SyncLinkResponse(BaseModel):
    sync_code: str
    requires_confirmation: bool


class ShareLinkResponse(BaseModel):
    sync_code: str
    url: str


def validate_for_save(session: WorkoutSession | WorkoutSaveRequest) -> None:
    if not session.exercises:
        raise WorkoutValidationError("Add at least one exercise")
    for i, exercise in enumerate(session.exercises):
        if not exercise.name or not exercise.name.strip():
            raise WorkoutValidationError(f"Enter a name for exercise #{i + 1}")
        if not exercise.sets:
            raise WorkoutValidationError(f"Add at least one set to '{exercise.name}'")


def build_session(request: WorkoutSaveRequest, *, now: Optional[datetime] = None) -> WorkoutSession:
    now = now or datetime.now()
    return WorkoutSession(
        id=request.id or str(uuid4()),
        date=request.date,
        duration=request.duration,
        exercises=request.exercises,
        photos=request.photos,
        notes=request.notes,
        coach_feedback=request.coach_feedback,
        created_at=request.created_at or now,
        updated_at=now,
    )
