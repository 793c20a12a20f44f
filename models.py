from __future__ import annotations
import datetime
import uuid
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from algorithms import MathTools, WeightConverter


class MuscleGroup(str, Enum):
    CHEST = "Chest"
    BACK = "Back"
    SHOULDERS = "Shoulders"
    BICEPS = "Biceps"
    TRICEPS = "Triceps"
    QUADS = "Quads"
    HAMSTRINGS = "Hamstrings"
    GLUTES = "Glutes"
    CALVES = "Calves"
    CORE = "Core"
    FULL_BODY = "Full Body"


class Equipment(str, Enum):
    BARBELL = "Barbell"
    DUMBBELL = "Dumbbell"
    CABLE = "Cable"
    MACHINE = "Machine"
    BODYWEIGHT = "Bodyweight"
    KETTLEBELL = "Kettlebell"
    OTHER = "Other"


class SetType(str, Enum):
    WARMUP = "Warm-up"
    WORKING = "Working"
    DROP_SET = "Drop Set"
    FAILURE = "Failure"

    @property
    def short_label(self) -> str:
        return {
            SetType.WARMUP: "W",
            SetType.WORKING: "",
            SetType.DROP_SET: "D",
            SetType.FAILURE: "F",
        }[self]


class WeightUnit(str, Enum):
    """Display unit for weights. Storage is always pounds."""

    LBS = "lbs"
    KG = "kg"

    @property
    def display_name(self) -> str:
        return "Pounds (lbs)" if self is WeightUnit.LBS else "Kilograms (kg)"

    @property
    def from_lbs_factor(self) -> float:
        return WeightConverter.factors(self.value)[0]

    @property
    def to_lbs_factor(self) -> float:
        return WeightConverter.factors(self.value)[1]


class AppearanceMode(str, Enum):
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


def _now() -> datetime.datetime:
    return datetime.datetime.now()


class Entity(BaseModel):
    """Base class for persisted records identified by a UUID."""

    model_config = ConfigDict(validate_assignment=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)


class Exercise(Entity):
    name: str
    primary_muscle: MuscleGroup
    secondary_muscles: list[MuscleGroup] = Field(default_factory=list)
    equipment: Equipment
    instructions: Optional[str] = None
    is_custom: bool = False
    created_at: datetime.datetime = Field(default_factory=_now)

    @model_validator(mode="after")
    def _strip_primary(self) -> "Exercise":
        cleaned: list[MuscleGroup] = []
        for muscle in self.secondary_muscles:
            if muscle != self.primary_muscle and muscle not in cleaned:
                cleaned.append(muscle)
        if cleaned != self.secondary_muscles:
            # bypass validate_assignment to avoid re-entering this validator
            self.__dict__["secondary_muscles"] = cleaned
        return self


class Workout(Entity):
    name: str = "Workout"
    started_at: datetime.datetime = Field(default_factory=_now)
    completed_at: Optional[datetime.datetime] = None
    notes: Optional[str] = None
    is_completed: bool = False

    @property
    def duration(self) -> float | None:
        """Seconds between start and completion, ``None`` while in progress."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    @property
    def formatted_duration(self) -> str:
        duration = self.duration
        if duration is None:
            return "In Progress"
        return MathTools.format_duration(duration)

    def finish(self, now: datetime.datetime | None = None) -> None:
        if self.is_completed:
            raise ValueError("workout already completed")
        self.completed_at = now or _now()
        self.is_completed = True


class WorkoutExercise(Entity):
    workout_id: uuid.UUID
    exercise_id: Optional[uuid.UUID] = None
    order: int = 0


class WorkoutSet(Entity):
    workout_exercise_id: uuid.UUID
    order: int = 0
    weight: float = 0.0
    reps: int = 0
    rpe: Optional[int] = None
    set_type: SetType = SetType.WORKING
    is_completed: bool = False
    completed_at: Optional[datetime.datetime] = None
    is_pr: bool = False

    @property
    def volume(self) -> float:
        return self.weight * self.reps

    @property
    def estimated_1rm(self) -> float:
        return MathTools.brzycki_1rm(self.weight, self.reps)

    def complete(self, now: datetime.datetime | None = None) -> None:
        self.is_completed = True
        self.completed_at = now or _now()


class WorkoutTemplate(Entity):
    name: str
    notes: Optional[str] = None
    created_at: datetime.datetime = Field(default_factory=_now)
    last_used_at: Optional[datetime.datetime] = None


class TemplateExercise(Entity):
    template_id: uuid.UUID
    exercise_id: Optional[uuid.UUID] = None
    order: int = 0
    default_set_count: int = Field(default=3, ge=0)
    default_weight: Optional[float] = None
    default_reps: Optional[int] = None
    notes: Optional[str] = None


class PreviousSetData(BaseModel):
    """A set from the last completed session of an exercise."""

    weight: float
    reps: int
    completed_at: Optional[datetime.datetime] = None


class ProgressionPoint(BaseModel):
    date: datetime.datetime
    max_weight: float
    total_sets: int
    total_reps: int


class ExerciseData(BaseModel):
    """One record of the bundled exercise catalogue."""

    name: str
    primaryMuscle: str
    secondaryMuscles: list[str] = Field(default_factory=list)
    equipment: str
    instructions: Optional[str] = None

    def to_exercise(self) -> Exercise:
        secondary = [
            MuscleGroup(m) for m in self.secondaryMuscles if m in _MUSCLE_VALUES
        ]
        primary = (
            MuscleGroup(self.primaryMuscle)
            if self.primaryMuscle in _MUSCLE_VALUES
            else MuscleGroup.FULL_BODY
        )
        equipment = (
            Equipment(self.equipment)
            if self.equipment in _EQUIPMENT_VALUES
            else Equipment.OTHER
        )
        return Exercise(
            name=self.name,
            primary_muscle=primary,
            secondary_muscles=secondary,
            equipment=equipment,
            instructions=self.instructions,
            is_custom=False,
        )


_MUSCLE_VALUES = {m.value for m in MuscleGroup}
_EQUIPMENT_VALUES = {e.value for e in Equipment}
