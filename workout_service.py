from __future__ import annotations
import datetime
import logging
from typing import Iterable, Optional

from history_service import HistoryService
from models import Exercise, SetType, Workout, WorkoutExercise, WorkoutSet
from store import ObjectStore

logger = logging.getLogger(__name__)


def _next_order(siblings: Iterable[WorkoutExercise | WorkoutSet]) -> int:
    return max((s.order for s in siblings), default=-1) + 1


class WorkoutService:
    """Handles the lifecycle of a workout session."""

    def __init__(self, store: ObjectStore, history: HistoryService) -> None:
        self.store = store
        self.history = history

    def start_workout(
        self, name: str = "Workout", now: Optional[datetime.datetime] = None
    ) -> Workout:
        return self.store.create(
            Workout(name=name, started_at=now or datetime.datetime.now())
        )

    def add_exercise(self, workout: Workout, exercise: Exercise) -> WorkoutExercise:
        """Append ``exercise`` to ``workout`` with one empty set to fill in."""
        we = self.store.create(
            WorkoutExercise(
                workout_id=workout.id,
                exercise_id=exercise.id,
                order=_next_order(self.store.exercises_for(workout)),
            )
        )
        self.add_set(we)
        return we

    def add_set(
        self,
        workout_exercise: WorkoutExercise,
        weight: float = 0.0,
        reps: int = 0,
        set_type: SetType = SetType.WORKING,
    ) -> WorkoutSet:
        return self.store.create(
            WorkoutSet(
                workout_exercise_id=workout_exercise.id,
                order=_next_order(self.store.sets_for(workout_exercise)),
                weight=weight,
                reps=reps,
                set_type=set_type,
            )
        )

    def update_set(
        self,
        workout_set: WorkoutSet,
        weight: Optional[float] = None,
        reps: Optional[int] = None,
        rpe: Optional[int] = None,
        set_type: Optional[SetType] = None,
    ) -> WorkoutSet:
        if weight is not None:
            if weight < 0:
                raise ValueError("weight must be non-negative")
            workout_set.weight = weight
        if reps is not None:
            if reps < 0:
                raise ValueError("reps must be non-negative")
            workout_set.reps = reps
        if rpe is not None:
            if rpe < 1 or rpe > 10:
                raise ValueError("rpe must be between 1 and 10")
            workout_set.rpe = rpe
        if set_type is not None:
            workout_set.set_type = SetType(set_type)
        return workout_set

    def complete_set(
        self, workout_set: WorkoutSet, now: Optional[datetime.datetime] = None
    ) -> WorkoutSet:
        """Mark ``workout_set`` done and flag it when it beats the personal best.

        The personal best only covers completed workouts, so sets of the
        current session never compete with each other.
        """
        workout_set.complete(now)
        we = self.store.get(WorkoutExercise, workout_set.workout_exercise_id)
        exercise = self.store.exercise_of(we) if we is not None else None
        if exercise is not None and workout_set.weight > 0:
            best = self.history.personal_best(exercise)
            workout_set.is_pr = best is not None and workout_set.weight > best
        return workout_set

    def delete_set(self, workout_set: WorkoutSet) -> None:
        we = self.store.get(WorkoutExercise, workout_set.workout_exercise_id)
        if we is not None and len(self.store.sets_for(we)) <= 1:
            raise ValueError("an exercise must keep at least one set")
        self.store.delete(workout_set)

    def delete_exercise(self, workout_exercise: WorkoutExercise) -> None:
        self.store.delete(workout_exercise)

    def finish(
        self, workout: Workout, now: Optional[datetime.datetime] = None
    ) -> Workout:
        workout.finish(now)
        logger.info("finished workout %s", workout.id)
        return workout

    def update_workout(
        self,
        workout: Workout,
        name: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Workout:
        """Rename ``workout`` or replace its notes; blank notes are cleared."""
        if name is not None:
            if not name.strip():
                raise ValueError("workout name required")
            workout.name = name
        if notes is not None:
            workout.notes = notes if notes.strip() else None
        return workout

    def discard(self, workout: Workout) -> None:
        """Delete an in-progress workout together with everything it owns."""
        if workout.is_completed:
            raise ValueError("completed workouts cannot be discarded")
        self.store.delete(workout)
        logger.info("discarded workout %s", workout.id)

    def delete_workout(self, workout: Workout) -> None:
        """Remove a workout from history, in progress or not."""
        self.store.delete(workout)
        logger.info("deleted workout %s", workout.id)
