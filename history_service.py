from __future__ import annotations
import datetime
from typing import List, Optional

from models import (
    Exercise,
    PreviousSetData,
    ProgressionPoint,
    Workout,
    WorkoutExercise,
)
from store import ObjectStore


def _session_date(workout: Workout) -> datetime.datetime:
    return workout.completed_at or workout.started_at or datetime.datetime.min


class HistoryService:
    """Derive previous performance and progression from logged workouts.

    Every method is a read over the store. Missing relationships (no
    history, a deleted exercise, a workout without sets) give empty
    results rather than errors.
    """

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def _completed_entries(
        self, exercise: Exercise, excluding: Optional[Workout] = None
    ) -> List[tuple[WorkoutExercise, Workout]]:
        entries = []
        for we in self.store.workout_exercises_of(exercise):
            workout = self.store.workout_of(we)
            if workout is None or not workout.is_completed:
                continue
            if excluding is not None and workout.id == excluding.id:
                continue
            entries.append((we, workout))
        return entries

    def previous_sets(
        self, exercise: Exercise, excluding_workout: Optional[Workout] = None
    ) -> List[PreviousSetData]:
        """Return the sets from the most recent completed session of ``exercise``.

        Sets come back in stored order whether or not they were completed,
        so a hint can be shown next to the set at the same position.
        """
        entries = self._completed_entries(exercise, excluding_workout)
        if not entries:
            return []
        latest, _workout = max(entries, key=lambda e: _session_date(e[1]))
        return [
            PreviousSetData(weight=s.weight, reps=s.reps, completed_at=s.completed_at)
            for s in self.store.sets_for(latest)
        ]

    def last_performed_date(self, exercise: Exercise) -> Optional[datetime.datetime]:
        dates = [
            w.completed_at
            for _we, w in self._completed_entries(exercise)
            if w.completed_at is not None
        ]
        return max(dates) if dates else None

    def progression_data(self, exercise: Exercise) -> List[ProgressionPoint]:
        """Return one point per completed session, oldest first.

        Only completed sets with a positive weight count; sessions with no
        such set are left out.
        """
        points: list[ProgressionPoint] = []
        for we, workout in self._completed_entries(exercise):
            sets = [
                s for s in self.store.sets_for(we) if s.is_completed and s.weight > 0
            ]
            if not sets:
                continue
            points.append(
                ProgressionPoint(
                    date=_session_date(workout),
                    max_weight=max(s.weight for s in sets),
                    total_sets=len(sets),
                    total_reps=sum(s.reps for s in sets),
                )
            )
        points.sort(key=lambda p: p.date)
        return points

    def personal_best(self, exercise: Exercise) -> Optional[float]:
        series = self.progression_data(exercise)
        if not series:
            return None
        return max(p.max_weight for p in series)

    def workout_exercise_volume(self, workout_exercise: WorkoutExercise) -> float:
        return sum(s.volume for s in self.store.sets_for(workout_exercise))

    def workout_volume(self, workout: Workout) -> float:
        """Total weight × reps of every set, completed or not."""
        return sum(
            self.workout_exercise_volume(we) for we in self.store.exercises_for(workout)
        )

    def total_sets(self, workout: Workout) -> int:
        return sum(len(self.store.sets_for(we)) for we in self.store.exercises_for(workout))

    def completed_set_count(self, workout: Workout) -> int:
        return sum(
            1
            for we in self.store.exercises_for(workout)
            for s in self.store.sets_for(we)
            if s.is_completed
        )

    def exercise_count(self, workout: Workout) -> int:
        return len(self.store.exercises_for(workout))
