from __future__ import annotations
import datetime
from typing import Dict, Iterable, List, Optional

from history_service import HistoryService
from models import MuscleGroup, Workout
from store import ObjectStore
from user_settings import UserSettings

STREAK_MAX_WEEKS = 52


def _local(moment: datetime.datetime) -> datetime.datetime:
    """Return ``moment`` as naive local time, matching stored timestamps."""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone().replace(tzinfo=None)


class StatisticsService:
    """Compute weekly workout statistics for the home overview."""

    def __init__(
        self,
        store: ObjectStore,
        history: HistoryService,
        settings: UserSettings | None = None,
    ) -> None:
        self.store = store
        self.history = history
        self.settings = settings

    def _first_weekday(self) -> int:
        if self.settings is not None:
            return self.settings.first_weekday
        return 0

    def start_of_week(self, moment: datetime.datetime) -> datetime.datetime:
        """Return midnight of the first day of the week containing ``moment``."""
        moment = _local(moment)
        offset = (moment.weekday() - self._first_weekday()) % 7
        day = moment.date() - datetime.timedelta(days=offset)
        return datetime.datetime.combine(day, datetime.time.min)

    def _completed_workouts(self) -> List[Workout]:
        return self.store.query(
            Workout, lambda w: w.is_completed and w.completed_at is not None
        )

    def workouts_in_week(self, week_start: datetime.datetime) -> List[Workout]:
        week_start = _local(week_start)
        week_end = week_start + datetime.timedelta(days=7)
        return [
            w for w in self._completed_workouts() if week_start <= w.completed_at < week_end
        ]

    def workouts_this_week(self, now: Optional[datetime.datetime] = None) -> int:
        now = now or datetime.datetime.now()
        return len(self.workouts_in_week(self.start_of_week(now)))

    def volume_this_week(self, now: Optional[datetime.datetime] = None) -> float:
        now = now or datetime.datetime.now()
        workouts = self.workouts_in_week(self.start_of_week(now))
        return sum(self.history.workout_volume(w) for w in workouts)

    def current_streak(self, now: Optional[datetime.datetime] = None) -> int:
        """Count consecutive weeks with a completed workout, ending this week.

        The walk always starts at the current week, so a week without a
        workout so far means a streak of zero.
        """
        check = _local(now or datetime.datetime.now())
        streak = 0
        for _ in range(STREAK_MAX_WEEKS):
            if not self.workouts_in_week(self.start_of_week(check)):
                break
            streak += 1
            check -= datetime.timedelta(days=7)
        return streak

    def overview(self, now: Optional[datetime.datetime] = None) -> Dict[str, float]:
        now = now or datetime.datetime.now()
        return {
            "workouts_this_week": self.workouts_this_week(now),
            "volume_this_week": round(self.volume_this_week(now), 2),
            "current_streak": self.current_streak(now),
        }

    def muscle_group_volume(
        self, workouts: Iterable[Workout]
    ) -> Dict[MuscleGroup, float]:
        """Return volume per primary muscle.

        Exercises that were deleted have no muscle and are left out here,
        though their sets still count towards the workout's total volume.
        """
        totals: Dict[MuscleGroup, float] = {}
        for workout in workouts:
            for we in self.store.exercises_for(workout):
                exercise = self.store.exercise_of(we)
                if exercise is None:
                    continue
                vol = self.history.workout_exercise_volume(we)
                totals[exercise.primary_muscle] = (
                    totals.get(exercise.primary_muscle, 0.0) + vol
                )
        return totals

    def recent_workouts(self, limit: int | None = None) -> List[Workout]:
        workouts = self.store.query(
            Workout,
            lambda w: w.is_completed,
            sort=lambda w: w.completed_at or w.started_at,
            reverse=True,
        )
        return workouts[:limit] if limit is not None else workouts

    def history_by_month(self) -> Dict[str, List[Workout]]:
        """Group completed workouts under ``"March 2024"`` style keys.

        Months are ordered newest first and so are the workouts inside them.
        """
        groups: Dict[str, List[Workout]] = {}
        for workout in self.recent_workouts():
            moment = workout.completed_at or workout.started_at
            groups.setdefault(moment.strftime("%B %Y"), []).append(workout)
        return groups
