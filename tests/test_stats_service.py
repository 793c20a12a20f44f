import datetime
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import SettingsRepository
from history_service import HistoryService
from models import Equipment, Exercise, MuscleGroup
from stats_service import StatisticsService
from store import ObjectStore
from user_settings import UserSettings
from workout_service import WorkoutService

# a Wednesday
NOW = datetime.datetime(2024, 3, 13, 12, 0)


class StatisticsServiceTest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_stats.db"
        self.yaml_path = "test_stats.yaml"
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.store = ObjectStore(self.db_path)
        self.history = HistoryService(self.store)
        self.settings = UserSettings(SettingsRepository(self.db_path, self.yaml_path))
        self.stats = StatisticsService(self.store, self.history, self.settings)
        self.workouts = WorkoutService(self.store, self.history)
        self.row = self.store.create(
            Exercise(name="Row", primary_muscle=MuscleGroup.BACK, equipment=Equipment.CABLE)
        )

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def _completed(self, finished: datetime.datetime, weight: float = 100, reps: int = 10):
        workout = self.workouts.start_workout(now=finished - datetime.timedelta(hours=1))
        we = self.workouts.add_exercise(workout, self.row)
        self.workouts.update_set(self.store.sets_for(we)[0], weight=weight, reps=reps)
        self.workouts.finish(workout, now=finished)
        return workout

    def test_start_of_week(self) -> None:
        self.assertEqual(self.stats.start_of_week(NOW), datetime.datetime(2024, 3, 11))
        sunday = datetime.datetime(2024, 3, 17, 9, 0)
        self.assertEqual(self.stats.start_of_week(sunday), datetime.datetime(2024, 3, 11))
        self.settings.week_start = "sunday"
        self.assertEqual(self.stats.start_of_week(sunday), datetime.datetime(2024, 3, 17))
        self.assertEqual(self.stats.start_of_week(NOW), datetime.datetime(2024, 3, 10))

    def test_weekly_counts(self) -> None:
        self._completed(datetime.datetime(2024, 3, 11, 0, 0))
        self._completed(datetime.datetime(2024, 3, 12, 19, 0), weight=50)
        self._completed(datetime.datetime(2024, 3, 10, 23, 59))
        self.workouts.start_workout(now=NOW)
        self.assertEqual(self.stats.workouts_this_week(NOW), 2)
        self.assertEqual(self.stats.volume_this_week(NOW), 1500)

    def test_streak(self) -> None:
        self._completed(datetime.datetime(2024, 3, 12, 19, 0))
        self._completed(datetime.datetime(2024, 3, 5, 19, 0))
        self._completed(datetime.datetime(2024, 2, 27, 19, 0))
        self._completed(datetime.datetime(2024, 2, 13, 19, 0))
        self.assertEqual(self.stats.current_streak(NOW), 3)
        overview = self.stats.overview(NOW)
        self.assertEqual(overview["current_streak"], 3)
        self.assertEqual(overview["workouts_this_week"], 1)
        self.assertEqual(overview["volume_this_week"], 1000)

    def test_streak_needs_current_week(self) -> None:
        self._completed(datetime.datetime(2024, 3, 5, 19, 0))
        self._completed(datetime.datetime(2024, 2, 27, 19, 0))
        self.assertEqual(self.stats.current_streak(NOW), 0)

    def test_aware_now_uses_local_week(self) -> None:
        aware = datetime.datetime(2024, 3, 13, 12, 0, tzinfo=datetime.timezone.utc)
        local = aware.astimezone().replace(tzinfo=None)
        self._completed(local)
        self.assertEqual(self.stats.start_of_week(aware).tzinfo, None)
        self.assertEqual(self.stats.workouts_this_week(aware), 1)
        self.assertEqual(self.stats.volume_this_week(aware), 1000)
        self.assertEqual(self.stats.current_streak(aware), 1)

    def test_empty_store(self) -> None:
        self.assertEqual(self.stats.workouts_this_week(NOW), 0)
        self.assertEqual(self.stats.volume_this_week(NOW), 0)
        self.assertEqual(self.stats.current_streak(NOW), 0)
        self.assertEqual(self.stats.history_by_month(), {})

    def test_history_grouping_and_muscles(self) -> None:
        march = self._completed(datetime.datetime(2024, 3, 12, 19, 0))
        february = self._completed(datetime.datetime(2024, 2, 27, 19, 0))
        groups = self.stats.history_by_month()
        self.assertEqual(list(groups), ["March 2024", "February 2024"])
        self.assertEqual(groups["February 2024"], [february])
        self.assertEqual(self.stats.recent_workouts(limit=1), [march])
        self.assertEqual(
            self.stats.muscle_group_volume([march, february]), {MuscleGroup.BACK: 2000}
        )


if __name__ == "__main__":
    unittest.main()
