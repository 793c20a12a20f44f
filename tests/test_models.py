import datetime
import os
import sys
import unittest
import uuid

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import MathTools
from models import (
    Equipment,
    Exercise,
    ExerciseData,
    MuscleGroup,
    SetType,
    TemplateExercise,
    WeightUnit,
    Workout,
    WorkoutSet,
)


class ModelsTest(unittest.TestCase):
    def test_secondary_muscles_drop_primary(self) -> None:
        ex = Exercise(
            name="Bench",
            primary_muscle=MuscleGroup.CHEST,
            secondary_muscles=[MuscleGroup.CHEST, MuscleGroup.TRICEPS, MuscleGroup.TRICEPS],
            equipment=Equipment.BARBELL,
        )
        self.assertEqual(ex.secondary_muscles, [MuscleGroup.TRICEPS])

    def test_workout_duration(self) -> None:
        start = datetime.datetime(2024, 3, 1, 10, 0)
        w = Workout(started_at=start)
        self.assertIsNone(w.duration)
        self.assertEqual(w.formatted_duration, "In Progress")
        w.finish(start + datetime.timedelta(minutes=65))
        self.assertTrue(w.is_completed)
        self.assertEqual(w.duration, 3900)
        self.assertEqual(w.formatted_duration, "1h 5m")
        with self.assertRaises(ValueError):
            w.finish()

    def test_set_volume_and_completion(self) -> None:
        s = WorkoutSet(workout_exercise_id=uuid.uuid4(), weight=100, reps=5)
        self.assertEqual(s.volume, 500)
        self.assertAlmostEqual(s.estimated_1rm, 100 * 36 / 32)
        self.assertFalse(s.is_completed)
        moment = datetime.datetime(2024, 3, 1, 10, 5)
        s.complete(moment)
        self.assertTrue(s.is_completed)
        self.assertEqual(s.completed_at, moment)

    def test_template_exercise_rejects_negative_sets(self) -> None:
        with self.assertRaises(ValueError):
            TemplateExercise(template_id=uuid.uuid4(), default_set_count=-1)

    def test_enum_labels(self) -> None:
        self.assertEqual(SetType.WARMUP.short_label, "W")
        self.assertEqual(SetType.WORKING.short_label, "")
        self.assertEqual(WeightUnit.KG.display_name, "Kilograms (kg)")
        self.assertEqual(WeightUnit.LBS.to_lbs_factor, 1.0)
        self.assertAlmostEqual(WeightUnit.KG.from_lbs_factor, 0.453592)

    def test_exercise_data_fallbacks(self) -> None:
        record = ExerciseData(
            name="Odd Lift",
            primaryMuscle="Forearms",
            secondaryMuscles=["Core", "Neck"],
            equipment="Sandbag",
        )
        ex = record.to_exercise()
        self.assertEqual(ex.primary_muscle, MuscleGroup.FULL_BODY)
        self.assertEqual(ex.equipment, Equipment.OTHER)
        self.assertEqual(ex.secondary_muscles, [MuscleGroup.CORE])
        self.assertFalse(ex.is_custom)


class MathToolsTest(unittest.TestCase):
    def test_brzycki_range(self) -> None:
        self.assertEqual(MathTools.brzycki_1rm(100, 1), 100)
        self.assertEqual(MathTools.brzycki_1rm(100, 0), 100)
        self.assertEqual(MathTools.brzycki_1rm(100, 13), 100)
        self.assertAlmostEqual(MathTools.brzycki_1rm(100, 10), 100 * 36 / 27)

    def test_formatting(self) -> None:
        self.assertEqual(MathTools.format_duration(45 * 60), "45 min")
        self.assertEqual(MathTools.format_volume(1300), "1.3k")
        self.assertEqual(MathTools.format_volume(950), "950")


if __name__ == "__main__":
    unittest.main()
