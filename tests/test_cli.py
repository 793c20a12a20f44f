import contextlib
import datetime
import io
import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from app import LiftLog
from cli import main
from models import Workout
from template_service import TemplateItem


class CLITest(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_cli.db"
        self.yaml_path = "test_cli.yaml"
        self._cleanup()
        self.paths = ["--db", self.db_path, "--yaml", self.yaml_path]

    def tearDown(self) -> None:
        self._cleanup()

    def _cleanup(self) -> None:
        for path in ["test_cli.db", "test_cli.yaml", "test_cli_backup.db"]:
            if os.path.exists(path):
                os.remove(path)

    def _run(self, *argv: str):
        out = io.StringIO()
        err = io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main(list(argv))
        return code, out.getvalue(), err.getvalue()

    def test_seed_and_list(self) -> None:
        code, out, _ = self._run("seed", *self.paths)
        self.assertEqual(code, 0)
        self.assertIn("22 exercises", out)
        code, out, _ = self._run("exercises", *self.paths, "--muscle", "Calves")
        self.assertEqual(out.strip(), "Standing Calf Raise (Calves, Machine)")

    def test_start_from_template(self) -> None:
        app = LiftLog(self.db_path, self.yaml_path)
        bench = app.catalog.find("Barbell Bench Press")
        app.templates.save_template("Push", None, [TemplateItem(exercise=bench)])
        app.save()

        code, out, _ = self._run("templates", *self.paths)
        self.assertIn("Push: 3 sets, Chest", out)
        code, out, _ = self._run("start", *self.paths, "--template", "push")
        self.assertEqual(code, 0)
        self.assertIn("3 sets", out)
        self.assertEqual(LiftLog(self.db_path, self.yaml_path).store.count(Workout), 1)

        code, _, err = self._run("start", *self.paths, "--template", "Legs")
        self.assertEqual(code, 1)
        self.assertIn("not found", err)

    def test_summary_and_history(self) -> None:
        app = LiftLog(self.db_path, self.yaml_path)
        squat = app.catalog.find("Barbell Squat")
        workout = app.workouts.start_workout("Legs")
        we = app.workouts.add_exercise(workout, squat)
        first = app.store.sets_for(we)[0]
        app.workouts.complete_set(app.workouts.update_set(first, weight=225, reps=5))
        app.workouts.finish(workout, now=workout.started_at + datetime.timedelta(minutes=1))
        app.save()

        code, out, _ = self._run("summary", *self.paths)
        self.assertEqual(code, 0)
        self.assertIn("Workouts this week: 1", out)
        self.assertIn("Current streak: 1 weeks", out)

        code, out, _ = self._run("history", *self.paths, "Barbell Squat")
        self.assertIn("Previous: 225 × 5", out)
        self.assertIn("Personal best: 225 lbs", out)

    def test_convert(self) -> None:
        _, out, _ = self._run("convert", "--weight", "100", "--unit", "kg")
        self.assertEqual(out.strip(), "100.0 kg = 220.5 lbs")
        _, out, _ = self._run("convert", "--weight", "100", "--unit", "lbs")
        self.assertEqual(out.strip(), "100.0 lbs = 45.4 kg")

    def test_backup_restore(self) -> None:
        LiftLog(self.db_path, self.yaml_path)
        self._run("backup", "--db", self.db_path, "--out", "test_cli_backup.db")
        self.assertTrue(os.path.exists("test_cli_backup.db"))
        os.remove(self.db_path)
        self._run("restore", "--in", "test_cli_backup.db", "--db", self.db_path)
        self.assertEqual(len(LiftLog(self.db_path, self.yaml_path, seed=False).catalog.filter()), 22)


if __name__ == "__main__":
    unittest.main()
