import argparse
import logging
import shutil
import sys
from typing import Optional

from algorithms import MathTools, WeightConverter
from app import LiftLog
from db import PersistenceError
from models import Equipment, Exercise, MuscleGroup


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def seed(db_path: str, yaml_path: str, seed_path: Optional[str] = None) -> None:
    app = LiftLog(db_path, yaml_path, seed_path)
    print(f"{app.store.count(Exercise)} exercises in catalogue")


def list_exercises(
    db_path: str,
    yaml_path: str,
    search: str = "",
    muscle: Optional[str] = None,
    equipment: Optional[str] = None,
) -> None:
    app = LiftLog(db_path, yaml_path)
    found = app.catalog.filter(
        search,
        MuscleGroup(muscle) if muscle else None,
        Equipment(equipment) if equipment else None,
    )
    for exercise in found:
        print(f"{exercise.name} ({exercise.primary_muscle.value}, {exercise.equipment.value})")


def list_templates(db_path: str, yaml_path: str) -> None:
    app = LiftLog(db_path, yaml_path)
    for template in app.templates.templates():
        print(
            f"{template.name}: {app.templates.total_sets(template)} sets, "
            f"{app.templates.muscle_groups_summary(template)}"
        )


def start_from_template(db_path: str, yaml_path: str, name: str) -> None:
    app = LiftLog(db_path, yaml_path)
    template = app.templates.find(name)
    if template is None:
        raise ValueError(f"template {name!r} not found")
    workout = app.templates.instantiate(template)
    app.save()
    print(f"Started {workout.name} with {app.history.total_sets(workout)} sets")


def summary(db_path: str, yaml_path: str) -> None:
    app = LiftLog(db_path, yaml_path)
    stats = app.statistics.overview()
    print(f"Workouts this week: {stats['workouts_this_week']}")
    print(f"Volume this week: {MathTools.format_volume(stats['volume_this_week'])} lbs")
    print(f"Current streak: {stats['current_streak']} weeks")


def exercise_history(db_path: str, yaml_path: str, name: str) -> None:
    app = LiftLog(db_path, yaml_path)
    exercise = app.catalog.find(name)
    if exercise is None:
        raise ValueError(f"exercise {name!r} not found")
    fmt = app.settings
    previous = app.history.previous_sets(exercise)
    if previous:
        print("Previous: " + ", ".join(fmt.format_set(p.weight, p.reps) for p in previous))
    for point in app.history.progression_data(exercise):
        print(
            f"{point.date.date().isoformat()}  {fmt.format_weight_with_unit(point.max_weight)}"
            f"  {point.total_sets} sets  {point.total_reps} reps"
        )
    best = app.history.personal_best(exercise)
    print(f"Personal best: {fmt.format_weight_with_unit(best) if best is not None else '-'}")


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Workout log utilities")
    parser.add_argument("--verbose", action="store_true")
    sub = parser.add_subparsers(dest="cmd", required=True)

    def with_paths(p: argparse.ArgumentParser) -> argparse.ArgumentParser:
        p.add_argument("--db", default="workout.db")
        p.add_argument("--yaml", default="settings.yaml")
        return p

    sd = with_paths(sub.add_parser("seed"))
    sd.add_argument("--data", default=None)

    ex = with_paths(sub.add_parser("exercises"))
    ex.add_argument("--search", default="")
    ex.add_argument("--muscle", choices=[m.value for m in MuscleGroup])
    ex.add_argument("--equipment", choices=[e.value for e in Equipment])

    with_paths(sub.add_parser("templates"))

    start = with_paths(sub.add_parser("start"))
    start.add_argument("--template", required=True)

    with_paths(sub.add_parser("summary"))

    hist = with_paths(sub.add_parser("history"))
    hist.add_argument("exercise")

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lbs"], required=True)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default="workout.db")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default="workout.db")

    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.cmd == "seed":
            seed(args.db, args.yaml, args.data)
        elif args.cmd == "exercises":
            list_exercises(args.db, args.yaml, args.search, args.muscle, args.equipment)
        elif args.cmd == "templates":
            list_templates(args.db, args.yaml)
        elif args.cmd == "start":
            start_from_template(args.db, args.yaml, args.template)
        elif args.cmd == "summary":
            summary(args.db, args.yaml)
        elif args.cmd == "history":
            exercise_history(args.db, args.yaml, args.exercise)
        elif args.cmd == "convert":
            if args.unit == "kg":
                print(f"{args.weight} kg = {WeightConverter.format_value(WeightConverter.to_lbs(args.weight, 'kg'))} lbs")
            else:
                print(f"{args.weight} lbs = {WeightConverter.format_weight(args.weight, 'kg')} kg")
        elif args.cmd == "backup":
            backup_db(args.db, args.out)
        elif args.cmd == "restore":
            restore_db(args.src, args.db)
    except (ValueError, PersistenceError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
