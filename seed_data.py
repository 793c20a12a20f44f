import json
import logging
import os
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from exercise_catalog import DATA_PATH
from models import Equipment, Exercise, ExerciseData, MuscleGroup
from store import ObjectStore

logger = logging.getLogger(__name__)

DEFAULT_SEED_PATH = DATA_PATH

_RECORDS = TypeAdapter(List[ExerciseData])


def load_exercises_if_needed(store: ObjectStore, path: Optional[str] = None) -> int:
    """Import the bundled exercise catalogue into an empty store.

    Returns the number of exercises imported. Nothing happens when the
    store already holds exercises. A missing or malformed file is logged
    and leaves the catalogue empty.
    """
    existing = store.count(Exercise)
    if existing:
        logger.info("exercises already loaded: %d exercises", existing)
        return 0

    path = path or DEFAULT_SEED_PATH
    if not os.path.exists(path):
        logger.error("exercise data file %s not found", path)
        return 0

    try:
        with open(path, "r", encoding="utf-8") as f:
            records = _RECORDS.validate_python(json.load(f))
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        logger.error("failed to load exercises from %s: %s", path, e)
        return 0

    for record in records:
        store.create(record.to_exercise())
    store.save()
    logger.info("loaded %d exercises from %s", len(records), path)
    return len(records)


def sample_exercise() -> Exercise:
    return Exercise(
        name="Barbell Bench Press",
        primary_muscle=MuscleGroup.CHEST,
        secondary_muscles=[MuscleGroup.TRICEPS, MuscleGroup.SHOULDERS],
        equipment=Equipment.BARBELL,
        instructions="Lie on a flat bench, grip the bar slightly wider than shoulder-width, lower to chest, press up.",
    )


def sample_exercises() -> List[Exercise]:
    return [
        sample_exercise(),
        Exercise(name="Dumbbell Row", primary_muscle=MuscleGroup.BACK, secondary_muscles=[MuscleGroup.BICEPS], equipment=Equipment.DUMBBELL),
        Exercise(name="Barbell Squat", primary_muscle=MuscleGroup.QUADS, secondary_muscles=[MuscleGroup.GLUTES, MuscleGroup.HAMSTRINGS], equipment=Equipment.BARBELL),
        Exercise(name="Overhead Press", primary_muscle=MuscleGroup.SHOULDERS, secondary_muscles=[MuscleGroup.TRICEPS], equipment=Equipment.BARBELL),
        Exercise(name="Pull-Up", primary_muscle=MuscleGroup.BACK, secondary_muscles=[MuscleGroup.BICEPS], equipment=Equipment.BODYWEIGHT),
        Exercise(name="Romanian Deadlift", primary_muscle=MuscleGroup.HAMSTRINGS, secondary_muscles=[MuscleGroup.BACK, MuscleGroup.GLUTES], equipment=Equipment.BARBELL),
    ]
