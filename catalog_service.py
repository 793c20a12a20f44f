from __future__ import annotations
from typing import List, Optional

from models import Equipment, Exercise, MuscleGroup
from store import ObjectStore


class CatalogService:
    """Browse and edit the exercise catalogue."""

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def filter(
        self,
        search: str = "",
        muscle: Optional[MuscleGroup] = None,
        equipment: Optional[Equipment] = None,
    ) -> List[Exercise]:
        needle = search.strip().lower()

        def matches(exercise: Exercise) -> bool:
            if needle and needle not in exercise.name.lower():
                return False
            if muscle is not None and not (
                exercise.primary_muscle == muscle or muscle in exercise.secondary_muscles
            ):
                return False
            if equipment is not None and exercise.equipment != equipment:
                return False
            return True

        return self.store.query(Exercise, matches, sort=lambda e: e.name.lower())

    def find(self, name: str) -> Optional[Exercise]:
        matches = self.store.query(Exercise, lambda e: e.name.lower() == name.lower())
        return matches[0] if matches else None

    def add_custom(
        self,
        name: str,
        primary_muscle: MuscleGroup,
        equipment: Equipment,
        secondary_muscles: Optional[List[MuscleGroup]] = None,
        instructions: Optional[str] = None,
    ) -> Exercise:
        if not name.strip():
            raise ValueError("exercise name required")
        return self.store.create(
            Exercise(
                name=name.strip(),
                primary_muscle=primary_muscle,
                secondary_muscles=secondary_muscles or [],
                equipment=equipment,
                instructions=instructions,
                is_custom=True,
            )
        )

    def delete(self, exercise: Exercise) -> None:
        """Remove ``exercise``; logged workouts keep their sets without it."""
        self.store.delete(exercise)
