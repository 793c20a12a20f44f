from __future__ import annotations
import logging
import uuid
from typing import Callable, Iterable, Optional, TypeVar

from db import (
    PersistenceError,
    EntityRepository,
    ExerciseRepository,
    WorkoutRepository,
    WorkoutExerciseRepository,
    SetRepository,
    TemplateWorkoutRepository,
    TemplateExerciseRepository,
)
from models import (
    Entity,
    Exercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
    TemplateExercise,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Entity)

# entity type -> (child type, foreign key attribute on the child)
_OWNED_CHILDREN: dict[type, tuple[type, str]] = {
    Workout: (WorkoutExercise, "workout_id"),
    WorkoutExercise: (WorkoutSet, "workout_exercise_id"),
    WorkoutTemplate: (TemplateExercise, "template_id"),
}

# types holding a nullable reference to an exercise
_EXERCISE_REFERRERS = (WorkoutExercise, TemplateExercise)


class ObjectStore:
    """In-memory arena of every entity, persisted to SQLite on ``save``.

    Entities live in one dict per type keyed by id. Parent-to-children index
    maps answer relationship lookups without scanning. Deleting a parent
    explicitly deletes what it owns; deleting an exercise only clears the
    references to it so history is kept.
    """

    def __init__(self, db_path: str = "workout.db") -> None:
        self.db_path = db_path
        self._repos: dict[type, EntityRepository] = {
            Exercise: ExerciseRepository(db_path),
            Workout: WorkoutRepository(db_path),
            WorkoutExercise: WorkoutExerciseRepository(db_path),
            WorkoutSet: SetRepository(db_path),
            WorkoutTemplate: TemplateWorkoutRepository(db_path),
            TemplateExercise: TemplateExerciseRepository(db_path),
        }
        self.reload()

    def reload(self) -> None:
        """Discard unsaved changes and load every table into memory."""
        self._entities: dict[type, dict[uuid.UUID, Entity]] = {
            t: {} for t in self._repos
        }
        self._children: dict[type, dict[uuid.UUID, set[uuid.UUID]]] = {
            t: {} for t in _OWNED_CHILDREN
        }
        self._exercise_refs: dict[type, dict[uuid.UUID, set[uuid.UUID]]] = {
            t: {} for t in _EXERCISE_REFERRERS
        }
        self._indexed: dict[uuid.UUID, tuple[Optional[uuid.UUID], Optional[uuid.UUID]]] = {}
        self._deleted: dict[type, set[uuid.UUID]] = {t: set() for t in self._repos}
        for entity_type, repo in self._repos.items():
            for entity in repo.fetch_models():
                self._entities[entity_type][entity.id] = entity
        for entity_type in self._repos:
            for entity in self._entities[entity_type].values():
                self._index(entity)
        logger.debug(
            "loaded %s",
            {t.__name__: len(items) for t, items in self._entities.items()},
        )

    # index maintenance

    def _parent_of(self, entity: Entity) -> tuple[Optional[type], Optional[uuid.UUID]]:
        for parent_type, (child_type, fk) in _OWNED_CHILDREN.items():
            if isinstance(entity, child_type):
                return parent_type, getattr(entity, fk)
        return None, None

    def _index(self, entity: Entity) -> None:
        parent_type, parent_id = self._parent_of(entity)
        if parent_type is not None:
            self._children[parent_type].setdefault(parent_id, set()).add(entity.id)
        exercise_id = None
        if isinstance(entity, _EXERCISE_REFERRERS):
            exercise_id = entity.exercise_id
            if exercise_id is not None:
                refs = self._exercise_refs[type(entity)]
                refs.setdefault(exercise_id, set()).add(entity.id)
        self._indexed[entity.id] = (parent_id, exercise_id)

    def _unindex(self, entity: Entity) -> None:
        parent_id, exercise_id = self._indexed.pop(entity.id, (None, None))
        parent_type, _ = self._parent_of(entity)
        if parent_type is not None and parent_id is not None:
            self._children[parent_type].get(parent_id, set()).discard(entity.id)
        if exercise_id is not None and isinstance(entity, _EXERCISE_REFERRERS):
            self._exercise_refs[type(entity)].get(exercise_id, set()).discard(entity.id)

    # persistence collaborator API

    def create(self, entity: T) -> T:
        entity_type = type(entity)
        if entity_type not in self._entities:
            raise ValueError(f"unsupported entity type: {entity_type.__name__}")
        parent_type, parent_id = self._parent_of(entity)
        if parent_type is not None and parent_id not in self._entities[parent_type]:
            raise ValueError(f"{parent_type.__name__} {parent_id} not found")
        self._entities[entity_type][entity.id] = entity
        self._deleted[entity_type].discard(entity.id)
        self._index(entity)
        return entity

    def update(self, entity: T) -> T:
        """Re-index ``entity`` after a foreign key was changed in place."""
        if entity.id not in self._entities.get(type(entity), {}):
            raise ValueError(f"{type(entity).__name__} {entity.id} not found")
        self._unindex(entity)
        self._index(entity)
        return entity

    def delete(self, entity: Entity) -> None:
        entity_type = type(entity)
        if entity.id not in self._entities.get(entity_type, {}):
            return
        if entity_type in _OWNED_CHILDREN:
            for child in self.children(entity):
                self.delete(child)
            self._children[entity_type].pop(entity.id, None)
        if entity_type is Exercise:
            self._clear_exercise_refs(entity.id)
        self._unindex(entity)
        del self._entities[entity_type][entity.id]
        self._deleted[entity_type].add(entity.id)

    def _clear_exercise_refs(self, exercise_id: uuid.UUID) -> None:
        for referrer_type in _EXERCISE_REFERRERS:
            ids = self._exercise_refs[referrer_type].pop(exercise_id, set())
            for ref_id in ids:
                ref = self._entities[referrer_type][ref_id]
                ref.exercise_id = None
                parent_id, _ = self._indexed[ref_id]
                self._indexed[ref_id] = (parent_id, None)

    def save(self) -> None:
        """Write the whole arena in one transaction.

        On failure nothing is committed and the pending deletions are kept,
        so calling ``save`` again retries the same work.
        """
        repo = self._repos[Exercise]
        try:
            with repo.transaction() as conn:
                for entity_type, entity_repo in self._repos.items():
                    entity_repo.delete_ids(conn, self._deleted[entity_type])
                    entity_repo.upsert_many(conn, self._entities[entity_type].values())
        except PersistenceError:
            logger.exception("saving %s failed", self.db_path)
            raise
        for deleted in self._deleted.values():
            deleted.clear()

    def query(
        self,
        entity_type: type[T],
        predicate: Optional[Callable[[T], bool]] = None,
        sort: Optional[Callable[[T], object]] = None,
        reverse: bool = False,
    ) -> list[T]:
        items: Iterable[T] = self._entities[entity_type].values()
        if predicate is not None:
            items = [i for i in items if predicate(i)]
        else:
            items = list(items)
        if sort is not None:
            items = sorted(items, key=sort, reverse=reverse)
        return items

    def get(self, entity_type: type[T], entity_id: uuid.UUID) -> Optional[T]:
        return self._entities[entity_type].get(entity_id)

    def count(self, entity_type: type) -> int:
        return len(self._entities[entity_type])

    # relationships

    def children(self, parent: Entity) -> list[Entity]:
        """Owned children of ``parent`` in their stored order."""
        child_type, _fk = _OWNED_CHILDREN[type(parent)]
        ids = self._children[type(parent)].get(parent.id, set())
        items = [self._entities[child_type][i] for i in ids]
        return sorted(items, key=lambda c: c.order)

    def exercises_for(self, workout: Workout) -> list[WorkoutExercise]:
        return self.children(workout)

    def sets_for(self, workout_exercise: WorkoutExercise) -> list[WorkoutSet]:
        return self.children(workout_exercise)

    def template_exercises_for(self, template: WorkoutTemplate) -> list[TemplateExercise]:
        return self.children(template)

    def workout_exercises_of(self, exercise: Exercise) -> list[WorkoutExercise]:
        ids = self._exercise_refs[WorkoutExercise].get(exercise.id, set())
        return [self._entities[WorkoutExercise][i] for i in ids]

    def workout_of(self, workout_exercise: WorkoutExercise) -> Optional[Workout]:
        return self.get(Workout, workout_exercise.workout_id)

    def exercise_of(
        self, item: WorkoutExercise | TemplateExercise
    ) -> Optional[Exercise]:
        if item.exercise_id is None:
            return None
        return self.get(Exercise, item.exercise_id)
