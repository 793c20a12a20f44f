from __future__ import annotations
import datetime
import logging
from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from models import (
    Exercise,
    TemplateExercise,
    Workout,
    WorkoutExercise,
    WorkoutSet,
    WorkoutTemplate,
)
from store import ObjectStore

logger = logging.getLogger(__name__)


class TemplateItem(BaseModel):
    """One exercise row of the template editor."""

    exercise: Optional[Exercise] = None
    set_count: int = Field(default=3, ge=0)
    default_weight: Optional[float] = None
    default_reps: Optional[int] = None
    notes: Optional[str] = None


class TemplateService:
    """Create, edit and start workouts from templates."""

    def __init__(self, store: ObjectStore) -> None:
        self.store = store

    def instantiate(
        self, template: WorkoutTemplate, now: Optional[datetime.datetime] = None
    ) -> Workout:
        """Start a new workout pre-filled from ``template``.

        Each template exercise becomes a workout exercise with exactly
        ``default_set_count`` empty sets; a count of zero leaves it without
        sets. The template's ``last_used_at`` is stamped with ``now``.
        """
        now = now or datetime.datetime.now()
        workout = self.store.create(Workout(name=template.name, started_at=now))
        for te in self.store.template_exercises_for(template):
            we = self.store.create(
                WorkoutExercise(
                    workout_id=workout.id,
                    exercise_id=te.exercise_id,
                    order=te.order,
                )
            )
            for position in range(te.default_set_count):
                self.store.create(
                    WorkoutSet(
                        workout_exercise_id=we.id,
                        order=position,
                        weight=te.default_weight or 0.0,
                        reps=te.default_reps or 0,
                    )
                )
        template.last_used_at = now
        logger.info("started workout %s from template %r", workout.id, template.name)
        return workout

    def save_template(
        self,
        name: str,
        notes: Optional[str],
        items: Iterable[TemplateItem],
        template: Optional[WorkoutTemplate] = None,
    ) -> WorkoutTemplate:
        """Create a template, or replace the exercises of ``template``."""
        if not name.strip():
            raise ValueError("template name required")
        notes = notes if notes else None
        if template is None:
            template = self.store.create(WorkoutTemplate(name=name, notes=notes))
        else:
            template.name = name
            template.notes = notes
            for old in self.store.template_exercises_for(template):
                self.store.delete(old)
        for position, item in enumerate(items):
            self.store.create(
                TemplateExercise(
                    template_id=template.id,
                    exercise_id=item.exercise.id if item.exercise else None,
                    order=position,
                    default_set_count=item.set_count,
                    default_weight=item.default_weight,
                    default_reps=item.default_reps,
                    notes=item.notes,
                )
            )
        return template

    def delete_template(self, template: WorkoutTemplate) -> None:
        self.store.delete(template)

    def templates(self) -> List[WorkoutTemplate]:
        """All templates, most recently used first and never-used last."""
        used = self.store.query(
            WorkoutTemplate,
            lambda t: t.last_used_at is not None,
            sort=lambda t: t.last_used_at,
            reverse=True,
        )
        unused = self.store.query(
            WorkoutTemplate,
            lambda t: t.last_used_at is None,
            sort=lambda t: t.created_at,
        )
        return used + unused

    def find(self, name: str) -> Optional[WorkoutTemplate]:
        matches = self.store.query(
            WorkoutTemplate, lambda t: t.name.lower() == name.lower()
        )
        return matches[0] if matches else None

    def total_sets(self, template: WorkoutTemplate) -> int:
        return sum(te.default_set_count for te in self.store.template_exercises_for(template))

    def muscle_groups_summary(self, template: WorkoutTemplate) -> str:
        muscles: list[str] = []
        for te in self.store.template_exercises_for(template):
            exercise = self.store.exercise_of(te)
            if exercise is None:
                continue
            if exercise.primary_muscle.value not in muscles:
                muscles.append(exercise.primary_muscle.value)
        if not muscles:
            return "No exercises"
        if len(muscles) <= 2:
            return ", ".join(muscles)
        return f"{muscles[0]}, {muscles[1]} +{len(muscles) - 2}"
