from __future__ import annotations
import logging
from typing import Optional

from catalog_service import CatalogService
from db import SettingsRepository
from history_service import HistoryService
from seed_data import load_exercises_if_needed
from stats_service import StatisticsService
from store import ObjectStore
from template_service import TemplateService
from user_settings import UserSettings
from workout_service import WorkoutService

logger = logging.getLogger(__name__)


class LiftLog:
    """Wires the store, settings and services of the workout log together."""

    def __init__(
        self,
        db_path: str = "workout.db",
        yaml_path: str = "settings.yaml",
        seed_path: Optional[str] = None,
        *,
        seed: bool = True,
    ) -> None:
        self.db_path = db_path
        self.settings_repo = SettingsRepository(db_path, yaml_path)
        self.settings = UserSettings(self.settings_repo)
        self.store = ObjectStore(db_path)
        self.history = HistoryService(self.store)
        self.statistics = StatisticsService(self.store, self.history, self.settings)
        self.templates = TemplateService(self.store)
        self.workouts = WorkoutService(self.store, self.history)
        self.catalog = CatalogService(self.store)
        if seed:
            load_exercises_if_needed(self.store, seed_path)

    def save(self) -> None:
        self.store.save()
