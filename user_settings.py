from __future__ import annotations
import logging

from algorithms import WeightConverter
from db import SettingsRepository
from models import AppearanceMode, WeightUnit

logger = logging.getLogger(__name__)

DEFAULT_REST_DURATION = 90.0


class UserSettings:
    """User preferences with unit conversion and weight formatting.

    Values are read from the settings repository by ``load`` and written
    back as soon as a property is assigned. Stored weights are always
    pounds, so switching the unit only changes how weights are displayed.
    """

    def __init__(self, repo: SettingsRepository) -> None:
        self.repo = repo
        self._weight_unit = WeightUnit.LBS
        self._default_rest_duration = DEFAULT_REST_DURATION
        self._haptic_feedback_enabled = True
        self._sound_enabled = True
        self._appearance_mode = AppearanceMode.LIGHT
        self._week_start = "monday"
        self.load()

    def load(self) -> None:
        unit = self.repo.get_text("weight_unit", WeightUnit.LBS.value)
        try:
            self._weight_unit = WeightUnit(unit)
        except ValueError:
            logger.warning("unknown weight unit %r, using lbs", unit)
            self._weight_unit = WeightUnit.LBS

        rest = self.repo.get_float("default_rest_duration", DEFAULT_REST_DURATION)
        self._default_rest_duration = rest if rest > 0 else DEFAULT_REST_DURATION

        self._haptic_feedback_enabled = self.repo.get_bool("haptic_feedback_enabled", True)
        self._sound_enabled = self.repo.get_bool("sound_enabled", True)

        mode = self.repo.get_text("appearance_mode", AppearanceMode.LIGHT.value)
        try:
            self._appearance_mode = AppearanceMode(mode)
        except ValueError:
            self._appearance_mode = AppearanceMode.LIGHT

        week_start = self.repo.get_text("week_start", "monday")
        self._week_start = week_start if week_start in ("monday", "sunday") else "monday"

    @property
    def weight_unit(self) -> WeightUnit:
        return self._weight_unit

    @weight_unit.setter
    def weight_unit(self, unit: WeightUnit | str) -> None:
        self._weight_unit = WeightUnit(unit)
        self.repo.set_text("weight_unit", self._weight_unit.value)

    @property
    def default_rest_duration(self) -> float:
        """Rest countdown length in seconds handed to the timer."""
        return self._default_rest_duration

    @default_rest_duration.setter
    def default_rest_duration(self, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("rest duration must be positive")
        self._default_rest_duration = float(seconds)
        self.repo.set_float("default_rest_duration", self._default_rest_duration)

    @property
    def haptic_feedback_enabled(self) -> bool:
        return self._haptic_feedback_enabled

    @haptic_feedback_enabled.setter
    def haptic_feedback_enabled(self, enabled: bool) -> None:
        self._haptic_feedback_enabled = bool(enabled)
        self.repo.set_bool("haptic_feedback_enabled", self._haptic_feedback_enabled)

    @property
    def sound_enabled(self) -> bool:
        return self._sound_enabled

    @sound_enabled.setter
    def sound_enabled(self, enabled: bool) -> None:
        self._sound_enabled = bool(enabled)
        self.repo.set_bool("sound_enabled", self._sound_enabled)

    @property
    def appearance_mode(self) -> AppearanceMode:
        return self._appearance_mode

    @appearance_mode.setter
    def appearance_mode(self, mode: AppearanceMode | str) -> None:
        self._appearance_mode = AppearanceMode(mode)
        self.repo.set_text("appearance_mode", self._appearance_mode.value)

    @property
    def week_start(self) -> str:
        return self._week_start

    @week_start.setter
    def week_start(self, day: str) -> None:
        if day not in ("monday", "sunday"):
            raise ValueError("week_start must be 'monday' or 'sunday'")
        self._week_start = day
        self.repo.set_text("week_start", day)

    @property
    def first_weekday(self) -> int:
        """Weekday number (Monday is 0) on which a week begins."""
        return 0 if self._week_start == "monday" else 6

    def convert_to_lbs(self, value: float) -> float:
        return WeightConverter.to_lbs(value, self._weight_unit.value)

    def convert_from_lbs(self, weight_lbs: float) -> float:
        return WeightConverter.from_lbs(weight_lbs, self._weight_unit.value)

    def format_weight(self, weight_lbs: float) -> str:
        return WeightConverter.format_weight(weight_lbs, self._weight_unit.value)

    def format_weight_with_unit(self, weight_lbs: float) -> str:
        return f"{self.format_weight(weight_lbs)} {self._weight_unit.value}"

    def format_set(self, weight_lbs: float, reps: int) -> str:
        return f"{self.format_weight(weight_lbs)} × {reps}"
