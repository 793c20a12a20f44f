from typing import Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator


class SettingsSchema(BaseModel):
    model_config = ConfigDict(extra="allow")

    weight_unit: Literal["lbs", "kg"] = "lbs"
    default_rest_duration: float = 90.0
    haptic_feedback_enabled: bool = True
    sound_enabled: bool = True
    appearance_mode: Literal["light", "dark", "system"] = "light"
    week_start: Literal["monday", "sunday"] = "monday"
    app_version: str = "1.0.0"

    @field_validator("app_version", mode="before")
    @classmethod
    def _version_text(cls, value):
        return str(value)


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
