"""User profile domain models."""

import re

from pydantic import BaseModel, Field, field_validator

from src.core.config import constants


MAX_USERNAME_LENGTH = 64
_PEAK_HOUR_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ProductivitySettings(BaseModel):
    """Per-user working rhythm preferences."""

    peak_hours: list[str] = Field(
        default_factory=lambda: list(constants.DEFAULT_PEAK_HOURS),
        description="Times of day the user focuses best (HH:MM)",
    )
    work_days: list[int] = Field(
        default_factory=lambda: list(constants.DEFAULT_WORK_DAYS),
        description="ISO weekdays the user works (1 = Monday, 7 = Sunday)",
    )
    focus_duration: int = Field(
        default=constants.DEFAULT_FOCUS_DURATION_MINUTES,
        description="Length of one focus session in minutes",
    )

    @field_validator("peak_hours")
    @classmethod
    def validate_peak_hours(cls, v: list[str]) -> list[str]:
        for hour in v:
            if not _PEAK_HOUR_PATTERN.match(hour):
                msg = f"Peak hour must be HH:MM, got {hour!r}"
                raise ValueError(msg)
        return sorted(set(v))

    @field_validator("work_days")
    @classmethod
    def validate_work_days(cls, v: list[int]) -> list[int]:
        if any(day < 1 or day > 7 for day in v):  # noqa: PLR2004
            msg = "Work days must be between 1 (Monday) and 7 (Sunday)"
            raise ValueError(msg)
        return sorted(set(v))

    @field_validator("focus_duration")
    @classmethod
    def validate_focus_duration(cls, v: int) -> int:
        if not constants.MIN_FOCUS_DURATION_MINUTES <= v <= constants.MAX_FOCUS_DURATION_MINUTES:
            msg = (
                f"Focus duration must be between {constants.MIN_FOCUS_DURATION_MINUTES} "
                f"and {constants.MAX_FOCUS_DURATION_MINUTES} minutes"
            )
            raise ValueError(msg)
        return v


class Profile(BaseModel):
    """Public profile of a user account."""

    id: str = Field(..., description="User ID")
    username: str = Field(default="", description="Display name")
    avatar_url: str | None = Field(default=None, description="Avatar image URL")
    productivity_settings: ProductivitySettings | None = Field(default=None, description="Saved preferences")

    @field_validator("avatar_url", "productivity_settings", mode="before")
    @classmethod
    def _blank_to_none(cls, v: object) -> object:
        return None if v in ("", {}) else v

    @field_validator("username", mode="before")
    @classmethod
    def _none_to_blank(cls, v: object) -> object:
        return "" if v is None else v
