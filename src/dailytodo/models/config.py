"""Configuration models."""

import calendar
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TODO_FILE = Path.home() / ".daily-todo.json"

WEEKDAYS = {name.lower(): index for index, name in enumerate(calendar.day_name)}


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    All settings are prefixed with DAILYTODO_ (e.g., DAILYTODO_TODO_FILE).
    """

    model_config = SettingsConfigDict(
        env_prefix="DAILYTODO_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    todo_file: Path = Field(default=DEFAULT_TODO_FILE, description="Path of the JSON todo document")

    # DIDs feed
    lookback_days: int = Field(default=7, ge=1, description="Days of git history to include")
    week_start: str = Field(default="sunday", description="First day of the week for date buckets")
    cwd_fallback: bool = Field(
        default=True,
        description="Query the current directory when no repositories are configured",
    )
    git_timeout: Optional[float] = Field(
        default=10.0, description="Seconds before a git query is killed (None disables)"
    )

    # Logging
    log_level: str = "WARNING"

    @field_validator("week_start")
    @classmethod
    def _check_week_start(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in WEEKDAYS:
            raise ValueError(f"Unknown weekday: {value}")
        return value

    @property
    def week_start_day(self) -> int:
        """Week start as a weekday number (Monday is 0)."""
        return WEEKDAYS[self.week_start]
