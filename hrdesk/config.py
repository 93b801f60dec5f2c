"""Application settings and configuration helpers."""
from functools import lru_cache
import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


class Settings(BaseModel):
    """Runtime configuration loaded from environment variables."""

    database_url: str = Field(default="sqlite:///./hrdesk.db", alias="HRDESK_DATABASE_URL")
    timezone: str = Field(default="Asia/Manila", alias="HRDESK_TIMEZONE")
    log_level: str = Field(default="INFO", alias="HRDESK_LOG_LEVEL")
    default_leave_days: int = Field(default=15, ge=0, alias="HRDESK_DEFAULT_LEAVE_DAYS")
    max_carry_over_days: int = Field(default=5, ge=0, alias="HRDESK_MAX_CARRY_OVER_DAYS")
    min_overtime_minutes: int = Field(default=30, ge=0, alias="HRDESK_MIN_OVERTIME_MINUTES")
    max_daily_overtime_hours: float = Field(default=4, gt=0, alias="HRDESK_MAX_DAILY_OVERTIME_HOURS")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @field_validator("timezone")
    @classmethod
    def _known_timezone(cls, value: str) -> str:
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"unknown timezone {value!r}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance built from the environment."""

    env = {
        field.alias: os.environ[field.alias]
        for field in Settings.model_fields.values()
        if field.alias and field.alias in os.environ
    }
    return Settings.model_validate(env)
