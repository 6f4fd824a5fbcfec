# backend/rehome_ops/core/config.py
import logging
import os
from typing import Annotated, List, Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import pytz

from .constants import DEFAULT_CITY_UNIVERSE

logger = logging.getLogger(__name__)

load_dotenv()


class Settings(BaseSettings):
    environment: Literal["local", "preview", "prod"] = Field(
        default="local", description="Deployment environment"
    )
    database_url: str = Field(
        default="sqlite:///./rehome_ops.db",
        description="SQLAlchemy URL of the schedule store",
    )
    log_level: str = Field(default="INFO")

    # Comma-separated in env, parsed by _parse_city_universe
    city_universe: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: list(DEFAULT_CITY_UNIVERSE),
        description="All recognized service cities (comma-separated in env)",
    )
    business_timezone: str = Field(
        default="Europe/Amsterdam",
        description="Timezone used to decide what 'today' is for the calendar",
    )

    # Bulk assignment safety rails
    schedule_horizon_same_year: bool = Field(
        default=True,
        description="Require bulk ranges to start and end in the same calendar year",
    )
    schedule_horizon_max_days: int = Field(
        default=366, ge=1, description="Maximum number of dates in one bulk assignment"
    )
    max_calendar_year_offset: int = Field(
        default=10, ge=0, description="How far from the current year calendar reads may go"
    )

    is_testing: bool = Field(default=False)

    # Use ConfigDict instead of Config class (Pydantic V2 style)
    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("city_universe", mode="before")
    @classmethod
    def _parse_city_universe(cls, value: object) -> List[str]:
        if value is None:
            return []
        if isinstance(value, str):
            items = [token.strip() for token in value.split(",") if token.strip()]
        elif isinstance(value, (list, tuple, set, frozenset)):
            items = [str(token).strip() for token in value if str(token).strip()]
        else:
            raise ValueError("city_universe must be a comma-separated string or list")
        # Preserve configured order, drop repeats
        return list(dict.fromkeys(items))

    @field_validator("business_timezone")
    @classmethod
    def _validate_timezone(cls, value: str) -> str:
        try:
            pytz.timezone(value)
        except pytz.UnknownTimeZoneError as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unsupported log level: {value}")
        return normalized


settings = Settings()
logger.info(
    "[CONFIG] Schedule configuration: environment=%s cities=%d timezone=%s",
    settings.environment,
    len(settings.city_universe),
    settings.business_timezone,
)
