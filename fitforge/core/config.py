"""Application configuration from environment variables."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from fitforge.core.enums import DecayCurve
from fitforge.schemas.policy import FatiguePolicy


class Settings(BaseSettings):
    """Settings loaded from environment (and .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "FitForge Engine"
    debug: bool = False
    environment: str = "development"

    # Fatigue / recovery policy
    readiness_threshold: float = Field(40.0, ge=0, le=100)  # < threshold = ready to train
    caution_threshold: float = Field(80.0, ge=0, le=100)  # >= threshold = don't train
    decay_curve: DecayCurve = DecayCurve.LINEAR
    recovery_days_to_full: float = Field(5.0, gt=0)  # linear curve
    recovery_half_life_hours: float = Field(36.0, gt=0)  # exponential curve
    failure_multiplier: float = Field(1.25, ge=1.0)
    default_baseline_volume: float = Field(10000.0, gt=0)  # cold-start baseline (lbs)
    primary_activation_threshold: float = Field(0.5, gt=0, le=1)
    strict_invariants: bool = False  # raise ComputationInvariantViolation instead of reporting it

    # Baselines / progression
    max_baseline_increase_percent: float = 50.0
    progression_step_percent: float = 3.0

    # Database (PostgreSQL in production; override with any async URL, e.g. sqlite+aiosqlite)
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "fitforge"
    database_password: str = ""  # Set in .env - never commit
    database_name: str = "fitforge"
    database_ssl_mode: str = "prefer"
    database_url_override: str | None = None

    # Pool (ignored for SQLite)
    database_pool_size: int = 5
    database_max_overflow: int = 10

    def _build_db_url(self, scheme: str = "postgresql", ssl_query: str = "sslmode=prefer") -> str:
        user = quote_plus(self.database_user)
        password = quote_plus(self.database_password)
        return (
            f"{scheme}://{user}:{password}@{self.database_host}:{self.database_port}"
            f"/{self.database_name}?{ssl_query}"
        )

    @property
    def database_url(self) -> str:
        """Synchronous URL for Alembic and tooling."""
        if self.database_url_override:
            return self.database_url_override.replace("+aiosqlite", "").replace("+asyncpg", "")
        return self._build_db_url(scheme="postgresql", ssl_query=f"sslmode={self.database_ssl_mode}")

    @property
    def async_database_url(self) -> str:
        """Async URL for the SQL store (asyncpg driver)."""
        if self.database_url_override:
            return self.database_url_override
        return self._build_db_url(scheme="postgresql+asyncpg", ssl_query=f"ssl={self.database_ssl_mode}")

    def fatigue_policy(self) -> FatiguePolicy:
        """Immutable policy object handed to the pure fatigue functions."""
        return FatiguePolicy(
            readiness_threshold=self.readiness_threshold,
            caution_threshold=self.caution_threshold,
            decay_curve=self.decay_curve,
            recovery_days_to_full=self.recovery_days_to_full,
            recovery_half_life_hours=self.recovery_half_life_hours,
            failure_multiplier=self.failure_multiplier,
            default_baseline_volume=self.default_baseline_volume,
            primary_activation_threshold=self.primary_activation_threshold,
            strict_invariants=self.strict_invariants,
        )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
