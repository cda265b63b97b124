"""
Service configuration loaded with Pydantic Settings.

Values come from environment variables or a ``.env`` file. Besides the Flask
essentials, the settings carry the lending limits the calculators fall back
to when a request does not supply its own.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from mortgage_calculators.models.equity import MAX_CASH_OUT_LTV
from mortgage_calculators.models.loan import ARM_RATE_CEILING
from mortgage_calculators.models.loan_programs import CONFORMING_LOAN_LIMIT

PLACEHOLDER_SECRET_KEY = "your-secret-key-here-change-in-production"
APP_ENVIRONMENTS = {"development", "testing", "production"}
LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class Settings(BaseSettings):
    """Settings for the calculators service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    app_env: str = Field(default="development", alias="APP_ENV")
    secret_key: str = Field(..., alias="SECRET_KEY")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Lending limits used as calculator defaults
    conforming_loan_limit: float = Field(
        default=CONFORMING_LOAN_LIMIT, gt=0, alias="CONFORMING_LOAN_LIMIT"
    )
    max_cash_out_ltv: float = Field(
        default=MAX_CASH_OUT_LTV, gt=0, le=1, alias="MAX_CASH_OUT_LTV"
    )
    arm_rate_ceiling: float = Field(
        default=ARM_RATE_CEILING, gt=0, le=100, alias="ARM_RATE_CEILING"
    )

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v):
        """Reject an empty or placeholder SECRET_KEY."""
        if not v or v == PLACEHOLDER_SECRET_KEY:
            raise ValueError("SECRET_KEY must be set to a secure value")
        return v

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v):
        if v not in APP_ENVIRONMENTS:
            raise ValueError(f"APP_ENV must be one of {APP_ENVIRONMENTS}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Normalise LOG_LEVEL to upper case and check it is a logging level."""
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {LOG_LEVELS}")
        return level


def get_settings(env_file: Optional[str] = None) -> Settings:
    """Load settings, optionally from a specific env file."""
    if env_file is not None:
        return Settings(_env_file=env_file)
    return Settings()


_settings: Optional[Settings] = None


def get_global_settings() -> Settings:
    """Return the process-wide settings, loading them on first use."""
    global _settings
    if _settings is None:
        _settings = get_settings()
    return _settings


def reset_global_settings() -> None:
    """Drop the cached settings so the next call reloads them."""
    global _settings
    _settings = None
