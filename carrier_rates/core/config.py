"""
Application configuration

Loaded once at startup and validated eagerly:
- UPS credentials have no defaults (startup fails if not set)
- Every problem is reported at once, not one per restart
- DEBUG is forbidden in production
"""
import logging
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# UPS API URLs
UPS_PRODUCTION_URL = "https://onlinetools.ups.com"
UPS_SANDBOX_URL = "https://wwwcie.ups.com"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class ConfigurationError(RuntimeError):
    """Raised when process configuration is missing or invalid."""


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # App - defaults are PRODUCTION safe
    APP_NAME: str = "Carrier Rates"
    ENVIRONMENT: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # UPS - NO DEFAULT CREDENTIALS (will fail if not set)
    UPS_CLIENT_ID: str = Field(..., min_length=1)
    UPS_CLIENT_SECRET: str = Field(..., min_length=1)
    UPS_ACCOUNT_NUMBER: str = Field(..., min_length=1)
    UPS_BASE_URL: Optional[str] = None  # Overrides UPS_USE_SANDBOX when set
    UPS_USE_SANDBOX: bool = False
    UPS_NEGOTIATED_RATES: bool = False
    UPS_TRANSACTION_SOURCE: str = "carrier-rates"

    # HTTP
    REQUEST_TIMEOUT_SECONDS: float = Field(10.0, gt=0)

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            v = v.strip().upper()
        if v not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return v

    @field_validator("UPS_BASE_URL", mode="before")
    @classmethod
    def validate_base_url(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if not str(v).startswith(("http://", "https://")):
            raise ValueError("UPS_BASE_URL must be an http(s) URL")
        return str(v).rstrip("/")

    @model_validator(mode="after")
    def validate_production_config(self):
        """Catch insecure production configurations."""
        if self.ENVIRONMENT == "production" and self.DEBUG:
            raise ValueError(
                "DEBUG=True is forbidden in production. "
                "Set DEBUG=false or ENVIRONMENT=development"
            )
        return self

    @property
    def ups_base_url(self) -> str:
        if self.UPS_BASE_URL:
            return self.UPS_BASE_URL
        return UPS_SANDBOX_URL if self.UPS_USE_SANDBOX else UPS_PRODUCTION_URL


def load_settings(**overrides) -> Settings:
    """
    Build and validate settings from the environment (plus overrides).

    Raises:
        ConfigurationError: listing every missing or invalid value
    """
    try:
        return Settings(**overrides)
    except ValidationError as e:
        problems = []
        for error in e.errors():
            name = ".".join(str(part) for part in error["loc"]) or "settings"
            problems.append(f"  - {name}: {error['msg']}")
        message = "Missing or invalid configuration:\n" + "\n".join(problems)
        logger.error(message)
        raise ConfigurationError(message) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings, loaded once."""
    return load_settings()
