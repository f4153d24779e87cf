"""
Module: settings.py
Description: Application configuration using pydantic-settings.

Configures the simulator and result delivery from environment variables
(prefixed with ROASTSIM_) with validation and defaults. Supports .env
files for local development.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ROASTSIM_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="Coffee Roaster Simulator", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    log_level: str = Field(default="INFO", description="Logging level")

    # Delivery settings
    delivery_timeout: float = Field(
        default=10.0,
        gt=0,
        le=60,
        description="HTTP timeout in seconds for each delivery attempt"
    )
    delivery_max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Total number of delivery attempts per result payload"
    )
    backoff_base_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Backoff unit; the wait after attempt n is 2**n times this value"
    )

    # Simulation settings
    tick_interval_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Wall-clock seconds between simulated one-second ticks"
    )
    default_target_seconds: int = Field(
        default=300,
        ge=1,
        description="Default roast duration in simulated seconds"
    )
    initial_temperature: float = Field(
        default=200.0,
        ge=100,
        le=250,
        description="Initial roaster temperature in degrees Celsius"
    )
    simulator_version: str = Field(default="1.0.0", description="Reported in payload diagnostics")

    # Session parameter cache
    session_store_backend: str = Field(
        default="memory",
        description="Key-value store backing the session cache: memory, file or dynamodb"
    )
    session_store_path: str = Field(
        default=".roastsim/session_store.json",
        description="JSON file used by the file store backend"
    )
    session_table_name: Optional[str] = Field(
        default=None,
        description="DynamoDB table used by the dynamodb store backend"
    )
    aws_region: str = Field(default="us-east-1", description="AWS region")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('session_store_backend')
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Validate the session store backend name."""
        backends = ['memory', 'file', 'dynamodb']
        if v.lower() not in backends:
            raise ValueError(f"session_store_backend must be one of: {', '.join(backends)}")
        return v.lower()


# Global settings instance
settings = Settings()
