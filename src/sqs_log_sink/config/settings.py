"""
Module: settings.py
Description: Sink configuration using pydantic-settings.

Configures the SQS log sink from keyword arguments or environment
variables prefixed with SQS_LOG_SINK_. Supports .env files for local
development. Settings may be changed freely until the sink starts;
the sink works from a snapshot taken at start time.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SinkSettings(BaseSettings):
    """Sink settings loaded from arguments or environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SQS_LOG_SINK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True
    )

    name: str = Field(default="sqs", description="Sink name used in diagnostics")
    log_level: str = Field(default="INFO", description="Level of the sink's own logging")

    # SQS settings
    queue_url: Optional[str] = Field(
        default=None,
        description="URL of the SQS queue receiving log events"
    )
    region_name: Optional[str] = Field(
        default=None,
        description="AWS region, derived from the queue host when unset"
    )

    # Credential overrides
    access_key: Optional[str] = Field(
        default=None,
        description="Static access key, used when no earlier source has credentials"
    )
    secret_key: Optional[str] = Field(
        default=None,
        description="Static secret key paired with access_key"
    )
    profile_name: Optional[str] = Field(
        default=None,
        description="Shared credentials profile (AWS_PROFILE or 'default' when unset)"
    )

    # Delivery settings
    thread_pool: int = Field(
        default=0,
        ge=0,
        description="Maximum concurrent sends, 0 for an elastic pool"
    )
    max_message_size_kb: int = Field(
        default=256,
        gt=0,
        description="Maximum encoded event size in kilobytes"
    )
    shutdown_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait for the transport to shut down"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid logging level."""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @property
    def max_payload_bytes(self) -> int:
        """Size limit in bytes derived from max_message_size_kb."""
        return self.max_message_size_kb * 1024


# Global settings instance
settings = SinkSettings()
