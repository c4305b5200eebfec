"""
Configuration for KinesisWritable.

WritableConfig is the immutable per-instance configuration. WritableSettings
reads the same options from the environment (``KINESIS_WRITABLE_*``) for
services and the CLI.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError

# PutRecords accepts at most 500 entries per request
MAX_BATCH_SIZE = 500


class WritableConfig(BaseModel):
    """Immutable flush/retry thresholds.

    Attributes:
        high_water_mark: Queue size that triggers an immediate flush
        max_batch_size: Upper bound on records per PutRecords call
        max_retries: Attempts after the first before giving up
        base_retry_delay_ms: Base unit of the Fibonacci backoff
        flush_idle_timeout_ms: Inactivity before an opportunistic flush (None = disabled)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    high_water_mark: int = Field(16, ge=1)
    max_batch_size: int = Field(MAX_BATCH_SIZE, ge=1)
    max_retries: int = Field(3, ge=0)
    base_retry_delay_ms: float = Field(100, gt=0)
    flush_idle_timeout_ms: Optional[float] = Field(None, gt=0)

    @model_validator(mode="after")
    def _check_limits(self) -> "WritableConfig":
        if self.max_batch_size > MAX_BATCH_SIZE:
            raise ValueError(f"max_batch_size cannot exceed {MAX_BATCH_SIZE}")
        if self.high_water_mark > MAX_BATCH_SIZE:
            raise ValueError(f"Max highWaterMark is {MAX_BATCH_SIZE}")
        if self.high_water_mark > self.max_batch_size:
            raise ValueError("high_water_mark cannot exceed max_batch_size")
        return self

    def __init__(self, **options: Any) -> None:
        """Validate options, raising ConfigurationError when invalid."""
        try:
            super().__init__(**options)
        except ValidationError as e:
            raise ConfigurationError(str(e)) from e

    @property
    def flush_idle_timeout(self) -> float | None:
        """Idle timeout in seconds, as the event loop expects."""
        if self.flush_idle_timeout_ms is None:
            return None
        return self.flush_idle_timeout_ms / 1000.0


class WritableSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="KINESIS_WRITABLE_", env_file=".env", case_sensitive=False, extra="ignore"
    )

    stream_name: Optional[str] = None
    region: Optional[str] = None
    high_water_mark: int = 16
    max_batch_size: int = MAX_BATCH_SIZE
    max_retries: int = 3
    base_retry_delay_ms: float = 100
    flush_idle_timeout_ms: Optional[float] = None

    def to_config(self) -> WritableConfig:
        return WritableConfig(
            high_water_mark=self.high_water_mark,
            max_batch_size=self.max_batch_size,
            max_retries=self.max_retries,
            base_retry_delay_ms=self.base_retry_delay_ms,
            flush_idle_timeout_ms=self.flush_idle_timeout_ms,
        )


@lru_cache()
def get_settings() -> WritableSettings:
    return WritableSettings()
