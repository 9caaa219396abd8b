"""Environment-based settings using pydantic-settings.

Usage:
    from shelfscan.settings import get_settings

    settings = get_settings()
    print(settings.ffprobe_bin)  # From SHELFSCAN_FFPROBE_BIN env var

Environment Variables:
    SHELFSCAN_FFPROBE_BIN - ffprobe binary (default: "ffprobe")
    SHELFSCAN_PROBE_TIMEOUT - Seconds before a single probe is killed (default: 60)
    SHELFSCAN_PROBE_RETRIES - Retries after a transient probe failure (default: 2)
    SHELFSCAN_MAX_WORKERS - Files probed concurrently; 1 = sequential (default: 1)
    SHELFSCAN_LOG_LEVEL - Logging level (default: "INFO")
"""

from __future__ import annotations

import logging
import shutil
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shelfscan.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class ScannerSettings(BaseSettings):
    """Probe and reconciliation settings.

    ``max_workers`` is the explicit concurrency policy: ``1`` probes files one
    after another, anything larger uses a bounded thread pool.
    """

    model_config = SettingsConfigDict(
        env_prefix="SHELFSCAN_",
        extra="ignore",
    )

    ffprobe_bin: str = Field(default="ffprobe", description="ffprobe binary name or path")
    probe_timeout: float = Field(default=60.0, gt=0, description="Per-file probe timeout")
    probe_retries: int = Field(default=2, ge=0, description="Retries on transient failures")
    max_workers: int = Field(default=1, ge=1, description="Concurrent probes (1 = sequential)")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("ffprobe_bin")
    @classmethod
    def validate_ffprobe_bin(cls, v: str) -> str:
        """Warn (but do not fail) when ffprobe cannot be found.

        Settings are also loaded by commands that never probe anything.
        """
        if v and shutil.which(v) is None and not Path(v).exists():
            logger.warning(f"ffprobe binary not found: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        upper = v.upper()
        if upper not in VALID_LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, got: {v}")
        return upper

    @property
    def sequential(self) -> bool:
        return self.max_workers == 1


@lru_cache(maxsize=1)
def get_settings() -> ScannerSettings:
    """Get cached settings read from the environment.

    Raises:
        ConfigurationError: An environment variable holds an invalid value
    """
    try:
        return ScannerSettings()
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise ConfigurationError(
            f"Invalid setting {field}: {first['msg']}",
            field=field,
            details={"errors": [err["msg"] for err in e.errors()]},
        ) from e


def clear_settings_cache() -> None:
    """Clear the cached settings (used by tests and after reloading .env)."""
    get_settings.cache_clear()


def load_settings_from_file(env_file: Path) -> ScannerSettings:
    """Load settings from a specific .env file, bypassing the cache.

    Args:
        env_file: Path to .env file to load.

    Returns:
        Fresh ScannerSettings instance.
    """
    from dotenv import load_dotenv

    load_dotenv(env_file, override=True)

    clear_settings_cache()
    return get_settings()
