"""Configuration management for excalibur.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
EXCALIBUR_ prefix, or via a .env file in the working directory.

Environment Variables:
    EXCALIBUR_READ_ONLY: Open workbooks in openpyxl read-only mode (default: true)
    EXCALIBUR_DATA_ONLY: Read cached formula results instead of formulas (default: true)
    EXCALIBUR_MAX_FILE_SIZE_MB: Maximum workbook size in MB (default: 100)
    EXCALIBUR_DEFAULT_FILTER_OPERATOR: Operator for multi-column filters (default: AND)
    EXCALIBUR_LOG_LEVEL: Logging level (default: INFO)
    EXCALIBUR_DEBUG: Log at DEBUG level by default (default: false)
"""

import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_FILTER_OPERATORS = ("AND", "OR")


class Settings(BaseSettings):
    """Package settings loaded from environment variables.

    Example .env file:
        EXCALIBUR_LOG_LEVEL=DEBUG
        EXCALIBUR_READ_ONLY=false
    """

    model_config = SettingsConfigDict(
        env_prefix="EXCALIBUR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Workbook Loading Settings
    # =========================================================================

    read_only: bool = True
    """Open workbooks in openpyxl read-only mode. The file stays open until close."""

    data_only: bool = True
    """Read the cached result of formula cells rather than the formula text."""

    max_file_size_mb: int = 100
    """Maximum workbook size in megabytes."""

    # =========================================================================
    # Query Settings
    # =========================================================================

    default_filter_operator: str = "AND"
    """Operator used by multi-column filters when none is given."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Logging level: DEBUG, INFO, WARNING, ERROR, or CRITICAL."""

    debug: bool = False
    """Make configure_logging default to DEBUG regardless of log_level."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("default_filter_operator")
    @classmethod
    def validate_filter_operator(cls, v: str) -> str:
        """Validate the default operator is AND or OR."""
        upper_v = v.strip().upper()
        if upper_v not in VALID_FILTER_OPERATORS:
            raise ValueError(
                f"Invalid filter operator: {v}. "
                f"Must be one of: {', '.join(VALID_FILTER_OPERATORS)}"
            )
        return upper_v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int) -> int:
        """Validate file size is positive and reasonable."""
        if not 1 <= v <= 2048:
            raise ValueError(f"max_file_size_mb must be between 1 and 2048, got {v}")
        return v

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return self.max_file_size_mb * 1024 * 1024

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to a plain dictionary for logging."""
        return {
            "read_only": self.read_only,
            "data_only": self.data_only,
            "max_file_size_mb": self.max_file_size_mb,
            "default_filter_operator": self.default_filter_operator,
            "log_level": self.log_level,
            "debug": self.debug,
        }


# Create the global settings instance
settings = Settings()
