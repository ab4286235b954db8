"""
Configuration models.

Provides Pydantic models for enroll configuration with validation.
"""

from __future__ import annotations

from typing import Literal

from pydantic import ConfigDict, Field

from .base import EnrollBaseModel

LogLevel = Literal["debug", "info", "warning", "error"]


class ConfigBaseModel(EnrollBaseModel):
    """Base model for config sections with relaxed strict mode for TOML loading."""

    model_config = ConfigDict(
        strict=False,  # Allow coercion from TOML/env strings
        validate_assignment=True,
        extra="ignore",  # Ignore unknown fields in config files
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="never",
    )


class LoggingConfig(ConfigBaseModel):
    """Logging configuration section."""

    level: LogLevel = "warning"
    console: bool = False
    file: bool = False


class HttpConfig(ConfigBaseModel):
    """HTTP client configuration section."""

    timeout: float = Field(default=30.0, gt=0)
    user_agent: str = "enroll"
