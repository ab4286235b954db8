"""
Pydantic Settings for enroll configuration.

Provides settings loading from TOML files, environment variables, and defaults.
Only ambient concerns (logging, HTTP client) are configurable here; the
registration host and retry budget are fixed in FlowConfig.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from .exceptions import ConfigFileError
from .models.config import HttpConfig, LoggingConfig

CONFIG_DIR_NAME = ".enroll"
CONFIG_FILE_NAME = "config.toml"


def find_config_file(start_dir: str | None = None) -> Path | None:
    """
    Find .enroll/config.toml by walking up from start_dir (or cwd),
    falling back to ~/.enroll/config.toml.

    Returns:
        Path to config file, or None if not found.
    """
    start = Path(start_dir) if start_dir else Path.cwd()

    for parent in [start, *list(start.parents)]:
        config_path = parent / CONFIG_DIR_NAME / CONFIG_FILE_NAME
        if config_path.is_file():
            return config_path

    home_config = Path.home() / CONFIG_DIR_NAME / CONFIG_FILE_NAME
    if home_config.is_file():
        return home_config

    return None


class TomlConfigSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from TOML config files."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        config_path: Path | None = None,
        start_dir: str | None = None,
    ):
        super().__init__(settings_cls)
        self._config_path = config_path
        self._start_dir = start_dir
        self._data: dict[str, Any] | None = None

    def _load_toml(self) -> dict[str, Any]:
        """Load and cache TOML data."""
        if self._data is not None:
            return self._data

        self._data = {}

        path = self._config_path
        if path is None:
            path = find_config_file(self._start_dir)

        if path is None:
            return self._data

        try:
            with open(path, "rb") as f:
                self._data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigFileError(
                f"Failed to parse config file: {e}", file_path=str(path), cause=e
            ) from e
        except OSError as e:
            raise ConfigFileError(
                f"Failed to read config file: {e}", file_path=str(path), cause=e
            ) from e

        return self._data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Get field value from TOML data."""
        data = self._load_toml()
        return data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return all TOML data for settings initialization."""
        return self._load_toml()


class EnrollSettings(BaseSettings):
    """enroll configuration settings with TOML and environment variable support.

    Priority (highest to lowest):
    1. Explicit init values
    2. Environment variables (ENROLL_<section>__<field>)
    3. TOML config file (.enroll/config.toml or ~/.enroll/config.toml)
    4. Model defaults
    """

    model_config = {
        "env_prefix": "ENROLL_",
        "env_nested_delimiter": "__",
        "extra": "ignore",
    }

    logging: LoggingConfig = LoggingConfig()
    http: HttpConfig = HttpConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to add TOML loading.

        Note: the config path cannot be passed in here, so load_settings()
        hands it over through module-level variables.
        """
        toml_source = TomlConfigSource(
            settings_cls,
            config_path=_current_config_path,
            start_dir=_current_start_dir,
        )
        return (
            init_settings,
            env_settings,
            toml_source,
        )


# Module-level variables for passing to settings_customise_sources
_current_config_path: Path | None = None
_current_start_dir: str | None = None


def load_settings(
    config_path: Path | None = None,
    start_dir: str | None = None,
    **overrides: Any,
) -> EnrollSettings:
    """Load enroll settings from config file and environment.

    Args:
        config_path: Explicit path to config file
        start_dir: Directory to start searching from (if config_path not given)
        overrides: Explicit section values (highest priority)

    Returns:
        EnrollSettings instance with all sources merged

    Raises:
        ConfigFileError: If the config file exists but cannot be read or parsed
    """
    global _current_config_path, _current_start_dir

    _current_config_path = config_path
    _current_start_dir = start_dir

    try:
        return EnrollSettings(**overrides)
    finally:
        _current_config_path = None
        _current_start_dir = None
