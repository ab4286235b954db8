"""
Click context extension for enroll CLI.

Provides EnrollContext dataclass that holds enroll-specific data
passed through the Click command chain via ctx.obj.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import click
from pydantic import ValidationError

from ..core.bootstrap import bootstrap
from ..core.container import ServiceContainer
from ..core.exceptions import ConfigValidationError, EnrollException
from ..core.settings import EnrollSettings, load_settings


def to_click_exception(e: EnrollException) -> click.ClickException:
    """Report e as a single 'Error: ...' line and exit with its exit_code."""
    err = click.ClickException(str(e))
    err.exit_code = e.exit_code
    return err


@dataclass
class EnrollContext:
    """Extended context passed through Click command chain.

    Attributes:
        settings: Loaded settings (logging, HTTP client)
        container: Bootstrapped service container
        cwd: Current working directory
    """

    settings: EnrollSettings
    container: ServiceContainer
    cwd: Path

    @classmethod
    def create(cls, cwd: Path | None = None, verbose: bool = False) -> EnrollContext:
        """Load settings, bootstrap the container and build the context.

        Args:
            cwd: Working directory override (defaults to Path.cwd())
            verbose: Force debug logging to stderr

        Raises:
            ConfigFileError: The config file could not be read
            ConfigValidationError: A config or environment value is invalid
        """
        if cwd is None:
            cwd = Path.cwd()

        try:
            settings = load_settings(start_dir=str(cwd))
            if verbose:
                settings.logging.console = True
                settings.logging.level = "debug"
        except ValidationError as e:
            raise ConfigValidationError(f"Invalid configuration: {e}", cause=e) from e

        return cls(settings=settings, container=bootstrap(settings), cwd=cwd)
