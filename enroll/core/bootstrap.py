"""
Application bootstrap for enroll.

Initializes the DI container with the logger, settings and page fetcher.
Called once at CLI startup.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .container import ServiceContainer, get_container
from .interfaces.fetcher import IPageFetcher
from .interfaces.logger import ILogger

if TYPE_CHECKING:
    from .settings import EnrollSettings

_initialized = False


def bootstrap(settings: EnrollSettings | None = None) -> ServiceContainer:
    """
    Bootstrap the enroll application.

    Args:
        settings: Loaded settings (loaded from config/env when omitted)

    Returns:
        Initialized ServiceContainer
    """
    global _initialized

    container = get_container()

    if _initialized:
        return container

    if settings is None:
        from .settings import load_settings

        settings = load_settings()

    _register_core_services(container, settings)

    _initialized = True
    return container


def _register_core_services(container: ServiceContainer, settings: EnrollSettings) -> None:
    """Register core application services."""
    from ..http_client import PageFetcher
    from ..services.logging import EnrollLogger
    from .settings import EnrollSettings

    container.register_singleton(EnrollSettings, implementation=settings)

    def create_logger() -> ILogger:
        return EnrollLogger(
            level=settings.logging.level,
            console_enabled=settings.logging.console,
            file_enabled=settings.logging.file,
        )

    container.register_singleton(ILogger, factory=create_logger)  # type: ignore[type-abstract]

    # One fetcher (and cookie jar) per resolve, i.e. per registration flow
    def create_fetcher() -> IPageFetcher:
        return PageFetcher(
            timeout=settings.http.timeout,
            user_agent=settings.http.user_agent,
        )

    container.register_transient(IPageFetcher, factory=create_fetcher)  # type: ignore[type-abstract]


def is_initialized() -> bool:
    """Check whether bootstrap() has run."""
    return _initialized


def reset() -> None:
    """Reset the bootstrap state and the global container (for testing)."""
    global _initialized
    ServiceContainer.reset()
    _initialized = False
