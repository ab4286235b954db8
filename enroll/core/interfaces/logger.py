"""
Logger interface for diagnostic output of the registration flow.

The CLI echoes the registration result itself; ILogger carries everything
else (which stage is running, retry attempts, resolved links) and is silent
unless enabled in settings or with --verbose.
"""

from abc import ABC, abstractmethod
from typing import Any


class ILogger(ABC):
    """Leveled diagnostic logger with secret redaction."""

    @abstractmethod
    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    @abstractmethod
    def set_level(self, level: str) -> None:
        """
        Args:
            level: One of 'debug', 'info', 'warning', 'error'
        """

    @abstractmethod
    def redact(self, secret: str) -> None:
        """Mask every later occurrence of secret in logged messages."""
