"""
stdlib-backed ILogger for enroll.

Console output goes to stderr in a short form; the optional rotating log file
gets timestamps. Registered secrets (the account password) are masked before
a record reaches any handler.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, ClassVar

from ..core.interfaces.logger import ILogger

REDACTED = "***"


class SecretFilter(logging.Filter):
    """Rewrites records so that no registered secret survives formatting."""

    def __init__(self) -> None:
        super().__init__()
        self.secrets: set[str] = set()

    def filter(self, record: logging.LogRecord) -> bool:
        if self.secrets:
            message = record.getMessage()
            for secret in self.secrets:
                message = message.replace(secret, REDACTED)
            record.msg = message
            record.args = None
        return True


class EnrollLogger(ILogger):
    """
    ILogger on top of a named stdlib logger.

    Nothing is emitted unless console or file output is enabled. The logger
    does not propagate, so embedding applications keep their own root config.
    """

    LOG_FILE_PATH = Path.home() / ".enroll" / "enroll.log"
    MAX_FILE_SIZE = 1024 * 1024  # 1MB
    BACKUP_COUNT = 3

    CONSOLE_FORMAT = "enroll: %(levelname)s %(message)s"
    FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    LEVEL_MAP: ClassVar[dict[str, int]] = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }

    def __init__(
        self,
        name: str = "enroll",
        level: str = "warning",
        console_enabled: bool = False,
        file_enabled: bool = False,
        log_file: Path | None = None,
    ) -> None:
        """
        Args:
            name: stdlib logger name
            level: debug, info, warning or error (anything else means warning)
            console_enabled: Write to stderr
            file_enabled: Write to log_file
            log_file: Log file path (defaults to ~/.enroll/enroll.log)
        """
        self._logger = logging.getLogger(name)
        self._logger.setLevel(logging.DEBUG)
        self._logger.handlers.clear()
        self._logger.filters.clear()
        self._logger.propagate = False
        # Without any handler, stdlib falls back to logging.lastResort on stderr
        self._logger.addHandler(logging.NullHandler())

        self._secrets = SecretFilter()
        self._logger.addFilter(self._secrets)
        self._handlers: list[logging.Handler] = []

        log_level = self._to_level(level)

        if console_enabled:
            self._add_handler(
                logging.StreamHandler(sys.stderr), self.CONSOLE_FORMAT, log_level
            )

        if file_enabled:
            path = log_file or self.LOG_FILE_PATH
            path.parent.mkdir(parents=True, exist_ok=True)
            self._add_handler(
                RotatingFileHandler(path, maxBytes=self.MAX_FILE_SIZE, backupCount=self.BACKUP_COUNT),
                self.FILE_FORMAT,
                log_level,
            )

    def _to_level(self, level: str) -> int:
        return self.LEVEL_MAP.get(level.lower(), logging.WARNING)

    def _add_handler(self, handler: logging.Handler, fmt: str, level: int) -> None:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%d %H:%M:%S"))
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.debug(message, *args, **kwargs)

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.info(message, *args, **kwargs)

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.warning(message, *args, **kwargs)

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        self._logger.error(message, *args, **kwargs)

    def set_level(self, level: str) -> None:
        lvl = self._to_level(level)
        for handler in self._handlers:
            handler.setLevel(lvl)

    def redact(self, secret: str) -> None:
        if secret:
            self._secrets.secrets.add(secret)


class NullLogger(ILogger):
    """Used when nothing has been bootstrapped, e.g. library use and tests."""

    def debug(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def info(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def warning(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def error(self, message: str, *args: Any, **kwargs: Any) -> None:
        pass

    def set_level(self, level: str) -> None:
        pass

    def redact(self, secret: str) -> None:
        pass
