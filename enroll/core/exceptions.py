"""
Custom exception hierarchy for enroll.

Every failure of the registration flow surfaces as exactly one of these
exceptions, so the CLI can report a single terminal reason and exit non-zero.
"""

from __future__ import annotations


class EnrollException(Exception):
    """
    Base exception for all enroll errors.

    Attributes:
        message: Human-readable error description
        context: Additional debugging context (URLs, stage names, etc.)
        exit_code: Exit status the CLI terminates with (default: 1)
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        if cause is not None:
            self.__cause__ = cause
        super().__init__(message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


# =============================================================================
# Configuration Errors
# =============================================================================


class EnrollConfigError(EnrollException):
    """Base class for configuration-related errors."""

    pass


class ConfigFileError(EnrollConfigError):
    """
    Error reading or parsing a configuration file.

    Raised for TOML parsing errors, permission errors, etc.
    """

    def __init__(
        self,
        message: str,
        *,
        file_path: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if file_path:
            ctx["file_path"] = file_path
        super().__init__(message, context=ctx, cause=cause)


class ConfigValidationError(EnrollConfigError, ValueError):
    """
    Invalid or missing configuration value.

    Inherits from ValueError so pydantic validators can raise it directly.
    """

    def __init__(
        self,
        message: str,
        *,
        key: str | None = None,
        value: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        if value is not None:
            ctx["value"] = value
        super().__init__(message, context=ctx, cause=cause)


# =============================================================================
# Network Errors
# =============================================================================


class EnrollNetworkError(EnrollException):
    """Base class for network-related errors."""

    pass


class FetchError(EnrollNetworkError):
    """
    A single request could not be completed.

    Raised for connection refusals, DNS failures and timeouts at stages that
    are not retried.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        stage: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if stage:
            ctx["stage"] = stage
        if url:
            ctx["url"] = url
        super().__init__(message, context=ctx, cause=cause)
        self.url = url
        self.stage = stage


class RetryExhaustedError(EnrollNetworkError):
    """
    Every attempt of a retried request failed.

    Distinct from FetchError: it means the remote server never came online
    within the retry budget, and the process should stop waiting.
    """

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        attempts: int | None = None,
        stage: str | None = None,
        last_error: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if stage:
            ctx["stage"] = stage
        if url:
            ctx["url"] = url
        if last_error:
            ctx["last_error"] = last_error
        super().__init__(message, context=ctx, cause=cause)
        self.url = url
        self.attempts = attempts
        self.stage = stage
        self.last_error = last_error


# =============================================================================
# Registration Flow Errors
# =============================================================================


class RegistrationFlowError(EnrollException):
    """Base class for errors raised while driving the registration flow."""

    pass


class UnexpectedResponseError(RegistrationFlowError):
    """
    A response did not have the expected shape.

    Raised when an expected value is missing from a page or the remote side
    answered with a non-2xx status. Never retried: a page-shape mismatch is a
    misconfiguration, not a transient fault.
    """

    def __init__(
        self,
        message: str,
        *,
        stage: str | None = None,
        url: str | None = None,
        status_code: int | None = None,
        missing: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if url:
            ctx["url"] = url
        if status_code is not None:
            ctx["status_code"] = status_code
        if missing:
            ctx["missing"] = missing
        super().__init__(message, context=ctx, cause=cause)
        self.stage = stage
        self.url = url
        self.status_code = status_code
        self.missing = missing


class FlowStateError(RegistrationFlowError):
    """
    The write-once flow state was used out of order.

    Raised when a stage runs before its input is recorded, a field is
    recorded twice, or stages are advanced out of sequence.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        stage: str | None = None,
        context: dict | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or {}
        if field:
            ctx["field"] = field
        if stage:
            ctx["stage"] = stage
        super().__init__(message, context=ctx, cause=cause)
