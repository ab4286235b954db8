"""
Core infrastructure for enroll.

This module provides:
- ServiceContainer: DI container using dependency-injector
- Application bootstrap for initialization
- Interface definitions and pydantic models
- Custom exception hierarchy
"""

from .bootstrap import bootstrap, is_initialized, reset
from .container import ServiceContainer, get_container
from .exceptions import (
    ConfigFileError,
    ConfigValidationError,
    EnrollConfigError,
    EnrollException,
    EnrollNetworkError,
    FetchError,
    FlowStateError,
    RegistrationFlowError,
    RetryExhaustedError,
    UnexpectedResponseError,
)

__all__ = [
    "ConfigFileError",
    "ConfigValidationError",
    "EnrollConfigError",
    "EnrollException",
    "EnrollNetworkError",
    "FetchError",
    "FlowStateError",
    "RegistrationFlowError",
    "RetryExhaustedError",
    "ServiceContainer",
    "UnexpectedResponseError",
    "bootstrap",
    "get_container",
    "is_initialized",
    "reset",
]
