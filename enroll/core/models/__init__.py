"""
Pydantic models and flow records for enroll.
"""

from .config import HttpConfig, LoggingConfig
from .flow import FlowStage, FlowState
from .registration import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_REGISTRATION_HOST,
    DEFAULT_RETRY_DELAY,
    Credentials,
    FlowConfig,
    RegistrationTarget,
    RetryBudget,
    ServerIdentity,
)

__all__ = [
    "DEFAULT_MAX_ATTEMPTS",
    "DEFAULT_REGISTRATION_HOST",
    "DEFAULT_RETRY_DELAY",
    "Credentials",
    "FlowConfig",
    "FlowStage",
    "FlowState",
    "HttpConfig",
    "LoggingConfig",
    "RegistrationTarget",
    "RetryBudget",
    "ServerIdentity",
]
