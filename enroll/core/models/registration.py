"""
Registration records.

Immutable inputs and configuration for the registration flow. Everything here
is built once at process start (or once per flow) and never mutated.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator

from .base import ImmutableModel

DEFAULT_REGISTRATION_HOST = "https://account.jetbrains.com"
DEFAULT_MAX_ATTEMPTS = 60
DEFAULT_RETRY_DELAY = 1.0  # seconds


def _normalize_http_url(v: str) -> str:
    if not isinstance(v, str) or not v.startswith(("http://", "https://")):
        raise ValueError("URL must start with http:// or https://")
    return v.rstrip("/")


class Credentials(ImmutableModel):
    """Account credentials submitted to the authorization form."""

    username: Annotated[str, Field(min_length=1)]
    password: Annotated[str, Field(min_length=1, repr=False)]

    def form_values(self) -> dict[str, str]:
        """Form fields for the credentials POST."""
        return {"username": self.username, "password": self.password}


class ServerIdentity(ImmutableModel):
    """The license server being registered, as given on the command line."""

    server_url: Annotated[str, Field(max_length=2048)]
    server_name: Annotated[str, Field(min_length=1)]

    @field_validator("server_url", mode="before")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Validate and normalize the license server URL."""
        return _normalize_http_url(v)


class RegistrationTarget(ImmutableModel):
    """What gets registered: the server URL plus the IDs the account service assigned."""

    server_url: str
    customer_id: Annotated[str, Field(min_length=1)]
    server_uid: Annotated[str, Field(min_length=1)]


class RetryBudget(ImmutableModel):
    """How long ConnectRetrier tolerates failure before giving up."""

    max_attempts: Annotated[int, Field(ge=1)] = DEFAULT_MAX_ATTEMPTS
    delay: Annotated[float, Field(ge=0)] = DEFAULT_RETRY_DELAY


class FlowConfig(ImmutableModel):
    """Fixed configuration of a RegistrationFlow.

    Production code uses the defaults; tests pass an override with a local
    registration host and a short retry budget.
    """

    registration_host: str = DEFAULT_REGISTRATION_HOST
    retry: RetryBudget = Field(default_factory=RetryBudget)

    @field_validator("registration_host", mode="before")
    @classmethod
    def validate_registration_host(cls, v: str) -> str:
        """Validate and normalize the registration host."""
        return _normalize_http_url(v)
