"""
Flow stages and the write-once state threaded through them.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar

from ..exceptions import FlowStateError


class FlowStage(str, Enum):
    """Strictly ordered stages of the registration flow."""

    START = "start"
    FETCHED_WELCOME = "fetched_welcome"
    FETCHED_AUTH_PAGE = "fetched_auth_page"
    SUBMITTED_CREDENTIALS = "submitted_credentials"
    RECEIVED_REGISTRATION_DATA = "received_registration_data"
    BUILT_CALLBACK_URL = "built_callback_url"
    CONFIRMED = "confirmed"

    @property
    def index(self) -> int:
        return list(FlowStage).index(self)

    def next(self) -> FlowStage | None:
        stages = list(FlowStage)
        i = self.index + 1
        return stages[i] if i < len(stages) else None


class FlowState:
    """
    Ordered record of the values produced by each stage.

    Each field is write-once: recorded by exactly one stage and read by the
    next. Reading a field that has not been recorded raises FlowStateError,
    so a stage can never run without its input.
    """

    FIELDS: ClassVar[tuple[str, ...]] = (
        "auth_link",
        "login_url",
        "registration_url",
        "target",
        "callback_url",
    )

    def __init__(self) -> None:
        self._stage = FlowStage.START
        self._values: dict[str, Any] = {}

    @property
    def stage(self) -> FlowStage:
        return self._stage

    def advance(self, stage: FlowStage) -> None:
        """Move to the next stage; skipping or repeating a stage is an error."""
        expected = self._stage.next()
        if stage is not expected:
            raise FlowStateError(
                f"Cannot advance from {self._stage.value} to {stage.value}",
                stage=self._stage.value,
            )
        self._stage = stage

    def record(self, field: str, value: Any) -> None:
        """Record a field value exactly once."""
        if field not in self.FIELDS:
            raise FlowStateError(f"Unknown flow field: {field}", field=field)
        if field in self._values:
            raise FlowStateError(
                f"Flow field already recorded: {field}",
                field=field,
                stage=self._stage.value,
            )
        self._values[field] = value

    def require(self, field: str) -> Any:
        """Return a recorded field, failing if its stage has not run."""
        if field not in self._values:
            raise FlowStateError(
                f"Flow field not yet recorded: {field}",
                field=field,
                stage=self._stage.value,
            )
        return self._values[field]

    def is_recorded(self, field: str) -> bool:
        return field in self._values

    def as_dict(self) -> dict[str, Any]:
        """Snapshot of the stage and every recorded field."""
        return {"stage": self._stage.value, **self._values}

    def __getattr__(self, name: str) -> Any:
        if name in FlowState.FIELDS:
            return self.require(name)
        raise AttributeError(name)

    def __repr__(self) -> str:
        recorded = ", ".join(self._values)
        return f"FlowState(stage={self._stage.value}, recorded=[{recorded}])"
