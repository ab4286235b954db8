"""
Pydantic bases shared by enroll records.

Registration records are built once from validated command-line input and
then only read, so the default base is strict and ImmutableModel adds
freezing on top. Settings sections relax strictness in models/config.py
because TOML and environment values arrive as strings.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class EnrollBaseModel(BaseModel):
    """Strict base: no implicit coercion, unknown fields rejected, assignments validated."""

    model_config = ConfigDict(
        strict=True,
        validate_assignment=True,
        extra="forbid",
        populate_by_name=True,
        revalidate_instances="never",
    )


class ImmutableModel(EnrollBaseModel):
    """Frozen record. Assignment raises ValidationError; instances are hashable."""

    model_config = ConfigDict(frozen=True)
