"""Result records returned by the environment inspector."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

EnvironmentType = Literal["development", "staging", "production", "preview"]

ENVIRONMENT_TYPES: tuple[EnvironmentType, ...] = ("development", "staging", "production", "preview")


class VerificationResult(BaseModel):
    """Outcome of checking required variables against the process environment."""

    model_config = ConfigDict(frozen=True)

    valid: bool
    missing: list[str] = Field(default_factory=list)


class EnvFileCheck(BaseModel):
    """Outcome of inspecting an on-disk env file.

    ``missing`` is ``None`` when the file could not be read, meaning the set
    of missing variables is unknown. ``error`` carries the read failure.
    """

    model_config = ConfigDict(frozen=True)

    exists: bool
    valid: bool
    missing: list[str] | None = Field(default_factory=list)
    error: str | None = None
