"""Injectable collaborators for the environment inspector.

The inspector never shells out or reads the wall clock directly; it goes
through a :class:`CommandRunner` and a :data:`Clock` so tests can swap in
fakes without touching the real process state.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Protocol, Sequence, runtime_checkable

_LOGGER = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


@dataclass(slots=True, frozen=True)
class CommandResult:
    success: bool
    output: str = ""
    error: str | None = None


@runtime_checkable
class CommandRunner(Protocol):
    """Runs an external command and reports the outcome without raising."""

    def run(self, command: Sequence[str]) -> CommandResult:
        ...


class SubprocessRunner:
    """Run commands with :mod:`subprocess`, folding every failure into the result."""

    def __init__(self, cwd: Path | None = None, timeout: float | None = None) -> None:
        self.cwd = cwd
        self.timeout = timeout

    def run(self, command: Sequence[str]) -> CommandResult:
        try:
            completed = subprocess.run(
                list(command),
                cwd=self.cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            _LOGGER.debug("Command %s failed to run: %s", " ".join(command), exc)
            return CommandResult(success=False, error=str(exc))

        if completed.returncode != 0:
            return CommandResult(
                success=False,
                output=completed.stdout,
                error=completed.stderr.strip() or f"exit code {completed.returncode}",
            )
        return CommandResult(success=True, output=completed.stdout)


__all__ = ["Clock", "CommandResult", "CommandRunner", "SubprocessRunner", "utc_now"]
