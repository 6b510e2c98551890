"""Shared pytest fixtures for envinspect tests."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Sequence

import pytest

from envinspect.config import AppConfig, InspectorSettings
from envinspect.environment import CommandResult, EnvironmentInspector


# ============================================================================
# Collaborator Fakes
# ============================================================================

class FakeRunner:
    """Command runner that replays a canned result and records calls."""

    def __init__(self, result: CommandResult | None = None):
        self.result = result or CommandResult(success=False, error="not a git repository")
        self.calls: list[list[str]] = []

    def run(self, command: Sequence[str]) -> CommandResult:
        self.calls.append(list(command))
        return self.result


FIXED_NOW = datetime(2024, 1, 15, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Return a clock frozen at 2024-01-15 09:30 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def failing_runner() -> FakeRunner:
    """Return a runner whose git invocation always fails."""
    return FakeRunner()


@pytest.fixture
def branch_runner() -> Callable[[str], FakeRunner]:
    """Return a factory for runners reporting a given branch."""

    def _make(branch: str) -> FakeRunner:
        return FakeRunner(CommandResult(success=True, output=f"{branch}\n"))

    return _make


# ============================================================================
# Inspector Fixtures
# ============================================================================

@pytest.fixture
def environ() -> dict[str, str]:
    """Return an empty, isolated process environment."""
    return {}


@pytest.fixture
def make_inspector(tmp_path: Path, environ: dict[str, str], failing_runner: FakeRunner, fixed_clock):
    """Return a factory building inspectors rooted at ``tmp_path``."""

    def _make(
        runner: FakeRunner | None = None,
        settings: InspectorSettings | None = None,
        env: dict[str, str] | None = None,
    ) -> EnvironmentInspector:
        return EnvironmentInspector(
            settings,
            environ=environ if env is None else env,
            runner=runner or failing_runner,
            clock=fixed_clock,
            project_root=tmp_path,
        )

    return _make


@pytest.fixture
def inspector(make_inspector) -> EnvironmentInspector:
    """Return an inspector with an empty environment and no git branch."""
    return make_inspector()


@pytest.fixture
def test_config(tmp_path: Path) -> AppConfig:
    """Return a configuration rooted at ``tmp_path`` requiring two variables."""
    config = AppConfig()
    config.inspector = InspectorSettings(
        project_root=tmp_path,
        required_vars=["API_KEY", "DATABASE_URL"],
    )
    return config


# ============================================================================
# Env File Fixtures
# ============================================================================

@pytest.fixture
def write_env(tmp_path: Path) -> Callable[[str, str], Path]:
    """Return a helper that writes an env file under ``tmp_path``."""

    def _write(content: str, name: str = ".env") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
