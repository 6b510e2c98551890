"""Configuration loading and modelling."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent.parent / "config" / "default_config.toml"
USER_CONFIG_PATH = Path("~/.config/envinspect/config.toml").expanduser()


class InspectorSettings(BaseModel):
    project_root: Path | None = None
    ci_variables: list[str] = Field(
        default_factory=lambda: ["CI", "GITHUB_ACTIONS", "GITLAB_CI", "CIRCLECI", "TRAVIS"]
    )
    environment_variable: str = "NODE_ENV"
    ref_variable: str = "GITHUB_REF"
    branch_command: list[str] = Field(default_factory=lambda: ["git", "rev-parse", "--abbrev-ref", "HEAD"])
    command_timeout: float | None = None
    channel_prefix: str = "pr"
    channel_max_length: int = 30
    env_file: str = ".env"
    temp_env_file: str = ".env.temp"
    required_vars: list[str] = Field(default_factory=list)


class OutputSettings(BaseModel):
    format: str = "terminal"
    verbosity: str = "normal"


class AppConfig(BaseModel):
    inspector: InspectorSettings = Field(default_factory=InspectorSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    raw: dict[str, Any] = Field(default_factory=dict)

    @property
    def verbosity(self) -> str:
        return self.output.verbosity


def _load_toml(path: Path) -> dict[str, Any]:
    import tomllib

    with path.open("rb") as fh:
        return tomllib.load(fh)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from defaults and optional user overrides."""

    data: dict[str, Any] = {}
    if DEFAULT_CONFIG_PATH.exists():
        data = _merge(data, _load_toml(DEFAULT_CONFIG_PATH))

    resolved_path = config_path
    if resolved_path is None and USER_CONFIG_PATH.exists():
        resolved_path = USER_CONFIG_PATH

    if resolved_path and resolved_path.exists():
        data = _merge(data, _load_toml(resolved_path))

    config = AppConfig(raw=data)

    # Re-bind nested models from merged dict to capture overrides.
    if "inspector" in data:
        config.inspector = InspectorSettings.model_validate(data["inspector"])
    if "output" in data:
        config.output = OutputSettings.model_validate(data["output"])

    env_root = os.getenv("ENVINSPECT_PROJECT_ROOT")
    if not config.inspector.project_root and env_root:
        config.inspector.project_root = Path(env_root).expanduser()

    return config
