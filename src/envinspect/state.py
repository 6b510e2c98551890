"""Shared application state helpers for CLI and script entrypoints."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import AppConfig, load_config
from .environment import EnvironmentInspector
from .logging import configure_logging


@dataclass(slots=True)
class AppState:
    config: AppConfig
    inspector: EnvironmentInspector


def build_state(config_path: Optional[Path], project_root: Optional[Path] = None) -> AppState:
    """Construct an application state bundle.

    Loads configuration, configures logging and builds the inspector once so
    every command works against the same resolved project root.
    """

    config = load_config(config_path)
    configure_logging(config.verbosity)  # type: ignore[arg-type]

    if project_root is not None:
        config.inspector.project_root = project_root

    inspector = EnvironmentInspector(config.inspector)
    return AppState(config=config, inspector=inspector)
