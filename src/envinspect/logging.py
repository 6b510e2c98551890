"""Logging helpers for envinspect."""

from __future__ import annotations

import logging
from typing import Literal

Verbosity = Literal["quiet", "normal", "verbose"]

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_LEVEL_BY_VERBOSITY: dict[Verbosity, int] = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


def configure_logging(verbosity: Verbosity = "normal") -> None:
    """Configure root logging for the CLI session."""

    level = _LEVEL_BY_VERBOSITY.get(verbosity, logging.INFO)
    logging.basicConfig(
        level=level,
        format="[%(levelname).1s] %(message)s",
    )
    logging.debug("Logging configured with level %s", logging.getLevelName(level))


def log_success(logger: logging.Logger, msg: str, *args: object) -> None:
    """Emit ``msg`` at the SUCCESS level, between INFO and WARNING."""

    logger.log(SUCCESS, msg, *args)
