"""Logging setup shared by entry points."""

from __future__ import annotations

import logging

from .env import optional_env_var
from .errors import InvalidConfigurationValue

DEFAULT_LOG_LEVEL = "INFO"
_LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once with sensible defaults.

    Parameters mirror ``logging.basicConfig`` with a simplified contract: we default
    to INFO level and a terse format suitable for CLI output. Pass ``force=True`` to
    reconfigure during tests or specialised entry points.
    """

    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
        force=force,
    )


def get_log_level() -> int:
    """Resolve ``CHRONICLER_LOG_LEVEL`` (a level name) to a logging level."""

    name = (optional_env_var("CHRONICLER_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    level = logging.getLevelNamesMapping().get(name)
    if level is None:
        raise InvalidConfigurationValue("CHRONICLER_LOG_LEVEL", name, _LEVEL_NAMES)
    return level
