"""Notification delivery settings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from .env import bool_env_var, optional_env_var
from .errors import InvalidConfigurationValue


class NotificationBackend(StrEnum):
    LOG = "log"
    OFF = "off"


@dataclass(frozen=True, slots=True)
class NotificationConfig:
    backend: NotificationBackend = NotificationBackend.LOG
    background: bool = True

    @property
    def enabled(self) -> bool:
        return self.backend is not NotificationBackend.OFF


def get_notification_config() -> NotificationConfig:
    """Read ``CHRONICLER_NOTIFICATIONS`` and ``CHRONICLER_NOTIFY_IN_BACKGROUND``."""

    background = bool_env_var("CHRONICLER_NOTIFY_IN_BACKGROUND", default=True)
    raw = optional_env_var("CHRONICLER_NOTIFICATIONS")
    if raw is None:
        return NotificationConfig(background=background)
    try:
        backend = NotificationBackend(raw.lower())
    except ValueError as exc:
        raise InvalidConfigurationValue(
            "CHRONICLER_NOTIFICATIONS", raw, (member.value for member in NotificationBackend)
        ) from exc
    return NotificationConfig(backend=backend, background=background)
