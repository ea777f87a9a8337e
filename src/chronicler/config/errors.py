"""Errors raised while resolving chronicler settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable


class ConfigurationError(RuntimeError):
    """Raised when chronicler settings cannot be resolved."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required environment variables are absent or blank."""


class InvalidConfigurationValue(ConfigurationError):
    """Raised when an environment variable holds a value outside its accepted set."""

    def __init__(self, variable: str, value: str, allowed: Iterable[str]) -> None:
        self.variable = variable
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(
            f"{variable} must be one of: {', '.join(self.allowed)} (got {value!r})"
        )
