"""Moderated biographical content: persons, life periods and community edits."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("chronicler")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"
