"""Failure taxonomy surfaced to callers of the content engine.

Every failure carries a ``kind`` (coarse category the HTTP layer maps to a status code),
a stable ``code`` and a human readable message. Validation failures may name the
offending ``field``.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chronicler.domain.model.enums import ContentStatus


class ErrorKind(StrEnum):
    VALIDATION = "validation_error"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_TRANSITION = "invalid_transition"
    NOT_EDITABLE = "not_editable"
    CONFLICT = "conflict"
    STORAGE = "storage_error"


class ChroniclerError(Exception):
    """Base class for all engine failures."""

    kind: ClassVar[ErrorKind]
    default_code: ClassVar[str]

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        field: str | None = None,
        details: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.field = field
        self.details: dict[str, object] = dict(details or {})

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "kind": str(self.kind),
            "code": self.code,
            "message": self.message,
        }
        if self.field is not None:
            payload["field"] = self.field
        if self.details:
            payload["details"] = dict(self.details)
        return payload


# Validation ------------------------------------------------------------------


class ValidationError(ChroniclerError):
    """Malformed attributes or life-period set."""

    kind = ErrorKind.VALIDATION
    default_code = "validation_error"


class EmptyIntervalSet(ValidationError):
    default_code = "empty_interval_set"


class InvalidInterval(ValidationError):
    default_code = "invalid_interval"


class IncompleteCoverage(ValidationError):
    default_code = "incomplete_coverage"


class OverlappingIntervals(ValidationError):
    default_code = "overlapping_intervals"


class CoverageGap(ValidationError):
    default_code = "coverage_gap"


class InvalidAttribute(ValidationError):
    default_code = "invalid_attribute"


# Access and state --------------------------------------------------------------


class NotFound(ChroniclerError):
    kind = ErrorKind.NOT_FOUND
    default_code = "not_found"


class Forbidden(ChroniclerError):
    kind = ErrorKind.FORBIDDEN
    default_code = "forbidden"


class StatusError(ChroniclerError):
    def __init__(
        self,
        message: str,
        *,
        current_status: ContentStatus | None,
        code: str | None = None,
    ) -> None:
        details = {"current_status": str(current_status)} if current_status is not None else None
        super().__init__(message, code=code, details=details)
        self.current_status = current_status


class InvalidTransition(StatusError):
    """A lifecycle transition was requested from a state that does not allow it."""

    kind = ErrorKind.INVALID_TRANSITION
    default_code = "invalid_transition"


class NotEditable(StatusError):
    """An edit was proposed against a person that is not publicly approved."""

    kind = ErrorKind.NOT_EDITABLE
    default_code = "not_editable"


# Storage -----------------------------------------------------------------------


class Conflict(ChroniclerError):
    """The store rejected a write because of a uniqueness or reference constraint."""

    kind = ErrorKind.CONFLICT
    default_code = "conflict"


class StorageError(ChroniclerError):
    """Opaque storage failure; rendered as a generic error by callers."""

    kind = ErrorKind.STORAGE
    default_code = "storage_error"


__all__ = [
    "ChroniclerError",
    "Conflict",
    "CoverageGap",
    "EmptyIntervalSet",
    "ErrorKind",
    "Forbidden",
    "IncompleteCoverage",
    "InvalidAttribute",
    "InvalidInterval",
    "InvalidTransition",
    "NotEditable",
    "NotFound",
    "OverlappingIntervals",
    "StatusError",
    "StorageError",
    "ValidationError",
]
