"""Error taxonomy for the identity & response core.

Every error carries a machine-readable ``kind`` plus a ``context`` dict
(which field, which id). Translating kinds into user-facing messages or
status codes is the transport's job.
"""
from __future__ import annotations

from typing import Any, Dict

from guestlist.domain.enums.error_kind import ErrorKind


class GuestlistError(Exception):
    """Base exception for guestlist errors."""

    kind: ErrorKind = ErrorKind.validation
    retryable: bool = False

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: Dict[str, Any] = {k: v for k, v in context.items() if v is not None}

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "detail": self.message,
            "context": {k: str(v) if not isinstance(v, (int, float, bool, list)) else v for k, v in self.context.items()},
        }

    def __repr__(self) -> str:
        return f"<{type(self).__name__} kind={self.kind.value} {self.message!r} {self.context!r}>"


class NotFoundError(GuestlistError):
    """Name or id lookup missed (or hit a removed identity on a read path)."""
    kind = ErrorKind.not_found


class ConflictError(GuestlistError):
    """Duplicate email/name, double registration, conflicting partner link, upsert race."""
    kind = ErrorKind.conflict


class ForbiddenError(GuestlistError):
    """Plus-one not permitted, submitting for a non-partner, acting on a removed identity."""
    kind = ErrorKind.forbidden


class ValidationFailed(GuestlistError):
    """Missing required fields, malformed email, self-referencing link."""
    kind = ErrorKind.validation


class UnavailableError(GuestlistError):
    """Storage timed out or went away; the caller may retry."""
    kind = ErrorKind.unavailable
    retryable = True
