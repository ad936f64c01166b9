# guestlist/domain/dataclasses/rsvp.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from guestlist.common.naming.people import clean_name, normalize_email, is_valid_email
from guestlist.common.strings.splitters import blank_to_none
from guestlist.domain.entities.person import Person
from guestlist.domain.entities.response import Response
from guestlist.domain.enums.response_status import ResponseStatus
from guestlist.domain.errors import ValidationFailed


@dataclass(frozen=True)
class ResponsePayload:
    """Owner-specific answer fields carried by a submission."""
    status: ResponseStatus
    dietary_notes: Optional[str] = None
    message: Optional[str] = None

    def __post_init__(self):
        try:
            status = ResponseStatus(self.status)
        except ValueError as exc:
            raise ValidationFailed(
                "Unknown response status",
                field="status",
                value=self.status,
            ) from exc
        object.__setattr__(self, "status", status)
        object.__setattr__(self, "dietary_notes", blank_to_none(self.dietary_notes))
        object.__setattr__(self, "message", blank_to_none(self.message))

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ResponsePayload":
        if not data or not data.get("status"):
            raise ValidationFailed("Response status is required", field="status")
        return cls(
            status=data["status"],
            dietary_notes=data.get("dietary_notes"),
            message=data.get("message"),
        )

    def as_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class Companion:
    """An unlisted guest a permitted inviter brings along."""
    first_name: str
    last_name: str
    email: str

    def __post_init__(self):
        first, last = clean_name(self.first_name), clean_name(self.last_name)
        email = normalize_email(self.email)
        if not first:
            raise ValidationFailed("First name is required", field="first_name")
        if not last:
            raise ValidationFailed("Last name is required", field="last_name")
        if not is_valid_email(email):
            raise ValidationFailed("Malformed email address", field="email", value=self.email)
        object.__setattr__(self, "first_name", first)
        object.__setattr__(self, "last_name", last)
        object.__setattr__(self, "email", email)


@dataclass(frozen=True)
class ResponseView:
    own_response: Optional[Response] = None
    partner_response: Optional[Response] = None


@dataclass(frozen=True)
class SubmitResult:
    own_response: Response
    partner_response: Optional[Response] = None


@dataclass(frozen=True)
class ProvisionResult:
    inviter: Person
    companion: Person
    companion_response: Optional[Response] = None


@dataclass
class ResponseSummary:
    # Per active Person; a couple counts as one household
    total_people: int = 0
    households: int = 0
    responded: int = 0
    attending: int = 0
    not_attending: int = 0
    pending: int = 0

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)
