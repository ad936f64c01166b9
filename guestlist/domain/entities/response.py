# guestlist/domain/entities/response.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional
from uuid import UUID

from guestlist.domain.enums.response_status import ResponseStatus


@dataclass(frozen=True)
class Response:
    """
    One Person's attendance answer. At most one exists per owner; later
    submissions overwrite it in place. submitted_by_id is the owner or the
    owner's partner at the time of submission.
    """

    id: UUID
    owner_id: UUID
    submitted_by_id: UUID
    status: ResponseStatus
    dietary_notes: Optional[str] = None
    message: Optional[str] = None

    responded_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def submitted_by_partner(self) -> bool:
        return self.submitted_by_id != self.owner_id

    def as_dict(self):
        return asdict(self)
