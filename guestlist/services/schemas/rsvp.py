# guestlist/services/schemas/rsvp.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from guestlist.domain.enums import ResponseStatus
from guestlist.services.schemas.people import PersonRead


class ResponseIn(BaseModel):
    status: ResponseStatus
    dietary_notes: Optional[str] = None
    message: Optional[str] = None


class ResponseSubmit(ResponseIn):
    partner: Optional[ResponseIn] = None


class ResponseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    submitted_by_id: UUID
    status: ResponseStatus
    dietary_notes: Optional[str] = None
    message: Optional[str] = None
    responded_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResponseViewRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    own_response: Optional[ResponseRead] = None
    partner_response: Optional[ResponseRead] = None


class PlusOneCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=255)
    response: Optional[ResponseIn] = None


class PlusOneRead(BaseModel):
    companion: PersonRead
    companion_response: Optional[ResponseRead] = None


class ResponseSummaryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_people: int
    households: int
    responded: int
    attending: int
    not_attending: int
    pending: int
