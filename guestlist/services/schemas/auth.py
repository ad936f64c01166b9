# guestlist/services/schemas/auth.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from guestlist.services.schemas.people import PartnerRead


class GuestLookup(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class GuestLookupRead(BaseModel):
    person_id: UUID
    first_name: str
    last_name: str
    display_name: str
    plus_one_allowed: bool
    has_partner: bool
    partner: Optional[PartnerRead] = None
    needs_registration: bool


class RegisterRequest(BaseModel):
    person_id: UUID
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1)


class TokenRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    person_id: UUID
