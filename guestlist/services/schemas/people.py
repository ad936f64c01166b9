# guestlist/services/schemas/people.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from guestlist.domain.enums import AccountStatus


# ---------- Person ----------

class PersonBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    plus_one_allowed: bool = False


class PersonCreate(PersonBase):
    is_admin: bool = False
    admin_notes: Optional[str] = None
    email: Optional[str] = Field(default=None, max_length=255)


class PartnerRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    first_name: str
    last_name: str
    display_name: str
    email: Optional[str] = None


class PersonRead(PersonBase):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    display_name: str
    account_status: AccountStatus
    email: Optional[str] = None
    partner_id: Optional[UUID] = None
    is_admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PersonAdminRead(PersonRead):
    admin_notes: Optional[str] = None
    deleted_at: Optional[datetime] = None


class PersonProfile(PersonRead):
    partner: Optional[PartnerRead] = None


# ---------- Partner link ----------

class PartnerLinkCreate(BaseModel):
    partner_id: UUID


class PartnerLinkRead(BaseModel):
    person: PersonRead
    partner: PersonRead
