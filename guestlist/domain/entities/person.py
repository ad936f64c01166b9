# guestlist/domain/entities/person.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional
from uuid import UUID

from guestlist.common.naming.people import display_name as _display_name
from guestlist.domain.enums.account_status import AccountStatus


@dataclass(frozen=True)
class Person:
    """
    Unified identity record: an invited guest and (once registered) a login
    account are the same Person. Instances are read snapshots handed out by
    the services; mutations always go back through the Identity Store or the
    Relationship Manager.

    Invariants held by the store (not re-checked here):
      - partner_id, when set, points at a Person whose partner_id points back
      - partner_id is never the Person's own id
      - a removed Person has deleted_at set and account_status == removed
    """

    id: UUID
    first_name: str
    last_name: str
    account_status: AccountStatus = AccountStatus.unregistered
    partner_id: Optional[UUID] = None
    plus_one_allowed: bool = False
    is_admin: bool = False
    email: Optional[str] = None
    has_credential: bool = False
    admin_notes: Optional[str] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None

    @property
    def display_name(self) -> str:
        return _display_name(self.first_name, self.last_name)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None and self.account_status != AccountStatus.removed

    @property
    def is_registered(self) -> bool:
        return self.account_status == AccountStatus.registered

    @property
    def has_partner(self) -> bool:
        return self.partner_id is not None

    def as_dict(self):
        d = asdict(self)
        d["display_name"] = self.display_name
        return d
