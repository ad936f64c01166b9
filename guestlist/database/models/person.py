# guestlist/database/models/person.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID as UUID_t

from sqlalchemy import (
    Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text, Uuid,
    Enum as SAEnum, false, text,
)
from sqlalchemy.orm import Mapped, mapped_column

from guestlist.common.naming.people import display_name as _display_name
from guestlist.database.core.main import Base
from guestlist.database.core.service_object import ServiceObject
from guestlist.domain.enums import AccountStatus

_ACTIVE = text("deleted_at IS NULL")


class Person(ServiceObject, Base):
    """
    Guests and user accounts in one table:
      - names first (seeding/import), credential on registration
      - partner_id is a mutual pointer, written only by the relationship manager
      - soft delete via deleted_at; rows are never hard-deleted
      - normalized_name is the casefolded "first|last" lookup key
    """
    __tablename__ = "people"
    __table_args__ = (
        CheckConstraint("partner_id IS NULL OR partner_id <> id", name="partner_not_self"),
        # Names and emails are unique among active rows only
        Index(
            "uq_people_active_name", "first_name", "last_name",
            unique=True, sqlite_where=_ACTIVE, postgresql_where=_ACTIVE,
        ),
        Index(
            "uq_people_active_email", "email",
            unique=True, sqlite_where=_ACTIVE, postgresql_where=_ACTIVE,
        ),
        Index("ix_people_normalized_name", "normalized_name"),
        Index("ix_people_partner_id", "partner_id"),
        Index("ix_people_last_first", "last_name", "first_name"),
        Index("ix_people_deleted_at", "deleted_at"),
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    normalized_name: Mapped[str] = mapped_column(String(255), nullable=False)

    partner_id: Mapped[Optional[UUID_t]] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("people.id", ondelete="SET NULL"),
        nullable=True,
    )
    plus_one_allowed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    # Credential: NULL until registered (a plus-one keeps its captured email here)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    account_status: Mapped[AccountStatus] = mapped_column(
        SAEnum(AccountStatus, name="account_status", native_enum=False, create_constraint=True, length=20),
        nullable=False,
        default=AccountStatus.unregistered,
        server_default=text("'unregistered'"),
    )
    admin_notes: Mapped[Optional[str]] = mapped_column(Text)

    @property
    def display_name(self) -> str:
        return _display_name(self.first_name, self.last_name)

    @property
    def is_active(self) -> bool:
        return self.deleted_at is None

    def __repr__(self) -> str:
        return f"<Person id={self.id} name={self.display_name!r} status={self.account_status}>"
