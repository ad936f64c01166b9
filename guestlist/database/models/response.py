# guestlist/database/models/response.py
from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID as UUID_t

from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint, Uuid, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column

from guestlist.database.core.main import Base
from guestlist.database.core.service_object import ServiceObject, utcnow
from guestlist.domain.enums import ResponseStatus


class Response(ServiceObject, Base):
    """
    One row per owner (unique constraint, so concurrent first submissions
    cannot both insert). Updated in place, never deleted.
    """
    __tablename__ = "responses"
    __table_args__ = (
        UniqueConstraint("owner_id", name="uq_responses_owner_id"),
        Index("ix_responses_submitted_by_id", "submitted_by_id"),
        Index("ix_responses_status", "status"),
    )

    owner_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
    )
    submitted_by_id: Mapped[UUID_t] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("people.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[ResponseStatus] = mapped_column(
        SAEnum(ResponseStatus, name="response_status", native_enum=False, create_constraint=True, length=20),
        nullable=False,
    )
    dietary_notes: Mapped[Optional[str]] = mapped_column(Text)
    message: Mapped[Optional[str]] = mapped_column(Text)
    responded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<Response owner={self.owner_id} status={self.status}>"
