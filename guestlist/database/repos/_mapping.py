# guestlist/database/repos/_mapping.py
from __future__ import annotations
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import object_session

from guestlist.database.models.person import Person as DBPerson
from guestlist.database.models.response import Response as DBResponse
from guestlist.domain.entities.person import Person as DomainPerson
from guestlist.domain.entities.response import Response as DomainResponse
from guestlist.domain.enums import AccountStatus, ResponseStatus


def visible_partner_id(row: DBPerson) -> Optional[UUID]:
    """
    The partner id readers may see: the target must be active and point back.
    A pointer left behind by a removal reads as no partner.
    """
    if row.partner_id is None:
        return None
    session = object_session(row)
    if session is None:
        return row.partner_id
    other = session.get(DBPerson, row.partner_id)
    if other is None or other.deleted_at is not None or other.partner_id != row.id:
        return None
    return other.id


def to_domain_person(row: DBPerson) -> DomainPerson:
    return DomainPerson(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        account_status=AccountStatus(row.account_status),
        partner_id=visible_partner_id(row),
        plus_one_allowed=bool(row.plus_one_allowed),
        is_admin=bool(row.is_admin),
        email=row.email,
        has_credential=row.password_hash is not None,
        admin_notes=row.admin_notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
        deleted_at=row.deleted_at,
    )


def to_domain_response(row: Optional[DBResponse]) -> Optional[DomainResponse]:
    if row is None:
        return None
    return DomainResponse(
        id=row.id,
        owner_id=row.owner_id,
        submitted_by_id=row.submitted_by_id,
        status=ResponseStatus(row.status),
        dietary_notes=row.dietary_notes,
        message=row.message,
        responded_at=row.responded_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
