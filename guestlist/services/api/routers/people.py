# guestlist/services/api/routers/people.py
from __future__ import annotations

from http import HTTPStatus
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query

from guestlist.domain.entities.person import Person
from guestlist.services.api.deps import get_identity, get_relationships, require_admin
from guestlist.services.identity.store import IdentityStore
from guestlist.services.relationships.manager import RelationshipManager
from guestlist.services.schemas.people import (
    PartnerLinkCreate,
    PartnerLinkRead,
    PersonAdminRead,
    PersonCreate,
    PersonRead,
)

# Guest list administration; every route needs an admin token
router = APIRouter(prefix="/people", tags=["people"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[PersonAdminRead])
def list_people(
    include_removed: bool = Query(False),
    identity: IdentityStore = Depends(get_identity),
) -> List[PersonAdminRead]:
    return [PersonAdminRead.model_validate(p) for p in identity.list_people(include_removed=include_removed)]


@router.post("", response_model=PersonAdminRead, status_code=HTTPStatus.CREATED)
def create_person(
    payload: PersonCreate,
    identity: IdentityStore = Depends(get_identity),
) -> PersonAdminRead:
    person = identity.create_person(
        payload.first_name,
        payload.last_name,
        plus_one_allowed=payload.plus_one_allowed,
        is_admin=payload.is_admin,
        admin_notes=payload.admin_notes,
        email=payload.email,
    )
    return PersonAdminRead.model_validate(person)


@router.get("/{person_id}", response_model=PersonAdminRead)
def get_person(
    person_id: UUID = Path(...),
    identity: IdentityStore = Depends(get_identity),
) -> PersonAdminRead:
    return PersonAdminRead.model_validate(identity.find_by_id(person_id))


@router.delete("/{person_id}", status_code=HTTPStatus.NO_CONTENT)
def delete_person(
    person_id: UUID,
    identity: IdentityStore = Depends(get_identity),
) -> None:
    identity.soft_delete(person_id)
    return None


# ---- Partner link ----

@router.post("/{person_id}/partner", response_model=PartnerLinkRead)
def link_partner(
    person_id: UUID,
    payload: PartnerLinkCreate,
    relationships: RelationshipManager = Depends(get_relationships),
) -> PartnerLinkRead:
    a, b = relationships.link(person_id, payload.partner_id)
    return PartnerLinkRead(person=PersonRead.model_validate(a), partner=PersonRead.model_validate(b))


@router.delete("/{person_id}/partner", response_model=PersonRead)
def unlink_partner(
    person_id: UUID,
    relationships: RelationshipManager = Depends(get_relationships),
) -> PersonRead:
    person: Person = relationships.unlink(person_id)
    return PersonRead.model_validate(person)
