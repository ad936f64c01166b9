# guestlist/services/api/routers/auth.py
from __future__ import annotations

from http import HTTPStatus

from fastapi import APIRouter, Depends

from guestlist.common.settings import Settings
from guestlist.domain.entities.person import Person
from guestlist.domain.enums import AccountStatus
from guestlist.services.api.deps import current_person, get_app_settings, get_identity, get_relationships
from guestlist.services.api.security import create_access_token
from guestlist.services.identity.store import IdentityStore
from guestlist.services.relationships.manager import RelationshipManager
from guestlist.services.schemas.auth import GuestLookup, GuestLookupRead, LoginRequest, RegisterRequest, TokenRead
from guestlist.services.schemas.people import PartnerRead, PersonProfile, PersonRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/check-guest", response_model=GuestLookupRead)
def check_guest(
    payload: GuestLookup,
    identity: IdentityStore = Depends(get_identity),
    relationships: RelationshipManager = Depends(get_relationships),
) -> GuestLookupRead:
    """First step of sign-up: is this name on the guest list?"""
    person = identity.find_by_name(payload.first_name, payload.last_name)
    partner = relationships.partner_of(person.id)
    return GuestLookupRead(
        person_id=person.id,
        first_name=person.first_name,
        last_name=person.last_name,
        display_name=person.display_name,
        plus_one_allowed=person.plus_one_allowed,
        has_partner=partner is not None,
        partner=PartnerRead.model_validate(partner) if partner is not None else None,
        needs_registration=person.account_status == AccountStatus.unregistered,
    )


@router.post("/register", response_model=PersonRead, status_code=HTTPStatus.CREATED)
def register(
    payload: RegisterRequest,
    identity: IdentityStore = Depends(get_identity),
) -> PersonRead:
    person = identity.register(payload.person_id, payload.email, payload.password)
    return PersonRead.model_validate(person)


@router.post("/login", response_model=TokenRead)
def login(
    payload: LoginRequest,
    identity: IdentityStore = Depends(get_identity),
    settings: Settings = Depends(get_app_settings),
) -> TokenRead:
    person = identity.authenticate(payload.email, payload.password)
    return TokenRead(access_token=create_access_token(person.id, settings.auth), person_id=person.id)


@router.get("/me", response_model=PersonProfile)
def me(
    person: Person = Depends(current_person),
    relationships: RelationshipManager = Depends(get_relationships),
) -> PersonProfile:
    partner = relationships.partner_of(person.id)
    out = PersonProfile.model_validate(person)
    out.partner = PartnerRead.model_validate(partner) if partner is not None else None
    return out
