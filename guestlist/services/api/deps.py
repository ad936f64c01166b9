# guestlist/services/api/deps.py
from __future__ import annotations
from typing import Generator, Optional
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from guestlist.common.settings import Settings
from guestlist.database.core.main import Database
from guestlist.domain.entities.person import Person
from guestlist.domain.errors import ForbiddenError, NotFoundError
from guestlist.domain.ports.credentials import CredentialHasherPort
from guestlist.services.api.security import decode_access_token
from guestlist.services.identity.store import IdentityStore
from guestlist.services.plus_one.provisioner import PlusOneProvisioner
from guestlist.services.relationships.manager import RelationshipManager
from guestlist.services.responses.ledger import ResponseLedger

bearer = HTTPBearer(auto_error=False)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_hasher(request: Request) -> CredentialHasherPort:
    return request.app.state.hasher


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    db = database.session()
    try:
        yield db
    finally:
        db.close()


def transactional_session(db: Session = Depends(get_db)) -> Generator[Session, None, None]:
    """
    Request-scoped transaction. The services open SAVEPOINTs inside it, so a
    failed operation rolls back only its own writes before the error handler
    answers; the outer transaction then rolls back as the error bubbles out.
    """
    with db.begin():
        yield db


# ---- services (one set per request, all on the request's session) ----

def get_identity(
    db: Session = Depends(transactional_session),
    hasher: CredentialHasherPort = Depends(get_hasher),
) -> IdentityStore:
    return IdentityStore(db, hasher=hasher)


def get_relationships(db: Session = Depends(transactional_session)) -> RelationshipManager:
    return RelationshipManager(db)


def get_ledger(
    db: Session = Depends(transactional_session),
    identity: IdentityStore = Depends(get_identity),
    relationships: RelationshipManager = Depends(get_relationships),
) -> ResponseLedger:
    return ResponseLedger(db, identity=identity, relationships=relationships)


def get_provisioner(
    db: Session = Depends(transactional_session),
    identity: IdentityStore = Depends(get_identity),
    relationships: RelationshipManager = Depends(get_relationships),
    settings: Settings = Depends(get_app_settings),
) -> PlusOneProvisioner:
    return PlusOneProvisioner(db, identity=identity, relationships=relationships, settings=settings)


# ---- authentication ----

def current_person(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    identity: IdentityStore = Depends(get_identity),
    settings: Settings = Depends(get_app_settings),
) -> Person:
    """
    The caller, re-read from the store on every request: a token issued
    before an account was removed stops working immediately.
    """
    unauthorized = HTTPException(
        status_code=401,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if creds is None:
        raise unauthorized
    try:
        person_id = decode_access_token(creds.credentials, settings.auth)
        person = identity.find_by_id(person_id)
    except (ValueError, NotFoundError):
        raise unauthorized
    if not person.is_registered:
        raise unauthorized
    return person


def require_admin(person: Person = Depends(current_person)) -> Person:
    if not person.is_admin:
        raise ForbiddenError("Administrator access required", person_id=person.id)
    return person
