# tests/conftest.py
from __future__ import annotations
import os
from typing import Callable, Iterator, Optional

import pytest
from sqlalchemy.orm import Session
from starlette.testclient import TestClient

from guestlist.common.settings import AuthConfig, Settings
from guestlist.database.core.main import Database
from guestlist.domain.entities.person import Person
from guestlist.services.api.app import create_app
from guestlist.services.hashing.bcrypt_hasher import BcryptHasher
from guestlist.services.identity.store import IdentityStore
from guestlist.services.importer.guest_import import GuestImporter
from guestlist.services.plus_one.provisioner import PlusOneProvisioner
from guestlist.services.relationships.manager import RelationshipManager
from guestlist.services.responses.ledger import ResponseLedger

# Point at a Postgres database to run the suite there; defaults to in-memory SQLite
TEST_DATABASE_URL = os.getenv("GUESTLIST_TEST_DATABASE_URL", "sqlite://")


@pytest.fixture()
def settings() -> Settings:
    # Minimum bcrypt cost keeps the suite fast
    return Settings(
        app_env="test",
        auth=AuthConfig(jwt_secret="test-secret", bcrypt_rounds=4),
    )


@pytest.fixture()
def database(settings) -> Iterator[Database]:
    """A fresh schema per test."""
    database = Database(TEST_DATABASE_URL, settings=settings)
    if not database.url.startswith("sqlite"):
        database.drop_all()
    database.create_all()
    try:
        yield database
    finally:
        if not database.url.startswith("sqlite"):
            database.drop_all()
        database.dispose()


@pytest.fixture()
def db(database) -> Iterator[Session]:
    session = database.session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def hasher(settings) -> BcryptHasher:
    return BcryptHasher(rounds=settings.auth.bcrypt_rounds)


@pytest.fixture()
def identity(db, hasher) -> IdentityStore:
    return IdentityStore(db, hasher=hasher)


@pytest.fixture()
def relationships(db) -> RelationshipManager:
    return RelationshipManager(db)


@pytest.fixture()
def ledger(db, identity, relationships) -> ResponseLedger:
    return ResponseLedger(db, identity=identity, relationships=relationships)


@pytest.fixture()
def provisioner(db, identity, relationships, settings) -> PlusOneProvisioner:
    return PlusOneProvisioner(db, identity=identity, relationships=relationships, settings=settings)


@pytest.fixture()
def importer(db, identity, relationships) -> GuestImporter:
    return GuestImporter(db, identity=identity, relationships=relationships)


@pytest.fixture()
def make_person(identity) -> Callable[..., Person]:
    """Seed an unregistered guest: make_person("Ann", "Lee", plus_one_allowed=True)."""
    def _make(first: str, last: str, **kw) -> Person:
        return identity.create_person(first, last, **kw)
    return _make


@pytest.fixture()
def make_registered(identity) -> Callable[..., Person]:
    def _make(first: str, last: str, email: Optional[str] = None, password: str = "pw-123456", **kw) -> Person:
        p = identity.create_person(first, last, **kw)
        return identity.register(p.id, email or f"{first}.{last}@example.com".lower(), password)
    return _make


@pytest.fixture()
def api_client(settings, database) -> Iterator[TestClient]:
    """
    A TestClient over the real app wired to this test's store. Every request
    gets its own session and transaction, just like production.
    """
    app = create_app(settings=settings, database=database)
    with TestClient(app) as client:
        yield client
