# tests/database/test_unit_of_work.py
from __future__ import annotations

from typing import Iterator

import pytest
from sqlalchemy import func, select

from guestlist.database.core.main import Database
from guestlist.database.models import Person as DBPerson
from guestlist.domain.enums import AccountStatus, ResponseStatus
from guestlist.domain.errors import ConflictError
from guestlist.services.identity.store import IdentityStore
from guestlist.services.importer.guest_import import GuestImporter
from guestlist.services.relationships.manager import RelationshipManager
from guestlist.services.responses.ledger import ResponseLedger


@pytest.fixture()
def file_database(tmp_path, settings) -> Iterator[Database]:
    """A file-backed store, so separate sessions really use separate connections."""
    database = Database(f"sqlite:///{tmp_path / 'guestlist.db'}", settings=settings)
    database.create_all()
    try:
        yield database
    finally:
        database.dispose()


def _people(database: Database) -> int:
    with database.session() as s:
        return s.execute(select(func.count()).select_from(DBPerson)).scalar_one()


def test_import_survives_closing_the_session(file_database, hasher):
    s1 = file_database.session()
    importer = GuestImporter(s1, identity=IdentityStore(s1, hasher=hasher))
    rpt = importer.import_text("Sophia,Jones,,James,Jones\nJames,Jones,,Sophia,Jones\n")
    s1.close()

    assert (rpt.created, rpt.linked) == (2, 1)
    assert _people(file_database) == 2
    with file_database.session() as s2:
        sophia = IdentityStore(s2, hasher=hasher).find_by_name("sophia", "jones")
        assert sophia.partner_id is not None


def test_register_after_lookup_is_committed(file_database, hasher):
    with file_database.session() as s0:
        ann = IdentityStore(s0, hasher=hasher).create_person("Ann", "Lee")

    s1 = file_database.session()
    identity = IdentityStore(s1, hasher=hasher)
    identity.find_by_id(ann.id)
    assert s1.in_transaction()
    identity.register(ann.id, "ann@example.com", "pw-123456")
    s1.close()

    with file_database.session() as s2:
        assert IdentityStore(s2, hasher=hasher).find_by_id(ann.id).account_status is AccountStatus.registered


def test_explicit_transaction_stays_with_the_caller(file_database, hasher):
    s1 = file_database.session()
    s1.begin()
    IdentityStore(s1, hasher=hasher).create_person("Ann", "Lee")
    s1.rollback()
    s1.close()

    assert _people(file_database) == 0


def test_first_response_race_is_a_conflict(file_database, hasher, monkeypatch):
    with file_database.session() as s0:
        ann = IdentityStore(s0, hasher=hasher).create_person("Ann", "Lee")

    with file_database.session() as s2:
        ResponseLedger(s2, identity=IdentityStore(s2, hasher=hasher)).submit(ann.id, ann.id, {"status": "attending"})

    s1 = file_database.session()
    ledger = ResponseLedger(s1, identity=IdentityStore(s1, hasher=hasher), relationships=RelationshipManager(s1))
    # this writer read "no response yet" before the other one committed
    monkeypatch.setattr(ledger.repo, "get_by_owner", lambda owner_id: None)
    with pytest.raises(ConflictError):
        ledger.submit(ann.id, ann.id, {"status": "not_attending"})
    s1.close()

    with file_database.session() as s3:
        view = ResponseLedger(s3, identity=IdentityStore(s3, hasher=hasher)).get(ann.id)
        assert view.own_response.status is ResponseStatus.attending
