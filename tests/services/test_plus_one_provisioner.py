# tests/services/test_plus_one_provisioner.py
from __future__ import annotations

import uuid

import pytest
from sqlalchemy import func, select

from guestlist.common.settings import RSVPConfig, Settings
from guestlist.database.models import Person as DBPerson, Response as DBResponse
from guestlist.domain.dataclasses.rsvp import Companion, ResponsePayload
from guestlist.domain.enums import AccountStatus, ResponseStatus
from guestlist.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailed

PLUS_ONE = {"first_name": "Plus", "last_name": "One", "email": "p1@example.com"}


def _count(db, model) -> int:
    return db.execute(select(func.count()).select_from(model)).scalar_one()


def test_provision_creates_and_links_companion(identity, provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    result = provisioner.provision(inviter.id, PLUS_ONE)

    companion = identity.find_by_id(result.companion.id)
    assert companion.account_status == AccountStatus.unregistered
    assert companion.partner_id == inviter.id
    assert not companion.has_credential
    assert companion.email == "p1@example.com"
    assert "Ivy Inviter" in companion.admin_notes
    assert identity.find_by_id(inviter.id).partner_id == companion.id
    assert result.inviter.partner_id == companion.id


def test_provision_records_default_response(provisioner, ledger, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    result = provisioner.provision(inviter.id, PLUS_ONE)
    assert result.companion_response.status is ResponseStatus.attending
    assert result.companion_response.submitted_by_id == inviter.id

    view = ledger.get(inviter.id)
    assert view.own_response is None
    assert view.partner_response.owner_id == result.companion.id


def test_provision_with_explicit_response(provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    result = provisioner.provision(
        inviter.id,
        Companion(first_name="Plus", last_name="One", email="p1@example.com"),
        ResponsePayload(status="attending", dietary_notes="vegan"),
    )
    assert result.companion_response.dietary_notes == "vegan"


def test_provision_without_response(db, provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    result = provisioner.provision(inviter.id, PLUS_ONE, with_response=False)
    assert result.companion_response is None
    assert _count(db, DBResponse) == 0


def test_default_response_can_be_turned_off(db, provisioner, make_person):
    provisioner.cfg = Settings(rsvp=RSVPConfig(plus_one_creates_response=False))
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    assert provisioner.provision(inviter.id, PLUS_ONE).companion_response is None
    assert _count(db, DBResponse) == 0


def test_permission_gate_ignores_companion_validity(db, provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=False)
    for companion in (PLUS_ONE, {"first_name": "", "last_name": "", "email": "bad"}):
        with pytest.raises(ForbiddenError):
            provisioner.provision(inviter.id, companion)
    assert _count(db, DBPerson) == 1


def test_partnered_inviter_is_forbidden(db, provisioner, relationships, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    partner = make_person("Pat", "Partner")
    relationships.link(inviter.id, partner.id)
    with pytest.raises(ForbiddenError):
        provisioner.provision(inviter.id, PLUS_ONE)
    assert _count(db, DBPerson) == 2


def test_removed_or_missing_inviter(identity, provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    identity.soft_delete(inviter.id)
    with pytest.raises(NotFoundError):
        identity.find_by_name("Ivy", "Inviter")
    with pytest.raises(ForbiddenError):
        provisioner.provision(inviter.id, PLUS_ONE)
    with pytest.raises(NotFoundError):
        provisioner.provision(uuid.uuid4(), PLUS_ONE)


def test_invalid_companion(db, provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    with pytest.raises(ValidationFailed):
        provisioner.provision(inviter.id, {"first_name": "Plus", "last_name": "One", "email": "nope"})
    with pytest.raises(ValidationFailed):
        provisioner.provision(inviter.id, None)
    assert _count(db, DBPerson) == 1


def test_companion_email_in_use(db, provisioner, make_registered, make_person):
    make_registered("Paula", "Owner", email="p1@example.com")
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    with pytest.raises(ConflictError):
        provisioner.provision(inviter.id, PLUS_ONE)
    assert _count(db, DBPerson) == 2


def test_failed_link_rolls_back_companion(db, identity, provisioner, make_person, monkeypatch):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)

    def _boom(*args, **kwargs):
        raise ConflictError("link interrupted")

    monkeypatch.setattr(provisioner.relationships, "link", _boom)
    with pytest.raises(ConflictError):
        provisioner.provision(inviter.id, PLUS_ONE)

    assert _count(db, DBPerson) == 1
    assert _count(db, DBResponse) == 0
    assert identity.find_by_id(inviter.id).partner_id is None
    with pytest.raises(NotFoundError):
        identity.find_by_name("Plus", "One")


def test_companion_can_register_with_captured_email(identity, provisioner, make_person):
    inviter = make_person("Ivy", "Inviter", plus_one_allowed=True)
    companion = provisioner.provision(inviter.id, PLUS_ONE).companion
    registered = identity.register(companion.id, "p1@example.com", "hunter22")
    assert registered.account_status == AccountStatus.registered
    assert registered.partner_id == inviter.id
    assert identity.authenticate("p1@example.com", "hunter22").id == companion.id
