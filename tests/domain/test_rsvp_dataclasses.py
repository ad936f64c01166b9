# tests/domain/test_rsvp_dataclasses.py
from __future__ import annotations

import uuid

import pytest

from guestlist.domain.dataclasses.reports import ImportReport
from guestlist.domain.dataclasses.rsvp import Companion, ResponsePayload
from guestlist.domain.entities.person import Person
from guestlist.domain.entities.response import Response
from guestlist.domain.enums import AccountStatus, ResponseStatus
from guestlist.domain.errors import ValidationFailed


def test_payload_coerces_status_and_blanks():
    p = ResponsePayload(status="attending", dietary_notes="  ", message=" See you! ")
    assert p.status is ResponseStatus.attending
    assert p.dietary_notes is None
    assert p.message == "See you!"


def test_payload_rejects_unknown_status():
    with pytest.raises(ValidationFailed) as ei:
        ResponsePayload(status="maybe")
    assert ei.value.context["field"] == "status"


def test_payload_from_mapping_requires_status():
    with pytest.raises(ValidationFailed):
        ResponsePayload.from_mapping({"dietary_notes": "vegan"})
    p = ResponsePayload.from_mapping({"status": "not_attending", "message": "Sorry"})
    assert p.status is ResponseStatus.not_attending
    assert p.message == "Sorry"


def test_companion_normalizes():
    c = Companion(first_name="  Cordelia ", last_name="Chase", email=" Cordelia@Example.com ")
    assert (c.first_name, c.last_name, c.email) == ("Cordelia", "Chase", "cordelia@example.com")


@pytest.mark.parametrize(
    "first,last,email,field",
    [
        ("", "Chase", "c@example.com", "first_name"),
        ("Cordelia", "  ", "c@example.com", "last_name"),
        ("Cordelia", "Chase", "not-an-email", "email"),
    ],
)
def test_companion_validation(first, last, email, field):
    with pytest.raises(ValidationFailed) as ei:
        Companion(first_name=first, last_name=last, email=email)
    assert ei.value.context["field"] == field


def test_person_snapshot_properties():
    pid, other = uuid.uuid4(), uuid.uuid4()
    p = Person(id=pid, first_name="Ann", last_name="Lee", partner_id=other)
    assert p.display_name == "Ann Lee"
    assert p.is_active and not p.is_registered and p.has_partner
    assert p.as_dict()["display_name"] == "Ann Lee"

    gone = Person(id=pid, first_name="Ann", last_name="Lee", account_status=AccountStatus.removed)
    assert not gone.is_active


def test_response_submitted_by_partner():
    owner, partner = uuid.uuid4(), uuid.uuid4()
    r = Response(id=uuid.uuid4(), owner_id=owner, submitted_by_id=partner, status=ResponseStatus.attending)
    assert r.submitted_by_partner
    assert not Response(id=uuid.uuid4(), owner_id=owner, submitted_by_id=owner, status="pending").submitted_by_partner


def test_import_report_merge():
    a, b = ImportReport(rows=2, created=2), ImportReport(rows=3, existing=1, errors=1)
    a.start()
    b.add_error("Ann Lee", "boom")
    b.stop()
    a.merge(b)
    assert (a.rows, a.created, a.existing, a.errors) == (5, 2, 1, 1)
    assert a.error_details == [("Ann Lee", "boom")]
    assert a.finished_at == b.finished_at
