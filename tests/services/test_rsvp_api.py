# tests/services/test_rsvp_api.py
from __future__ import annotations

import uuid
from typing import Dict

import pytest

from guestlist.services.identity.store import IdentityStore
from guestlist.services.relationships.manager import RelationshipManager

PASSWORD = "correct horse"


# ---------------------------- helpers -----------------------------------------

@pytest.fixture()
def seeded(database, hasher) -> Dict[str, uuid.UUID]:
    """Commit a small guest list through the services before any request runs."""
    db = database.session()
    try:
        identity = IdentityStore(db, hasher=hasher)
        relationships = RelationshipManager(db)

        admin = identity.create_person("Ada", "Admin", is_admin=True)
        identity.register(admin.id, "ada@example.com", PASSWORD)
        sophia = identity.create_person("Sophia", "Jones")
        james = identity.create_person("James", "Jones")
        relationships.link(sophia.id, james.id)
        ivy = identity.create_person("Ivy", "Inviter", plus_one_allowed=True)
        eve = identity.create_person("Eve", "Stone")
        db.commit()
        return {"admin": admin.id, "sophia": sophia.id, "james": james.id, "ivy": ivy.id, "eve": eve.id}
    finally:
        db.close()


def _register_and_login(api_client, person_id, email: str) -> Dict[str, str]:
    r = api_client.post(
        "/api/auth/register",
        json={"person_id": str(person_id), "email": email, "password": PASSWORD},
    )
    assert r.status_code == 201, r.text
    return _login(api_client, email)


def _login(api_client, email: str) -> Dict[str, str]:
    r = api_client.post("/api/auth/login", json={"email": email, "password": PASSWORD})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


# ------------------------------ tests -----------------------------------------

def test_healthz(api_client):
    r = api_client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_check_guest(api_client, seeded):
    r = api_client.post("/api/auth/check-guest", json={"first_name": "sophia", "last_name": "JONES"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["person_id"] == str(seeded["sophia"])
    assert body["needs_registration"] is True
    assert body["has_partner"] is True
    assert body["partner"]["display_name"] == "James Jones"

    r = api_client.post("/api/auth/check-guest", json={"first_name": "No", "last_name": "Body"})
    assert r.status_code == 404
    assert r.json()["kind"] == "not_found"


def test_register_login_and_me(api_client, seeded):
    headers = _register_and_login(api_client, seeded["sophia"], "sophia@example.com")

    r = api_client.get("/api/auth/me", headers=headers)
    assert r.status_code == 200, r.text
    me = r.json()
    assert me["account_status"] == "registered"
    assert me["partner"]["id"] == str(seeded["james"])

    # second registration for the same person
    r = api_client.post(
        "/api/auth/register",
        json={"person_id": str(seeded["sophia"]), "email": "other@example.com", "password": PASSWORD},
    )
    assert r.status_code == 409
    assert r.json()["kind"] == "conflict"

    r = api_client.post("/api/auth/login", json={"email": "sophia@example.com", "password": "wrong"})
    assert r.status_code == 403


def test_auth_required(api_client, seeded):
    assert api_client.get("/api/rsvps").status_code == 401
    r = api_client.get("/api/rsvps", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401


def test_submit_for_couple(api_client, seeded):
    headers = _register_and_login(api_client, seeded["sophia"], "sophia@example.com")
    r = api_client.post(
        "/api/rsvps",
        headers=headers,
        json={"status": "attending", "dietary_notes": "vegetarian", "partner": {"status": "not_attending"}},
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["own_response"]["status"] == "attending"
    assert body["partner_response"]["owner_id"] == str(seeded["james"])
    assert body["partner_response"]["submitted_by_id"] == str(seeded["sophia"])

    r = api_client.get("/api/rsvps", headers=headers)
    assert r.status_code == 200
    assert r.json()["partner_response"]["status"] == "not_attending"

    # partner on behalf of the owner
    r = api_client.put(f"/api/rsvps/{seeded['james']}", headers=headers, json={"status": "attending"})
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "attending"


def test_submit_for_non_partner_is_forbidden(api_client, seeded):
    headers = _register_and_login(api_client, seeded["eve"], "eve@example.com")
    r = api_client.put(f"/api/rsvps/{seeded['sophia']}", headers=headers, json={"status": "not_attending"})
    assert r.status_code == 403
    assert r.json()["kind"] == "forbidden"


def test_invalid_status_is_rejected(api_client, seeded):
    headers = _register_and_login(api_client, seeded["eve"], "eve@example.com")
    r = api_client.post("/api/rsvps", headers=headers, json={"status": "maybe"})
    assert r.status_code == 422


def test_plus_one_flow(api_client, seeded):
    headers = _register_and_login(api_client, seeded["ivy"], "ivy@example.com")
    companion = {"first_name": "Plus", "last_name": "One", "email": "p1@example.com"}

    r = api_client.post("/api/rsvps/plus-one", headers=headers, json=companion)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["companion"]["partner_id"] == str(seeded["ivy"])
    assert body["companion"]["account_status"] == "unregistered"
    assert body["companion_response"]["status"] == "attending"

    # now partnered: a second plus-one is refused
    r = api_client.post(
        "/api/rsvps/plus-one",
        headers=headers,
        json={"first_name": "Plus", "last_name": "Two", "email": "p2@example.com"},
    )
    assert r.status_code == 403

    r = api_client.get("/api/auth/me", headers=headers)
    assert r.json()["partner"]["display_name"] == "Plus One"


def test_plus_one_not_allowed(api_client, seeded):
    headers = _register_and_login(api_client, seeded["eve"], "eve@example.com")
    r = api_client.post(
        "/api/rsvps/plus-one",
        headers=headers,
        json={"first_name": "Plus", "last_name": "One", "email": "p1@example.com"},
    )
    assert r.status_code == 403
    # nothing was created
    r = api_client.post("/api/auth/check-guest", json={"first_name": "Plus", "last_name": "One"})
    assert r.status_code == 404


def test_admin_people_routes(api_client, seeded):
    guest = _register_and_login(api_client, seeded["eve"], "eve@example.com")
    assert api_client.get("/api/people", headers=guest).status_code == 403
    assert api_client.get("/api/rsvps/summary", headers=guest).status_code == 403

    admin = _login(api_client, "ada@example.com")
    r = api_client.get("/api/people", headers=admin)
    assert r.status_code == 200
    assert len(r.json()) == 5

    r = api_client.post("/api/people", headers=admin, json={"first_name": "New", "last_name": "Guest"})
    assert r.status_code == 201, r.text
    new_id = r.json()["id"]
    r = api_client.post("/api/people", headers=admin, json={"first_name": "new", "last_name": "guest"})
    assert r.status_code == 409

    r = api_client.post(f"/api/people/{new_id}/partner", headers=admin, json={"partner_id": str(seeded["eve"])})
    assert r.status_code == 200, r.text
    assert r.json()["partner"]["partner_id"] == new_id

    r = api_client.post(f"/api/people/{new_id}/partner", headers=admin, json={"partner_id": new_id})
    assert r.status_code == 422

    r = api_client.delete(f"/api/people/{new_id}/partner", headers=admin)
    assert r.status_code == 200
    assert r.json()["partner_id"] is None

    assert api_client.delete(f"/api/people/{new_id}", headers=admin).status_code == 204
    assert api_client.get(f"/api/people/{new_id}", headers=admin).status_code == 404
    r = api_client.get("/api/people", headers=admin, params={"include_removed": True})
    assert len(r.json()) == 6

    r = api_client.get("/api/rsvps/summary", headers=admin)
    assert r.status_code == 200, r.text
    assert r.json()["total_people"] == 5
    assert r.json()["households"] == 4


def test_removed_account_token_stops_working(api_client, seeded):
    guest = _register_and_login(api_client, seeded["eve"], "eve@example.com")
    admin = _login(api_client, "ada@example.com")
    assert api_client.delete(f"/api/people/{seeded['eve']}", headers=admin).status_code == 204
    assert api_client.get("/api/auth/me", headers=guest).status_code == 401
