# guestlist/services/api/routers/rsvp.py
from __future__ import annotations

from http import HTTPStatus
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends

from guestlist.domain.dataclasses.rsvp import Companion, ResponsePayload
from guestlist.domain.entities.person import Person
from guestlist.services.api.deps import current_person, get_ledger, get_provisioner, require_admin
from guestlist.services.plus_one.provisioner import PlusOneProvisioner
from guestlist.services.responses.ledger import ResponseLedger
from guestlist.services.schemas.people import PersonRead
from guestlist.services.schemas.rsvp import (
    PlusOneCreate,
    PlusOneRead,
    ResponseIn,
    ResponseRead,
    ResponseSubmit,
    ResponseSummaryRead,
    ResponseViewRead,
)

router = APIRouter(prefix="/rsvps", tags=["rsvps"])


def _payload(data: Optional[ResponseIn]) -> Optional[ResponsePayload]:
    if data is None:
        return None
    return ResponsePayload(status=data.status, dietary_notes=data.dietary_notes, message=data.message)


@router.get("", response_model=ResponseViewRead)
def my_responses(
    person: Person = Depends(current_person),
    ledger: ResponseLedger = Depends(get_ledger),
) -> ResponseViewRead:
    return ResponseViewRead.model_validate(ledger.get(person.id))


@router.post("", response_model=ResponseViewRead)
def submit_response(
    payload: ResponseSubmit,
    person: Person = Depends(current_person),
    ledger: ResponseLedger = Depends(get_ledger),
) -> ResponseViewRead:
    """Answer for yourself and, optionally, for your partner in the same request."""
    result = ledger.submit(person.id, person.id, _payload(payload), _payload(payload.partner))
    return ResponseViewRead.model_validate(result)


@router.put("/{owner_id}", response_model=ResponseRead)
def submit_for(
    owner_id: UUID,
    payload: ResponseIn,
    person: Person = Depends(current_person),
    ledger: ResponseLedger = Depends(get_ledger),
) -> ResponseRead:
    result = ledger.submit(owner_id, person.id, _payload(payload))
    return ResponseRead.model_validate(result.own_response)


@router.post("/plus-one", response_model=PlusOneRead, status_code=HTTPStatus.CREATED)
def add_plus_one(
    payload: PlusOneCreate,
    person: Person = Depends(current_person),
    provisioner: PlusOneProvisioner = Depends(get_provisioner),
) -> PlusOneRead:
    result = provisioner.provision(
        person.id,
        Companion(first_name=payload.first_name, last_name=payload.last_name, email=payload.email),
        _payload(payload.response),
    )
    return PlusOneRead(
        companion=PersonRead.model_validate(result.companion),
        companion_response=(
            ResponseRead.model_validate(result.companion_response) if result.companion_response else None
        ),
    )


@router.get("/summary", response_model=ResponseSummaryRead)
def summary(
    _: Person = Depends(require_admin),
    ledger: ResponseLedger = Depends(get_ledger),
) -> ResponseSummaryRead:
    return ResponseSummaryRead.model_validate(ledger.summary())
