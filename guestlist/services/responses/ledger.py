from __future__ import annotations

from typing import Any, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from guestlist.common.logging import get_logger
from guestlist.database.core.transaction import store_errors, transactional
from guestlist.database.repos._mapping import to_domain_response
from guestlist.database.repos.people_repo import SqlAlchemyPeopleRepo
from guestlist.database.repos.response_repo import SqlAlchemyResponseRepo
from guestlist.domain.dataclasses.rsvp import ResponsePayload, ResponseSummary, ResponseView, SubmitResult
from guestlist.domain.enums import ResponseStatus
from guestlist.domain.errors import ForbiddenError, NotFoundError, ValidationFailed
from guestlist.domain.policies.account_lifecycle import AccountStateMachine
from guestlist.services.identity.store import IdentityStore
from guestlist.services.relationships.manager import RelationshipManager

logger = get_logger(__name__)

PayloadLike = Union[ResponsePayload, Mapping[str, Any]]


def _as_payload(value: Optional[PayloadLike]) -> Optional[ResponsePayload]:
    if value is None or isinstance(value, ResponsePayload):
        return value
    return ResponsePayload.from_mapping(dict(value))


class ResponseLedger:
    """
    One Response per Person, written only through submit().

    A submission may come from the owner or from the owner's current
    (active, mirrored) partner, and may answer for both partners at once.
    Both upserts share one unit of work: either both are stored or neither.
    A partner answer sent without an active partner is dropped.
    """

    def __init__(
        self,
        db: Session,
        *,
        identity: Optional[IdentityStore] = None,
        relationships: Optional[RelationshipManager] = None,
        repo: Optional[SqlAlchemyResponseRepo] = None,
    ) -> None:
        self.db = db
        self.identity = identity or IdentityStore(db)
        self.relationships = relationships or RelationshipManager(db)
        self.repo = repo or SqlAlchemyResponseRepo(db)
        self.people = SqlAlchemyPeopleRepo(db)

    def submit(
        self,
        owner_id: UUID,
        submitted_by_id: UUID,
        payload: PayloadLike,
        partner_payload: Optional[PayloadLike] = None,
    ) -> SubmitResult:
        own_payload = _as_payload(payload)
        if own_payload is None:
            raise ValidationFailed("Response status is required", field="status")
        other_payload = _as_payload(partner_payload)

        with transactional(self.db):
            # Locking the owner serializes us against link/unlink on the same pair
            locked = self.people.lock_many([owner_id])
            if not locked or locked[0].deleted_at is not None:
                raise NotFoundError("The owner was not found", person_id=owner_id, role="owner")
            owner = locked[0]

            if submitted_by_id == owner.id:
                submitter = owner
            else:
                submitter = self.identity.row(submitted_by_id, role="submitter")
                AccountStateMachine.ensure_active(submitter.account_status, person_id=submitter.id, role="submitter")

            partner = self.relationships.partner_row(owner)
            if submitter.id != owner.id and (partner is None or partner.id != submitter.id):
                logger.warning("Rejected response for %s submitted by non-partner %s", owner.id, submitter.id)
                raise ForbiddenError(
                    "Only the person or their partner may respond",
                    owner_id=owner.id,
                    submitted_by_id=submitter.id,
                )
            if other_payload is not None and partner is None:
                logger.info("Ignoring partner response for %s: no active partner", owner.id)
                other_payload = None

            own_row, created = self.repo.upsert(owner_id=owner.id, submitted_by_id=submitter.id, payload=own_payload)
            partner_row = None
            if other_payload is not None:
                partner_row, _ = self.repo.upsert(owner_id=partner.id, submitted_by_id=submitter.id, payload=other_payload)

        logger.info(
            "%s response for %s (%s) by %s%s",
            "Recorded" if created else "Updated",
            owner.id,
            own_payload.status.value,
            submitter.id,
            f"; partner {partner.id} ({other_payload.status.value})" if partner_row is not None else "",
        )
        return SubmitResult(
            own_response=to_domain_response(own_row),
            partner_response=to_domain_response(partner_row),
        )

    def get(self, owner_id: UUID) -> ResponseView:
        owner = self.identity.active_row(owner_id, role="owner")
        with store_errors():
            partner = self.relationships.partner_row(owner)
            found = self.repo.batch_by_owner([owner.id] + ([partner.id] if partner is not None else []))
        return ResponseView(
            own_response=to_domain_response(found.get(owner.id)),
            partner_response=to_domain_response(found.get(partner.id) if partner is not None else None),
        )

    def summary(self) -> ResponseSummary:
        """Admin headcount over active people; a couple is one household."""
        with store_errors():
            rows = self.repo.rows_for_summary()

        people = {p.id: p for p, _ in rows}
        out = ResponseSummary(total_people=len(rows))
        pairs = 0
        for person, response in rows:
            partner = people.get(person.partner_id) if person.partner_id else None
            if partner is not None and partner.partner_id == person.id:
                pairs += 1

            status = response.status if response is not None else ResponseStatus.pending
            if status == ResponseStatus.attending:
                out.attending += 1
            elif status == ResponseStatus.not_attending:
                out.not_attending += 1
            else:
                out.pending += 1
            if status != ResponseStatus.pending:
                out.responded += 1

        out.households = out.total_people - pairs // 2
        return out
