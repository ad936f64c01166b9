from __future__ import annotations

from typing import Any, Mapping, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from guestlist.common.logging import get_logger
from guestlist.common.settings import Settings, get_settings
from guestlist.database.core.transaction import transactional
from guestlist.database.repos._mapping import to_domain_person, to_domain_response
from guestlist.database.repos.people_repo import SqlAlchemyPeopleRepo
from guestlist.database.repos.response_repo import SqlAlchemyResponseRepo
from guestlist.domain.dataclasses.rsvp import Companion, ProvisionResult, ResponsePayload
from guestlist.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailed
from guestlist.domain.policies.account_lifecycle import AccountStateMachine
from guestlist.services.identity.store import IdentityStore
from guestlist.services.relationships.manager import RelationshipManager

logger = get_logger(__name__)

CompanionLike = Union[Companion, Mapping[str, Any]]


class PlusOneProvisioner:
    """
    Materializes an unlisted companion as a new Person and links it to the
    inviter as partner.

    Gate (checked first, whatever the companion looks like):
      - inviter exists, is active, has plus_one_allowed, has no partner
    Then, in ONE unit of work:
      - create the companion (unregistered, no password, email captured)
      - link inviter <-> companion through the relationship manager
      - optionally record the companion's initial response
    Any failure rolls the whole unit back: no orphaned unregistered people.
    """

    def __init__(
        self,
        db: Session,
        *,
        identity: Optional[IdentityStore] = None,
        relationships: Optional[RelationshipManager] = None,
        responses: Optional[SqlAlchemyResponseRepo] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.db = db
        self.cfg = settings or get_settings()
        self.identity = identity or IdentityStore(db)
        self.relationships = relationships or RelationshipManager(db)
        self.responses = responses or SqlAlchemyResponseRepo(db)
        self.people = SqlAlchemyPeopleRepo(db)

    def default_response(self) -> Optional[ResponsePayload]:
        if not self.cfg.rsvp.plus_one_creates_response:
            return None
        return ResponsePayload(
            status=self.cfg.rsvp.plus_one_default_status,
            message=self.cfg.rsvp.plus_one_default_message,
        )

    def provision(
        self,
        inviter_id: UUID,
        companion: CompanionLike,
        initial_response: Optional[ResponsePayload] = None,
        *,
        with_response: bool = True,
    ) -> ProvisionResult:
        with transactional(self.db):
            locked = self.people.lock_many([inviter_id])
            if not locked:
                raise NotFoundError("The inviter was not found", person_id=inviter_id, role="inviter")
            inviter = locked[0]
            AccountStateMachine.ensure_active(inviter.account_status, person_id=inviter.id, role="inviter")
            if not inviter.plus_one_allowed:
                logger.warning("Plus-one refused for %s: not allowed", inviter.id)
                raise ForbiddenError("Plus-one not allowed for this guest", person_id=inviter.id)
            if self.relationships.partner_row(inviter) is not None:
                logger.warning("Plus-one refused for %s: already partnered", inviter.id)
                raise ForbiddenError(
                    "Guests with a partner cannot add a plus-one",
                    person_id=inviter.id,
                    partner_id=inviter.partner_id,
                )

            guest = self._companion(companion)
            if self.people.find_active_by_email(guest.email) is not None:
                raise ConflictError("This email address is already in use", field="email", email=guest.email)

            new_row = self.identity.create_person_row(
                guest.first_name,
                guest.last_name,
                plus_one_allowed=False,
                email=guest.email,
                admin_notes=f"Plus-one of {inviter.display_name}",
            )
            self.relationships.link(inviter.id, new_row.id)

            response_row = None
            payload = initial_response or (self.default_response() if with_response else None)
            if payload is not None:
                response_row, _ = self.responses.upsert(
                    owner_id=new_row.id,
                    submitted_by_id=inviter.id,
                    payload=payload,
                )

        logger.info("Provisioned plus-one %s (%s) for %s", new_row.id, new_row.display_name, inviter.id)
        return ProvisionResult(
            inviter=to_domain_person(inviter),
            companion=to_domain_person(new_row),
            companion_response=to_domain_response(response_row),
        )

    @staticmethod
    def _companion(value: CompanionLike) -> Companion:
        if isinstance(value, Companion):
            return value
        if not isinstance(value, Mapping):
            raise ValidationFailed("Companion details are required", field="companion")
        return Companion(
            first_name=value.get("first_name") or value.get("first") or "",
            last_name=value.get("last_name") or value.get("last") or "",
            email=value.get("email") or "",
        )
