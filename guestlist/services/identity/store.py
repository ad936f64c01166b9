from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from guestlist.common.logging import get_logger
from guestlist.common.naming.people import clean_name, display_name, is_valid_email, normalize_email
from guestlist.common.settings import get_settings
from guestlist.database.core.transaction import store_errors, transactional
from guestlist.database.models.person import Person as DBPerson
from guestlist.database.repos._mapping import to_domain_person
from guestlist.database.repos.people_repo import SqlAlchemyPeopleRepo
from guestlist.domain.entities.person import Person
from guestlist.domain.enums import AccountStatus
from guestlist.domain.errors import ConflictError, ForbiddenError, NotFoundError, ValidationFailed
from guestlist.domain.policies.account_lifecycle import AccountStateMachine
from guestlist.domain.ports.credentials import CredentialHasherPort
from guestlist.services.hashing.bcrypt_hasher import BcryptHasher

logger = get_logger(__name__)


class IdentityStore:
    """
    Lookup and lifecycle of Person records.

    Every read excludes soft-deleted rows; every write runs in its own unit
    of work (a SAVEPOINT when the caller began a transaction explicitly, so
    the provisioner can compose it; otherwise committed on its own).
    """

    def __init__(
        self,
        db: Session,
        *,
        hasher: Optional[CredentialHasherPort] = None,
        repo: Optional[SqlAlchemyPeopleRepo] = None,
    ) -> None:
        self.db = db
        self.cfg = get_settings()
        self.repo = repo or SqlAlchemyPeopleRepo(db)
        self.hasher: CredentialHasherPort = hasher or BcryptHasher(rounds=self.cfg.auth.bcrypt_rounds)

    # ---------------- row access (shared with the other components) ----------------

    def row(self, person_id: UUID, *, role: str = "person") -> DBPerson:
        """Row including removed ones; NotFound only when it never existed."""
        with store_errors():
            obj = self.repo.get(person_id)
        if obj is None:
            raise NotFoundError(f"The {role} was not found", person_id=person_id, role=role)
        return obj

    def active_row(self, person_id: UUID, *, role: str = "person") -> DBPerson:
        """Active row; removed people are reported as missing."""
        obj = self.row(person_id, role=role)
        if obj.deleted_at is not None:
            raise NotFoundError(f"The {role} was not found", person_id=person_id, role=role)
        return obj

    # ---------------- lookups ----------------

    def find_by_name(self, first_name: str, last_name: str) -> Person:
        """
        Case-insensitive exact match on active people. Two active people
        sharing a name is a Conflict for an administrator to resolve; we never
        pick one of them.
        """
        first, last = clean_name(first_name), clean_name(last_name)
        if not first or not last:
            raise ValidationFailed("First name and last name are required", field="first_name" if not first else "last_name")

        with store_errors():
            rows = self.repo.find_active_by_name(first, last)
        if not rows:
            raise NotFoundError("Guest record not found", first_name=first, last_name=last)
        if len(rows) > 1:
            logger.warning("Ambiguous name lookup for %r: %d active matches", display_name(first, last), len(rows))
            raise ConflictError(
                "More than one guest matches this name",
                first_name=first,
                last_name=last,
                candidates=[str(r.id) for r in rows],
            )
        return to_domain_person(rows[0])

    def find_by_id(self, person_id: UUID) -> Person:
        return to_domain_person(self.active_row(person_id))

    def find_by_email(self, email: str) -> Person:
        with store_errors():
            obj = self.repo.find_active_by_email(email)
        if obj is None:
            raise NotFoundError("No person with this email", email=normalize_email(email))
        return to_domain_person(obj)

    def list_people(self, *, include_removed: bool = False) -> List[Person]:
        with store_errors():
            rows = self.repo.list(include_removed=include_removed)
        return [to_domain_person(r) for r in rows]

    # ---------------- creation ----------------

    def create_person(
        self,
        first_name: str,
        last_name: str,
        *,
        plus_one_allowed: bool = False,
        is_admin: bool = False,
        admin_notes: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Person:
        """Seed an unregistered Person (admin seeding, bulk import, plus-ones)."""
        return to_domain_person(
            self.create_person_row(
                first_name,
                last_name,
                plus_one_allowed=plus_one_allowed,
                is_admin=is_admin,
                admin_notes=admin_notes,
                email=email,
            )
        )

    def create_person_row(
        self,
        first_name: str,
        last_name: str,
        *,
        plus_one_allowed: bool = False,
        is_admin: bool = False,
        admin_notes: Optional[str] = None,
        email: Optional[str] = None,
    ) -> DBPerson:
        first, last = clean_name(first_name), clean_name(last_name)
        if not first:
            raise ValidationFailed("First name is required", field="first_name")
        if not last:
            raise ValidationFailed("Last name is required", field="last_name")
        if len(first) > 100 or len(last) > 100:
            raise ValidationFailed("Names are limited to 100 characters", field="first_name" if len(first) > 100 else "last_name")

        email_n = normalize_email(email) or None
        if email_n is not None and not is_valid_email(email_n):
            raise ValidationFailed("Malformed email address", field="email", value=email)

        with transactional(self.db):
            if self.repo.find_active_by_name(first, last):
                raise ConflictError(
                    "A guest with this name is already on the list",
                    first_name=first,
                    last_name=last,
                )
            if email_n is not None and self.repo.find_active_by_email(email_n) is not None:
                raise ConflictError("This email address is already in use", field="email", email=email_n)

            obj = self.repo.create(
                first_name=first,
                last_name=last,
                plus_one_allowed=plus_one_allowed,
                is_admin=is_admin,
                email=email_n,
                admin_notes=admin_notes,
            )

        logger.info("Created person %s (%s)", obj.id, obj.display_name)
        return obj

    # ---------------- account lifecycle ----------------

    def register(self, person_id: UUID, email: str, secret: str) -> Person:
        """
        unregistered -> registered. Email must be free among other active
        people; a plus-one may claim the email captured when it was created.
        """
        email_n = normalize_email(email)
        if not is_valid_email(email_n):
            raise ValidationFailed("Malformed email address", field="email", value=email)
        if not secret:
            raise ValidationFailed("Password is required", field="secret")

        with transactional(self.db):
            locked = self.repo.lock_many([person_id])
            if not locked:
                raise NotFoundError("The person was not found", person_id=person_id)
            obj = locked[0]
            AccountStateMachine.ensure_transition(obj.account_status, AccountStatus.registered, person_id=obj.id)

            holder = self.repo.find_active_by_email(email_n)
            if holder is not None and holder.id != obj.id:
                raise ConflictError("This email address is already registered", field="email", email=email_n)

            self.repo.set_credential(obj, email=email_n, password_hash=self.hasher.hash(secret))

        logger.info("Registered person %s as %s", obj.id, email_n)
        return to_domain_person(obj)

    def authenticate(self, email: str, secret: str) -> Person:
        """Registered, active Person whose secret verifies; Forbidden otherwise."""
        with store_errors():
            obj = self.repo.find_active_by_email(email)
        if (
            obj is None
            or obj.account_status != AccountStatus.registered
            or not self.hasher.verify(secret, obj.password_hash or "")
        ):
            logger.warning("Failed login for %s", normalize_email(email))
            raise ForbiddenError("Invalid email or password", email=normalize_email(email))
        return to_domain_person(obj)

    def soft_delete(self, person_id: UUID) -> Person:
        """
        Administrative removal. The partner link and the Response are left in
        place; read paths treat a removed partner/owner as absent.
        """
        with transactional(self.db):
            locked = self.repo.lock_many([person_id])
            if not locked or locked[0].deleted_at is not None:
                raise NotFoundError("The person was not found", person_id=person_id)
            obj = locked[0]
            AccountStateMachine.ensure_transition(obj.account_status, AccountStatus.removed, person_id=obj.id)
            self.repo.mark_removed(obj)

        logger.info("Removed person %s (%s)", obj.id, obj.display_name)
        return to_domain_person(obj)


    def grant_admin(self, person_id: UUID) -> Person:
        """Promote an active person to administrator (bootstrap CLI)."""
        with transactional(self.db):
            locked = self.repo.lock_many([person_id])
            if not locked or locked[0].deleted_at is not None:
                raise NotFoundError("The person was not found", person_id=person_id)
            obj = locked[0]
            if not obj.is_admin:
                self.repo.set_admin(obj, True)

        logger.info("Granted admin to %s (%s)", obj.id, obj.display_name)
        return to_domain_person(obj)
