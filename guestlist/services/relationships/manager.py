from __future__ import annotations

from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from guestlist.common.logging import get_logger
from guestlist.database.core.transaction import store_errors, transactional
from guestlist.database.models.person import Person as DBPerson
from guestlist.database.repos._mapping import to_domain_person
from guestlist.database.repos.people_repo import SqlAlchemyPeopleRepo
from guestlist.domain.entities.person import Person
from guestlist.domain.errors import ConflictError, NotFoundError, ValidationFailed
from guestlist.domain.policies.account_lifecycle import AccountStateMachine

logger = get_logger(__name__)


class RelationshipManager:
    """
    Sole writer of `partner_id`. The edge is undirected: both pointers are
    written (or cleared) in one unit of work with both rows locked, so a
    reader never sees A -> B without B -> A.

    A pointer whose target is removed, or that is not mirrored, is dangling:
    reads treat it as "no partner" and the next link/unlink clears it.
    """

    def __init__(self, db: Session, *, repo: Optional[SqlAlchemyPeopleRepo] = None) -> None:
        self.db = db
        self.repo = repo or SqlAlchemyPeopleRepo(db)

    # ---------------- reads ----------------

    def partner_row(self, row: DBPerson) -> Optional[DBPerson]:
        """The active, mirrored partner of `row`, or None."""
        if row.partner_id is None:
            return None
        with store_errors():
            other = self.repo.get(row.partner_id)
        if other is None or other.deleted_at is not None or other.partner_id != row.id:
            return None
        return other

    def partner_of(self, person_id: UUID) -> Optional[Person]:
        with store_errors():
            row = self.repo.get_active(person_id)
        if row is None:
            raise NotFoundError("The person was not found", person_id=person_id)
        other = self.partner_row(row)
        return to_domain_person(other) if other is not None else None

    # ---------------- writes ----------------

    def link(self, person_a_id: UUID, person_b_id: UUID) -> Tuple[Person, Person]:
        if person_a_id == person_b_id:
            raise ValidationFailed("A person cannot be their own partner", field="partner_id", person_id=person_a_id)

        with transactional(self.db):
            rows = self._lock_with_partners([person_a_id, person_b_id])
            for pid in (person_a_id, person_b_id):
                row = rows.get(pid)
                if row is None:
                    raise NotFoundError("The person was not found", person_id=pid)
                AccountStateMachine.ensure_active(row.account_status, person_id=pid, role="partner")
            a, b = rows[person_a_id], rows[person_b_id]

            if a.partner_id == b.id and b.partner_id == a.id:
                return to_domain_person(a), to_domain_person(b)

            for row, other in ((a, b), (b, a)):
                if row.partner_id is None or row.partner_id == other.id:
                    continue
                if self._clear_if_dangling(row, rows.get(row.partner_id)):
                    continue
                logger.warning("Refusing link %s <-> %s: %s already partnered", a.id, b.id, row.id)
                raise ConflictError(
                    "Already linked to another partner",
                    person_id=row.id,
                    partner_id=row.partner_id,
                )

            self.repo.set_partner(a, b.id)
            self.repo.set_partner(b, a.id)
            self.db.flush()

        logger.info("Linked partners %s (%s) <-> %s (%s)", a.id, a.display_name, b.id, b.display_name)
        return to_domain_person(a), to_domain_person(b)

    def unlink(self, person_id: UUID) -> Person:
        with transactional(self.db):
            rows = self._lock_with_partners([person_id])
            row = rows.get(person_id)
            if row is None or row.deleted_at is not None:
                raise NotFoundError("The person was not found", person_id=person_id)
            if row.partner_id is None:
                return to_domain_person(row)

            former = row.partner_id
            other = rows.get(former)
            if other is not None and other.partner_id == row.id:
                self.repo.set_partner(other, None)
            self.repo.set_partner(row, None)
            self.db.flush()

        logger.info("Unlinked %s from %s", person_id, former)
        return to_domain_person(row)

    # ---------------- helpers ----------------

    def _lock_with_partners(self, person_ids: List[UUID]) -> Dict[UUID, DBPerson]:
        """
        Lock the given people and whoever they currently point at in a single
        id-ordered FOR UPDATE. If a pointer moved between the peek and the
        lock, the caller lost a race and gets a Conflict.
        """
        wanted = set(person_ids)
        for pid in person_ids:
            peek = self.repo.get(pid)
            if peek is not None and peek.partner_id is not None:
                wanted.add(peek.partner_id)

        rows = {r.id: r for r in self.repo.lock_many(sorted(wanted, key=str))}
        for pid in person_ids:
            row = rows.get(pid)
            if row is not None and row.partner_id is not None and row.partner_id not in wanted:
                logger.warning("Partner of %s changed while locking", pid)
                raise ConflictError("Partner changed concurrently, retry", person_id=pid)
        return rows

    def _clear_if_dangling(self, row: DBPerson, other: Optional[DBPerson]) -> bool:
        """Drop a pointer to a removed or non-mirroring partner. True if cleared."""
        if other is not None and other.deleted_at is None and other.partner_id == row.id:
            return False
        if other is not None and other.partner_id == row.id:
            self.repo.set_partner(other, None)
        logger.info("Clearing dangling partner pointer %s -> %s", row.id, row.partner_id)
        self.repo.set_partner(row, None)
        return True
