from __future__ import annotations
from typing import Optional, List, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from guestlist.common.naming.people import clean_name, name_key, normalize_email
from guestlist.database.core.service_object import utcnow
from guestlist.database.models.person import Person as DBPerson
from guestlist.domain.enums import AccountStatus


def normalized_name(first: str, last: str) -> str:
    f, l = name_key(first, last)
    return f"{f}|{l}"


class SqlAlchemyPeopleRepo:
    """
    Row-level access to `people`. No business rules live here; the identity
    store and relationship manager decide what is allowed.
    """

    def __init__(self, session: Session) -> None:
        self.db = session

    # -------- Reads --------

    def get(self, person_id: UUID) -> Optional[DBPerson]:
        return self.db.get(DBPerson, person_id)

    def get_active(self, person_id: UUID) -> Optional[DBPerson]:
        obj = self.get(person_id)
        if obj is None or obj.deleted_at is not None:
            return None
        return obj

    def lock_many(self, person_ids: Sequence[UUID]) -> List[DBPerson]:
        """
        SELECT ... FOR UPDATE on the given rows, always in id order so two
        writers touching the same pair cannot deadlock. Returns rows in the
        order of `person_ids`; missing ids are skipped.
        """
        ids = sorted(set(person_ids), key=str)
        stmt = (
            select(DBPerson)
            .where(DBPerson.id.in_(ids))
            .order_by(DBPerson.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        rows = {r.id: r for r in self.db.execute(stmt).scalars().all()}
        return [rows[i] for i in person_ids if i in rows]

    def find_active_by_name(self, first: str, last: str, limit: int = 10) -> List[DBPerson]:
        stmt = (
            select(DBPerson)
            .where(DBPerson.normalized_name == normalized_name(first, last))
            .where(DBPerson.deleted_at.is_(None))
            .order_by(DBPerson.created_at.asc())
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all())

    def find_active_by_email(self, email: str) -> Optional[DBPerson]:
        stmt = (
            select(DBPerson)
            .where(DBPerson.email == normalize_email(email))
            .where(DBPerson.deleted_at.is_(None))
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def list(self, *, include_removed: bool = False) -> List[DBPerson]:
        stmt = select(DBPerson)
        if not include_removed:
            stmt = stmt.where(DBPerson.deleted_at.is_(None))
        stmt = stmt.order_by(DBPerson.last_name.asc(), DBPerson.first_name.asc())
        return list(self.db.execute(stmt).scalars().all())

    # -------- Writes --------

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        plus_one_allowed: bool = False,
        is_admin: bool = False,
        email: Optional[str] = None,
        admin_notes: Optional[str] = None,
    ) -> DBPerson:
        first, last = clean_name(first_name), clean_name(last_name)
        obj = DBPerson(
            first_name=first,
            last_name=last,
            normalized_name=normalized_name(first, last),
            plus_one_allowed=plus_one_allowed,
            is_admin=is_admin,
            email=normalize_email(email) or None,
            admin_notes=admin_notes,
            account_status=AccountStatus.unregistered,
        )
        self.db.add(obj)
        self.db.flush()  # ensure id + surface unique violations inside the caller's unit
        return obj

    def set_credential(self, obj: DBPerson, *, email: str, password_hash: str) -> DBPerson:
        obj.email = normalize_email(email)
        obj.password_hash = password_hash
        obj.account_status = AccountStatus.registered
        self.db.flush()
        return obj

    def set_partner(self, obj: DBPerson, partner_id: Optional[UUID]) -> DBPerson:
        obj.partner_id = partner_id
        self.db.flush()
        return obj

    def mark_removed(self, obj: DBPerson) -> DBPerson:
        obj.deleted_at = utcnow()
        obj.account_status = AccountStatus.removed
        self.db.flush()
        return obj

    def set_admin(self, obj: DBPerson, is_admin: bool) -> DBPerson:
        obj.is_admin = is_admin
        self.db.flush()
        return obj
