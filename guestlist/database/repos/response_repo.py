from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from guestlist.database.core.service_object import utcnow
from guestlist.database.models.person import Person as DBPerson
from guestlist.database.models.response import Response as DBResponse
from guestlist.domain.dataclasses.rsvp import ResponsePayload


class SqlAlchemyResponseRepo:
    def __init__(self, session: Session) -> None:
        self.db = session

    def get_by_owner(self, owner_id: UUID) -> Optional[DBResponse]:
        stmt = select(DBResponse).where(DBResponse.owner_id == owner_id).limit(1)
        return self.db.execute(stmt).scalars().first()

    def batch_by_owner(self, owner_ids: Iterable[UUID]) -> Dict[UUID, DBResponse]:
        ids = list(owner_ids)
        if not ids:
            return {}
        stmt = select(DBResponse).where(DBResponse.owner_id.in_(ids))
        return {r.owner_id: r for r in self.db.execute(stmt).scalars().all()}

    def upsert(self, *, owner_id: UUID, submitted_by_id: UUID, payload: ResponsePayload) -> Tuple[DBResponse, bool]:
        """
        One row per owner: update in place when present, insert otherwise.
        A concurrent first insert for the same owner trips uq_responses_owner_id
        at flush time; the caller's unit of work turns that into a Conflict.

        Returns (row, created).
        """
        now = utcnow()
        row = self.get_by_owner(owner_id)
        if row is None:
            row = DBResponse(
                owner_id=owner_id,
                submitted_by_id=submitted_by_id,
                status=payload.status,
                dietary_notes=payload.dietary_notes,
                message=payload.message,
                responded_at=now,
            )
            self.db.add(row)
            self.db.flush()
            return row, True

        if row.status != payload.status:
            row.responded_at = now
        row.status = payload.status
        row.dietary_notes = payload.dietary_notes
        row.message = payload.message
        row.submitted_by_id = submitted_by_id
        row.updated_at = now
        self.db.flush()
        return row, False

    def rows_for_summary(self) -> List[Tuple[DBPerson, Optional[DBResponse]]]:
        """Every active person with their response (if any)."""
        stmt = (
            select(DBPerson, DBResponse)
            .outerjoin(DBResponse, DBResponse.owner_id == DBPerson.id)
            .where(DBPerson.deleted_at.is_(None))
            .order_by(DBPerson.last_name.asc(), DBPerson.first_name.asc())
        )
        return [(p, r) for p, r in self.db.execute(stmt).all()]
