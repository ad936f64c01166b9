# guestlist/database/core/transaction.py
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session, SessionTransactionOrigin

from guestlist.common.logging import get_logger
from guestlist.domain.errors import ConflictError, UnavailableError

logger = get_logger(__name__)

# Postgres SQLSTATEs: concurrent writers lost the race -> Conflict
_CONFLICT_STATES = {"40001", "40P01"}


def _sqlstate(exc: Exception) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def _constraint(exc: Exception) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    diag = getattr(orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name
    return str(orig).splitlines()[0] if orig is not None else None


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate driver-level failures into the core error kinds."""
    try:
        yield
    except IntegrityError as exc:
        logger.warning("Store rejected write: %s", _constraint(exc))
        raise ConflictError("Conflicting write rejected by the store", constraint=_constraint(exc)) from exc
    except OperationalError as exc:
        state = _sqlstate(exc)
        if state in _CONFLICT_STATES:
            logger.warning("Concurrent update lost (sqlstate=%s)", state)
            raise ConflictError("Concurrent update, retry the request", sqlstate=state) from exc
        logger.warning("Store unavailable (sqlstate=%s): %s", state, exc.orig)
        raise UnavailableError("Storage is unavailable, retry later", sqlstate=state) from exc
    except PoolTimeoutError as exc:
        logger.warning("Connection pool exhausted: %s", exc)
        raise UnavailableError("Storage is busy, retry later") from exc


@contextmanager
def transactional(db: Session) -> Iterator[Session]:
    """
    One atomic unit of work. Opens a transaction, or a SAVEPOINT when the
    caller began one explicitly (request-scoped sessions), so a failure here
    never leaves partial rows behind for later reads.

    A transaction the session autobegan for earlier reads belongs to nobody:
    it is committed first so this unit lands on its own.
    """
    with store_errors():
        if _caller_owns_transaction(db):
            with db.begin_nested():
                yield db
            return
        if db.in_transaction():
            db.commit()
        with db.begin():
            yield db


def _caller_owns_transaction(db: Session) -> bool:
    tx = db.get_transaction()
    return tx is not None and tx.origin is not SessionTransactionOrigin.AUTOBEGIN
