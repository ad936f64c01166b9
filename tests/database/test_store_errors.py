# tests/database/test_store_errors.py
from __future__ import annotations

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError, TimeoutError as PoolTimeoutError

from guestlist.database.core.transaction import store_errors, transactional
from guestlist.database.models import Person as DBPerson
from guestlist.database.repos.people_repo import SqlAlchemyPeopleRepo
from guestlist.domain.errors import ConflictError, UnavailableError


class _DriverError(Exception):
    def __init__(self, message: str, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def _operational(message: str, sqlstate: str | None = None) -> OperationalError:
    return OperationalError("UPDATE people SET partner_id = ?", {}, _DriverError(message, sqlstate))


def test_integrity_error_is_conflict():
    with pytest.raises(ConflictError) as ei:
        with store_errors():
            raise IntegrityError("INSERT INTO people", {}, _DriverError("UNIQUE constraint failed: people.email"))
    assert ei.value.context["constraint"] == "UNIQUE constraint failed: people.email"


@pytest.mark.parametrize("sqlstate", ["40001", "40P01"])
def test_serialization_failures_are_conflicts(sqlstate):
    with pytest.raises(ConflictError) as ei:
        with store_errors():
            raise _operational("could not serialize access", sqlstate)
    assert ei.value.context["sqlstate"] == sqlstate
    assert not ei.value.retryable


def test_lost_connection_is_unavailable():
    with pytest.raises(UnavailableError) as ei:
        with store_errors():
            raise _operational("server closed the connection unexpectedly", "08006")
    assert ei.value.retryable
    assert isinstance(ei.value.__cause__, OperationalError)

    with pytest.raises(UnavailableError):
        with store_errors():
            raise _operational("database is locked")


def test_pool_timeout_is_unavailable():
    with pytest.raises(UnavailableError) as ei:
        with store_errors():
            raise PoolTimeoutError("QueuePool limit of size 5 overflow 10 reached")
    assert ei.value.retryable


def test_other_errors_pass_through():
    with pytest.raises(KeyError):
        with store_errors():
            raise KeyError("x")


def test_unavailable_store_rolls_back_the_unit(db):
    repo = SqlAlchemyPeopleRepo(db)
    with pytest.raises(UnavailableError):
        with transactional(db):
            repo.create(first_name="Ann", last_name="Lee")
            raise _operational("server closed the connection unexpectedly")
    assert db.execute(select(func.count()).select_from(DBPerson)).scalar_one() == 0
