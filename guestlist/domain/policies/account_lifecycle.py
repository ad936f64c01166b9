# guestlist/domain/policies/account_lifecycle.py
from __future__ import annotations

from typing import Dict, FrozenSet, Optional
from uuid import UUID

from guestlist.domain.enums.account_status import AccountStatus
from guestlist.domain.errors import ConflictError, ForbiddenError

_TRANSITIONS: Dict[AccountStatus, FrozenSet[AccountStatus]] = {
    AccountStatus.unregistered: frozenset({AccountStatus.registered, AccountStatus.removed}),
    AccountStatus.registered: frozenset({AccountStatus.removed}),
    AccountStatus.removed: frozenset(),
}


class AccountStateMachine:
    """
    Lifecycle of a Person's login capability:

        unregistered --register--> registered --soft delete--> removed
              \\________________soft delete_________________/

    `removed` is terminal and nothing ever re-enters `unregistered`.
    Violations raise the core error kinds so callers can surface them as-is:
      - leaving `removed`           -> ForbiddenError
      - registering twice           -> ConflictError
      - any other illegal edge      -> ConflictError
    """

    @staticmethod
    def can_transition(src: AccountStatus, dst: AccountStatus) -> bool:
        return AccountStatus(dst) in _TRANSITIONS[AccountStatus(src)]

    @classmethod
    def ensure_transition(
        cls,
        src: AccountStatus,
        dst: AccountStatus,
        *,
        person_id: Optional[UUID] = None,
    ) -> AccountStatus:
        src, dst = AccountStatus(src), AccountStatus(dst)
        if cls.can_transition(src, dst):
            return dst
        if src == AccountStatus.removed:
            raise ForbiddenError("Person has been removed", person_id=person_id, status=src.value)
        if src == dst == AccountStatus.registered:
            raise ConflictError("An account already exists for this person", person_id=person_id)
        raise ConflictError(
            f"Illegal account transition {src.value} -> {dst.value}",
            person_id=person_id,
            status=src.value,
        )

    @staticmethod
    def ensure_active(status: AccountStatus, *, person_id: Optional[UUID] = None, role: str = "person") -> None:
        """Removed identities may not own, submit, link or invite."""
        if AccountStatus(status) == AccountStatus.removed:
            raise ForbiddenError(f"The {role} has been removed", person_id=person_id, role=role)
