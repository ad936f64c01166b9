from guestlist.domain.enums.account_status import AccountStatus
from guestlist.domain.enums.response_status import ResponseStatus
from guestlist.domain.enums.error_kind import ErrorKind
__all__ = [
    "AccountStatus",
    "ResponseStatus",
    "ErrorKind",
]
