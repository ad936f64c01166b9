# guestlist/database/models/__init__.py

from guestlist.database.models.person import (
    Base,
    Person,
)
from guestlist.database.models.response import (
    Response,
)

__all__ = [
    "Base",
    "Person",
    "Response",
]
