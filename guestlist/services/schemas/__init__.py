from guestlist.services.schemas.people import (
    PersonCreate,
    PersonRead,
    PersonAdminRead,
    PersonProfile,
    PartnerRead,
    PartnerLinkCreate,
    PartnerLinkRead,
)
from guestlist.services.schemas.rsvp import (
    ResponseIn,
    ResponseSubmit,
    ResponseRead,
    ResponseViewRead,
    PlusOneCreate,
    PlusOneRead,
    ResponseSummaryRead,
)
from guestlist.services.schemas.auth import (
    GuestLookup,
    GuestLookupRead,
    RegisterRequest,
    LoginRequest,
    TokenRead,
)
__all__ = [
    "PersonCreate",
    "PersonRead",
    "PersonAdminRead",
    "PersonProfile",
    "PartnerRead",
    "PartnerLinkCreate",
    "PartnerLinkRead",
    "ResponseIn",
    "ResponseSubmit",
    "ResponseRead",
    "ResponseViewRead",
    "PlusOneCreate",
    "PlusOneRead",
    "ResponseSummaryRead",
    "GuestLookup",
    "GuestLookupRead",
    "RegisterRequest",
    "LoginRequest",
    "TokenRead",
]
