# Domain models: Supabase rows (contacts, profiles) and the auth session

from contactbook.models.session import (
    AuthSession,
    AuthUser,
)
from contactbook.models.contact import (
    Contact,
    ContactBase,
    ContactInDB,
)
from contactbook.models.profile import (
    Profile,
    ProfileBase,
    ProfileInDB,
)

__all__ = [
    "AuthSession",
    "AuthUser",
    "Contact",
    "ContactBase",
    "ContactInDB",
    "Profile",
    "ProfileBase",
    "ProfileInDB",
]
