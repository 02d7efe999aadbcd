# Pydantic request/response schemas (API contract). Kept in sync with frontend types.

from contactbook.schemas.common import CountryResponse, ErrorDetail, MessageResponse, ThemePreference
from contactbook.schemas.contact import (
    Contact,
    ContactCreate,
    ContactListResponse,
    ContactUpdate,
    ContactValidationResponse,
    PhotoUploadResponse,
)
from contactbook.schemas.profile import ProfileResponse, ProfileUpdate

__all__ = [
    "MessageResponse",
    "ErrorDetail",
    "CountryResponse",
    "ThemePreference",
    "Contact",
    "ContactCreate",
    "ContactUpdate",
    "ContactListResponse",
    "ContactValidationResponse",
    "PhotoUploadResponse",
    "ProfileResponse",
    "ProfileUpdate",
]
