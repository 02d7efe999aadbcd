"""
Contact schema (API contract). Kept in sync with frontend types/Contact.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from contactbook.services.contact_rules import SortOption


class ContactBase(BaseModel):
    name: str
    email: str
    phone: str
    country_code: str | None = "+91"
    message: str | None = None
    company: str | None = None
    address: str | None = None
    notes: str | None = None
    photo_url: str | None = None


class Contact(ContactBase):
    """Response schema; the owner's user_id is never returned."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class ContactCreate(BaseModel):
    """
    Request body for creating a contact. Field rules (name, email, phone, message length)
    are checked by the validation engine so all field errors come back together.
    """
    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "phone": "98765 43210",
                    "country_code": "+91",
                    "company": "Acme Inc",
                }
            ]
        }
    )

    name: str = ""
    email: str = ""
    phone: str = ""
    country_code: str = "+91"
    message: str = ""
    company: str = ""
    address: str = ""
    notes: str = ""
    photo_url: str = ""


class ContactUpdate(BaseModel):
    """Request body for partial update; only fields sent by the client are applied."""
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    country_code: str | None = None
    message: str | None = None
    company: str | None = None
    address: str | None = None
    notes: str | None = None
    photo_url: str | None = None


class ContactListResponse(BaseModel):
    """Filtered and sorted contacts plus the state of the sort toggle."""
    contacts: list[Contact]
    total: int = Field(..., description="Contacts owned by the user before filtering")
    search: str = ""
    sort: SortOption
    sort_label: str
    next_sort: SortOption


class ContactValidationResponse(BaseModel):
    errors: dict[str, str]
    submittable: bool


class PhotoUploadResponse(BaseModel):
    url: str
