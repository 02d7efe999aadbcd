"""
Pydantic models for public.contacts (Supabase).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_DIAL_CODE = "+91"


class ContactBase(BaseModel):
    name: str
    email: str
    phone: str
    country_code: Optional[str] = DEFAULT_DIAL_CODE
    message: Optional[str] = None
    company: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    photo_url: Optional[str] = None


class ContactInDB(ContactBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    created_at: datetime


class Contact(ContactInDB):
    pass
