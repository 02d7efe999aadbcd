"""
Pydantic models for public.profiles (Supabase).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ProfileBase(BaseModel):
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class ProfileInDB(ProfileBase):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Profile(ProfileInDB):
    pass
