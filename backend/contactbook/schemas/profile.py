"""
Profile schemas (API contract).
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class ProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    display_name: str | None = None
    avatar_url: str | None = None
    updated_at: datetime | None = None


class ProfileUpdate(BaseModel):
    """Partial update; send avatar_url null to clear it."""
    display_name: str | None = None
    avatar_url: str | None = None
