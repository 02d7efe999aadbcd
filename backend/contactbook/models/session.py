"""
Pydantic models for the authenticated identity and its session (Supabase auth).
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthSession(BaseModel):
    model_config = ConfigDict(from_attributes=True, frozen=True)

    access_token: str
    refresh_token: str = ""
    token_type: str = "bearer"
    expires_in: int = 3600
    expires_at: Optional[int] = None
    user: AuthUser


def user_from_supabase(user: Any) -> AuthUser:
    """Build an AuthUser from a supabase User object (display name lives in user_metadata)."""
    metadata = getattr(user, "user_metadata", None) or {}
    return AuthUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        display_name=metadata.get("display_name"),
        created_at=getattr(user, "created_at", None),
    )


def session_from_supabase(session: Any) -> AuthSession:
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token or "",
        token_type=getattr(session, "token_type", None) or "bearer",
        expires_in=getattr(session, "expires_in", None) or 3600,
        expires_at=getattr(session, "expires_at", None),
        user=user_from_supabase(session.user),
    )
