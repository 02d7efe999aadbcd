"""
Auth-related Pydantic schemas (sign up with OTP, sign in, identity, tokens).
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from contactbook.services.auth_service import AuthStatus, RouteDecision


class SignUpRequest(BaseModel):
    """Request body for registration; a verification code is emailed."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "email": "priya@example.com",
                    "password": "myContacts#1",
                    "display_name": "Priya Sharma",
                }
            ]
        }
    )

    email: EmailStr
    password: str = Field(..., min_length=6, description="At least 6 characters")
    display_name: Optional[str] = None


class VerifyOtpRequest(BaseModel):
    """Request body to complete sign-up with the emailed code."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "email": "priya@example.com",
                    "code": "123456",
                    "password": "myContacts#1",
                    "display_name": "Priya Sharma",
                }
            ]
        }
    )

    email: EmailStr
    code: str = Field(..., description="6-digit code from the verification email")
    password: str = Field(..., min_length=6)
    display_name: Optional[str] = None


class ResendOtpRequest(BaseModel):
    email: EmailStr
    display_name: Optional[str] = None


class SignInRequest(BaseModel):
    """Request body for sign in."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "email": "priya@example.com",
                    "password": "myContacts#1",
                }
            ]
        }
    )

    email: EmailStr
    password: str


class UserProfile(BaseModel):
    """Signed-in identity returned in auth responses."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    created_at: Optional[datetime] = None


class AuthResponse(BaseModel):
    """Response after successful sign in or verification."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                    "token_type": "bearer",
                    "expires_in": 3600,
                    "expires_at": 1736932200,
                    "refresh_token": "b7Jx2kQ9...",
                    "message": "You have successfully signed in.",
                    "user": {
                        "id": "550e8400-e29b-41d4-a716-446655440000",
                        "email": "priya@example.com",
                        "display_name": "Priya Sharma",
                        "avatar_url": None,
                        "created_at": "2025-01-15T10:30:00Z",
                    },
                }
            ]
        }
    )

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    expires_at: Optional[int] = None
    refresh_token: str
    message: Optional[str] = None
    user: UserProfile


class SignUpStepResponse(BaseModel):
    """Where the sign-up flow stands after a request."""

    step: str
    email: str
    message: str


class AuthStateResponse(BaseModel):
    status: AuthStatus
    user: Optional[UserProfile] = None


class RouteDecisionResponse(BaseModel):
    page: str
    decision: RouteDecision


class MessageResponse(BaseModel):
    """Generic success/status message."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"message": "You have been signed out successfully.", "success": True},
            ]
        }
    )

    message: str
    success: bool = True
