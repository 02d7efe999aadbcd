"""
Auth API: sign-up with email OTP, sign in, sign out, current identity, route guard.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from contactbook.core.notifications import Notifier, get_notifier
from contactbook.core.security import get_auth_machine, get_current_user
from contactbook.models.session import AuthSession, AuthUser
from contactbook.schemas.auth import (
    AuthResponse,
    AuthStateResponse,
    MessageResponse,
    ResendOtpRequest,
    RouteDecisionResponse,
    SignInRequest,
    SignUpRequest,
    SignUpStepResponse,
    UserProfile,
    VerifyOtpRequest,
)
from contactbook.services.auth_service import (
    AuthStateMachine,
    Page,
    SignUpFlow,
    decide_route,
)
from contactbook.services.profile_service import ProfileService, get_profile_service

logger = logging.getLogger(__name__)
router = APIRouter()


async def _auth_response(
    session: AuthSession,
    profiles: ProfileService,
    message: Optional[str],
) -> AuthResponse:
    profile = await profiles.get()
    user = session.user
    return AuthResponse(
        access_token=session.access_token,
        token_type=session.token_type,
        expires_in=session.expires_in,
        expires_at=session.expires_at,
        refresh_token=session.refresh_token,
        message=message,
        user=UserProfile(
            id=user.id,
            email=user.email,
            display_name=(profile.display_name if profile else None) or user.display_name,
            avatar_url=profile.avatar_url if profile else None,
            created_at=user.created_at,
        ),
    )


@router.post(
    "/signup",
    response_model=SignUpStepResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def signup(
    request: SignUpRequest,
    machine: AuthStateMachine = Depends(get_auth_machine),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Start registration: emails a 6-digit verification code.

    - **email**: Valid email address
    - **password**: Minimum 6 characters, set once the code is verified
    - **display_name**: Optional display name
    """
    flow = SignUpFlow(machine)
    step = await flow.submit_credentials(
        email=request.email,
        password=request.password,
        display_name=request.display_name,
    )
    return SignUpStepResponse(
        step=step.name,
        email=step.email,
        message=notifier.last.description,
    )


@router.post("/verify-otp", response_model=AuthResponse)
async def verify_otp(
    request: VerifyOtpRequest,
    machine: AuthStateMachine = Depends(get_auth_machine),
    profiles: ProfileService = Depends(get_profile_service),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Complete registration with the emailed code; sets the password and signs in.
    """
    flow = SignUpFlow.awaiting(
        machine,
        email=request.email,
        password=request.password,
        display_name=request.display_name,
    )
    session = await flow.verify_otp(request.code)
    logger.info("Sign-up verified for user %s", session.user.id)
    message = notifier.last.description if notifier.last else None
    return await _auth_response(session, profiles, message)


@router.post("/resend-otp", response_model=MessageResponse)
async def resend_otp(
    request: ResendOtpRequest,
    machine: AuthStateMachine = Depends(get_auth_machine),
    notifier: Notifier = Depends(get_notifier),
):
    """Send a new verification code to the same email."""
    flow = SignUpFlow.awaiting(machine, email=request.email, password="", display_name=request.display_name)
    await flow.resend_otp()
    return MessageResponse(message=notifier.last.description, success=True)


@router.post("/signin", response_model=AuthResponse)
async def signin(
    request: SignInRequest,
    machine: AuthStateMachine = Depends(get_auth_machine),
    profiles: ProfileService = Depends(get_profile_service),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Sign in an existing user.

    - **email**: Registered email address
    - **password**: User's password
    """
    session = await machine.sign_in(email=request.email, password=request.password)
    logger.info("User signed in: %s", session.user.id)
    return await _auth_response(session, profiles, notifier.last.description)


@router.post("/signout", response_model=MessageResponse)
async def signout(
    current_user: AuthUser = Depends(get_current_user),
    machine: AuthStateMachine = Depends(get_auth_machine),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Sign out the current user.
    Requires authentication.
    """
    await machine.sign_out()
    logger.info("User signed out: %s", current_user.id)
    return MessageResponse(message=notifier.last.description, success=True)


@router.get("/me", response_model=UserProfile)
async def get_current_user_profile(
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service),
):
    """
    Get current user's identity and profile.
    Requires authentication.
    """
    profile = await profiles.get()
    return UserProfile(
        id=current_user.id,
        email=current_user.email,
        display_name=(profile.display_name if profile else None) or current_user.display_name,
        avatar_url=profile.avatar_url if profile else None,
        created_at=current_user.created_at,
    )


@router.get("/state", response_model=AuthStateResponse)
async def get_auth_state(machine: AuthStateMachine = Depends(get_auth_machine)):
    """Resolved auth state of the request (anonymous or authenticated)."""
    user = machine.user
    return AuthStateResponse(
        status=machine.state.status,
        user=UserProfile.model_validate(user) if user else None,
    )


@router.get("/route", response_model=RouteDecisionResponse)
async def get_route_decision(
    page: Page = Query(..., description="Page the client is about to render"),
    machine: AuthStateMachine = Depends(get_auth_machine),
):
    """Tell the client whether to render `page` or redirect."""
    return RouteDecisionResponse(page=page.value, decision=decide_route(machine.state, page))
