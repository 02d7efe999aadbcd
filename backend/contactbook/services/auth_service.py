"""
Authentication state machine: session tracking, sign-in/out, the email-OTP sign-up flow
and the route-guard decision derived from the current state.
"""

import logging
import re
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Callable, List, Optional, Union

from contactbook.core.errors import (
    AuthFlowError,
    BackendError,
    InvalidCredentials,
    OtpVerificationFailed,
    SubmissionPending,
    Unauthenticated,
)
from contactbook.core.notifications import Notifier
from contactbook.models.session import AuthSession, AuthUser
from contactbook.services.ports import AuthGateway, Unsubscribe

logger = logging.getLogger(__name__)

INVALID_LOGIN_MARKER = "Invalid login credentials"
OTP_RE = re.compile(r"^\d{6}$")


class AuthStatus(str, Enum):
    UNKNOWN = "unknown"
    ANONYMOUS = "anonymous"
    AUTHENTICATED = "authenticated"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus
    user: Optional[AuthUser] = None
    session: Optional[AuthSession] = None

    @property
    def is_authenticated(self) -> bool:
        return self.status is AuthStatus.AUTHENTICATED

    @property
    def loading(self) -> bool:
        return self.status is AuthStatus.UNKNOWN


StateListener = Callable[[AuthState], None]


class AuthStateMachine:
    """
    Tracks who is signed in. The backend pushes session changes (sign in, refresh,
    sign out) through `on_session_change`; every path ends in `_apply_session`.

    Use as an async context manager: entering subscribes and resolves the current
    session, leaving removes the subscription.
    """

    def __init__(self, gateway: AuthGateway, notifier: Notifier) -> None:
        self.gateway = gateway
        self.notifier = notifier
        self._state = AuthState(AuthStatus.UNKNOWN)
        self._unsubscribe: Optional[Unsubscribe] = None
        self._listeners: List[StateListener] = []
        self._pending: Optional[str] = None

    async def __aenter__(self) -> "AuthStateMachine":
        await self.initialize()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def user(self) -> Optional[AuthUser]:
        return self._state.user

    @property
    def session(self) -> Optional[AuthSession]:
        return self._state.session

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def is_submitting(self) -> bool:
        return self._pending is not None

    def require_user(self) -> AuthUser:
        if self._state.user is None:
            raise Unauthenticated()
        return self._state.user

    async def initialize(self) -> None:
        # Subscribe before fetching so a change landing in between is not lost.
        if self._unsubscribe is None:
            self._unsubscribe = self.gateway.on_session_change(self._on_session_change)
        try:
            session = await self.gateway.get_session()
        except BackendError as e:
            logger.warning("Could not resolve current session: %s", e.message)
            session = None
        self._apply_session(session)

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _on_session_change(self, event: str, session: Optional[AuthSession]) -> None:
        logger.debug("Auth event %s", event)
        self._apply_session(session)

    def _apply_session(self, session: Optional[AuthSession]) -> None:
        if session is None:
            new_state = AuthState(AuthStatus.ANONYMOUS)
        else:
            new_state = AuthState(AuthStatus.AUTHENTICATED, user=session.user, session=session)
        if new_state == self._state:
            return
        self._state = new_state
        for listener in list(self._listeners):
            listener(new_state)

    @asynccontextmanager
    async def _submitting(self, operation: str) -> AsyncIterator[None]:
        if self._pending is not None:
            raise SubmissionPending(operation)
        self._pending = operation
        try:
            yield
        finally:
            self._pending = None

    async def resume(self, access_token: str, refresh_token: str = "") -> AuthSession:
        """Adopt a session issued earlier (bearer token of an API request)."""
        try:
            session = await self.gateway.set_session(access_token, refresh_token)
        except BackendError as e:
            logger.info("Rejected session token: %s", e.message)
            self._apply_session(None)
            raise Unauthenticated("Invalid or expired token")
        self._apply_session(session)
        return session

    async def sign_up(self, email: str, password: str, display_name: Optional[str] = None) -> Optional[AuthSession]:
        """Password sign-up without email verification."""
        async with self._submitting("sign_up"):
            try:
                session = await self.gateway.sign_up(email, password, display_name)
            except BackendError as e:
                self.notifier.error("Sign Up Failed", e.message)
                raise AuthFlowError(e.message)
            if session is not None:
                self._apply_session(session)
            self.notifier.notify("Account created!", "You can now sign in with your credentials.")
            return session

    async def sign_in(self, email: str, password: str) -> AuthSession:
        async with self._submitting("sign_in"):
            try:
                session = await self.gateway.sign_in_with_password(email, password)
            except BackendError as e:
                if INVALID_LOGIN_MARKER in e.message:
                    message = "Invalid email or password. Please try again."
                    self.notifier.error("Sign In Failed", message)
                    raise InvalidCredentials(message)
                self.notifier.error("Sign In Failed", e.message)
                raise AuthFlowError(e.message)
            self._apply_session(session)
            self.notifier.notify("Welcome back!", "You have successfully signed in.")
            return session

    async def sign_out(self) -> None:
        async with self._submitting("sign_out"):
            try:
                await self.gateway.sign_out()
            except BackendError as e:
                logger.error("Sign out failed: %s", e.message)
                self.notifier.error("Error", "Failed to sign out. Please try again.")
                raise AuthFlowError("Failed to sign out. Please try again.")
            self._apply_session(None)
            self.notifier.notify("Signed out", "You have been signed out successfully.")


# -----------------------------------------------------------------------------
# Sign-up with email verification
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class CredentialsStep:
    name: str = field(default="credentials", init=False)


@dataclass(frozen=True)
class AwaitingOtpStep:
    email: str
    password: str = field(repr=False)
    display_name: Optional[str] = None
    name: str = field(default="awaiting_otp", init=False)


SignUpStep = Union[CredentialsStep, AwaitingOtpStep]


class SignUpFlow:
    """
    Credentials -> AwaitingOtp -> (verified) signed in.

    The password is only held by AwaitingOtpStep and is applied to the account
    once the emailed code has been verified.
    """

    def __init__(self, machine: AuthStateMachine) -> None:
        self.machine = machine
        self.step: SignUpStep = CredentialsStep()

    @classmethod
    def awaiting(
        cls,
        machine: AuthStateMachine,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> "SignUpFlow":
        """Continue a flow whose code was dispatched earlier (e.g. by a previous request)."""
        flow = cls(machine)
        flow.step = AwaitingOtpStep(email=email, password=password, display_name=display_name)
        return flow

    def _awaiting(self) -> AwaitingOtpStep:
        if not isinstance(self.step, AwaitingOtpStep):
            raise AuthFlowError("Enter your details first to receive a verification code.")
        return self.step

    async def _dispatch(self, email: str, display_name: Optional[str]) -> None:
        try:
            await self.machine.gateway.sign_in_with_otp(email, display_name, create_user=True)
        except BackendError as e:
            self.machine.notifier.error("Error", e.message)
            raise AuthFlowError(e.message)

    async def submit_credentials(self, email: str, password: str, display_name: Optional[str] = None) -> AwaitingOtpStep:
        async with self.machine._submitting("sign_up"):
            await self._dispatch(email, display_name)
            self.step = AwaitingOtpStep(email=email, password=password, display_name=display_name)
            self.machine.notifier.notify("OTP Sent!", "Please check your email for the verification code.")
            return self.step

    async def resend_otp(self) -> None:
        step = self._awaiting()
        async with self.machine._submitting("resend_otp"):
            await self._dispatch(step.email, step.display_name)
            self.machine.notifier.notify("OTP Resent!", "Please check your email for the new verification code.")

    async def verify_otp(self, code: str) -> AuthSession:
        step = self._awaiting()
        notifier = self.machine.notifier
        code = (code or "").strip()
        if not OTP_RE.match(code):
            notifier.error("Verification Failed", "Please enter the 6-digit code from your email.")
            raise OtpVerificationFailed("Please enter the 6-digit code from your email.")

        async with self.machine._submitting("verify_otp"):
            try:
                session = await self.machine.gateway.verify_otp(step.email, code)
            except BackendError as e:
                notifier.error("Verification Failed", e.message)
                raise OtpVerificationFailed(e.message)
            self.machine._apply_session(session)

            try:
                await self.machine.gateway.update_user(step.password)
            except BackendError as e:
                logger.error("Password update after OTP verification failed: %s", e.message)
                notifier.error(
                    "Error",
                    "Account created but failed to set password. Please reset your password.",
                )
            else:
                notifier.notify("Account Created!", "Your email has been verified and account is ready.")
            self.step = CredentialsStep()
            return self.machine.session or session

    def back_to_credentials(self) -> None:
        self.step = CredentialsStep()


# -----------------------------------------------------------------------------
# Route guarding
# -----------------------------------------------------------------------------


class Page(str, Enum):
    AUTH = "auth"
    HOME = "home"
    PROFILE = "profile"
    SETTINGS = "settings"
    PRIVACY = "privacy"


PROTECTED_PAGES = frozenset({Page.HOME, Page.PROFILE, Page.SETTINGS})


class RouteDecision(str, Enum):
    DEFER = "defer"
    ALLOW = "allow"
    REDIRECT_TO_AUTH = "redirect_to_auth"
    REDIRECT_HOME = "redirect_home"


def decide_route(state: AuthState, page: Page) -> RouteDecision:
    if state.loading:
        return RouteDecision.DEFER
    if page in PROTECTED_PAGES and not state.is_authenticated:
        return RouteDecision.REDIRECT_TO_AUTH
    if page is Page.AUTH and state.is_authenticated:
        return RouteDecision.REDIRECT_HOME
    return RouteDecision.ALLOW
