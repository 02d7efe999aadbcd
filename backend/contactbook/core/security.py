"""
Security utilities: bearer token handling and dependency injection for auth.
"""

import logging
import time
from typing import AsyncIterator, Optional

from fastapi import Depends, Header
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from contactbook.core.config import get_settings
from contactbook.core.errors import Unauthenticated
from contactbook.core.notifications import Notifier, get_notifier
from contactbook.models.session import AuthUser
from contactbook.services.auth_service import (
    AuthStateMachine,
    Page,
    RouteDecision,
    decide_route,
)
from contactbook.services.memory_backend import InMemoryBackend, InMemoryStore
from contactbook.services.ports import Backend
from contactbook.services.supabase_service import SupabaseService

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_memory_store: Optional[InMemoryStore] = None


def get_memory_store() -> InMemoryStore:
    """Singleton store so in-memory users and rows persist across requests."""
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryStore(profiles_table=get_settings().profiles_table)
    return _memory_store


def get_backend() -> Backend:
    """Dependency: a fresh client per request (sessions are per client)."""
    if get_settings().in_memory:
        return InMemoryBackend(get_memory_store())
    return SupabaseService()


def token_expired(token: str, leeway: int = 10) -> bool:
    """Read `exp` from the unverified claims. Malformed tokens count as expired."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    return not isinstance(exp, (int, float)) or exp <= time.time() + leeway


async def get_auth_machine(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    refresh_token: Optional[str] = Header(default=None, alias="X-Refresh-Token"),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
) -> AsyncIterator[AuthStateMachine]:
    """Dependency: auth state of this request, resumed from the bearer token when present."""
    async with AuthStateMachine(backend.auth, notifier) as machine:
        if credentials and not machine.is_authenticated:
            token = credentials.credentials
            if token_expired(token) and not refresh_token:
                logger.info("Expired bearer token without refresh token")
            else:
                try:
                    await machine.resume(token, refresh_token or "")
                except Unauthenticated:
                    logger.info("Continuing request without a session")
        yield machine


async def get_current_user(
    machine: AuthStateMachine = Depends(get_auth_machine),
) -> AuthUser:
    """Dependency: require auth. Raises 401 when the home page would redirect to sign-in."""
    if decide_route(machine.state, Page.HOME) is not RouteDecision.ALLOW:
        raise Unauthenticated()
    return machine.require_user()
