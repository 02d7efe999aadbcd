"""
Backend ports (interfaces). Implemented by the Supabase adapters and the in-memory backend.
All methods raise BackendError with the backend's message on failure.
"""

from typing import Any, Callable, Dict, List, Optional, Protocol

from contactbook.models.session import AuthSession, AuthUser

Row = Dict[str, Any]
SessionCallback = Callable[[str, Optional[AuthSession]], None]
Unsubscribe = Callable[[], None]


class AuthGateway(Protocol):
    """Supabase auth as used by the app."""

    async def sign_up(self, email: str, password: str, display_name: Optional[str]) -> Optional[AuthSession]:
        ...

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    async def sign_in_with_otp(self, email: str, display_name: Optional[str], create_user: bool = True) -> None:
        """Email a one-time code to `email`."""
        ...

    async def verify_otp(self, email: str, token: str) -> AuthSession:
        ...

    async def update_user(self, password: str) -> AuthUser:
        ...

    async def sign_out(self) -> None:
        ...

    async def get_session(self) -> Optional[AuthSession]:
        ...

    async def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        ...

    def on_session_change(self, callback: SessionCallback) -> Unsubscribe:
        """Register `callback(event, session)`; returns a function that removes it."""
        ...


class TableGateway(Protocol):
    """One table of the relational store, equality filters only."""

    async def select(
        self,
        filters: Row,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        ...

    async def insert(self, row: Row) -> Row:
        ...

    async def update(self, values: Row, filters: Row) -> List[Row]:
        """Return the updated rows (empty when nothing matched)."""
        ...

    async def delete(self, filters: Row) -> List[Row]:
        """Return the deleted rows (empty when nothing matched)."""
        ...


class StorageGateway(Protocol):
    """One object-storage bucket."""

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        ...

    async def get_public_url(self, path: str) -> str:
        ...


class Backend(Protocol):
    auth: AuthGateway

    def table(self, name: str) -> TableGateway:
        ...

    def storage(self, bucket: str) -> StorageGateway:
        ...
