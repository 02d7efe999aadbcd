"""
Supabase client: auth (password, email OTP, session), table access and storage buckets.
Each adapter wraps one concern of the supabase client and reports failures as BackendError.
"""

import logging
from typing import Any, Dict, List, Optional

from supabase import Client, create_client

from contactbook.core.config import get_settings
from contactbook.core.errors import BackendError
from contactbook.models.session import (
    AuthSession,
    AuthUser,
    session_from_supabase,
    user_from_supabase,
)
from contactbook.services.ports import Row, SessionCallback, Unsubscribe

logger = logging.getLogger(__name__)


def _message(e: Exception) -> str:
    return getattr(e, "message", None) or str(e)


class SupabaseAuthGateway:
    def __init__(self, client: Client) -> None:
        self.client = client

    async def sign_up(self, email: str, password: str, display_name: Optional[str]) -> Optional[AuthSession]:
        try:
            response = self.client.auth.sign_up(
                {
                    "email": email,
                    "password": password,
                    "options": {
                        "data": {
                            "display_name": display_name,
                        }
                    },
                }
            )
        except Exception as e:
            logger.error("Signup error: %s", _message(e))
            raise BackendError(_message(e))
        if not response.user:
            raise BackendError("Failed to create user")
        return session_from_supabase(response.session) if response.session else None

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        try:
            response = self.client.auth.sign_in_with_password(
                {
                    "email": email,
                    "password": password,
                }
            )
        except Exception as e:
            logger.error("Signin error: %s", _message(e))
            raise BackendError(_message(e))
        if not response.user or not response.session:
            raise BackendError("Invalid login credentials")
        return session_from_supabase(response.session)

    async def sign_in_with_otp(self, email: str, display_name: Optional[str], create_user: bool = True) -> None:
        try:
            self.client.auth.sign_in_with_otp(
                {
                    "email": email,
                    "options": {
                        "should_create_user": create_user,
                        "data": {
                            "display_name": display_name,
                        },
                    },
                }
            )
        except Exception as e:
            logger.error("OTP dispatch error: %s", _message(e))
            raise BackendError(_message(e))

    async def verify_otp(self, email: str, token: str) -> AuthSession:
        try:
            response = self.client.auth.verify_otp(
                {
                    "email": email,
                    "token": token,
                    "type": "email",
                }
            )
        except Exception as e:
            logger.error("OTP verification error: %s", _message(e))
            raise BackendError(_message(e))
        if not response.user or not response.session:
            raise BackendError("Token has expired or is invalid")
        return session_from_supabase(response.session)

    async def update_user(self, password: str) -> AuthUser:
        try:
            response = self.client.auth.update_user(
                {
                    "password": password,
                }
            )
        except Exception as e:
            logger.error("Password update error: %s", _message(e))
            raise BackendError(_message(e))
        return user_from_supabase(response.user)

    async def sign_out(self) -> None:
        try:
            self.client.auth.sign_out()
        except Exception as e:
            logger.error("Signout error: %s", _message(e))
            raise BackendError(_message(e))

    async def get_session(self) -> Optional[AuthSession]:
        try:
            session = self.client.auth.get_session()
        except Exception as e:
            logger.error("Get session error: %s", _message(e))
            raise BackendError(_message(e))
        return session_from_supabase(session) if session else None

    async def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        try:
            response = self.client.auth.set_session(access_token, refresh_token)
        except Exception as e:
            logger.error("Set session error: %s", _message(e))
            raise BackendError(_message(e))
        if not response.session:
            raise BackendError("Invalid or expired token")
        return session_from_supabase(response.session)

    def on_session_change(self, callback: SessionCallback) -> Unsubscribe:
        def _forward(event: Any, session: Any) -> None:
            callback(str(event), session_from_supabase(session) if session else None)

        subscription = self.client.auth.on_auth_state_change(_forward)
        return subscription.unsubscribe


class SupabaseTableGateway:
    def __init__(self, client: Client, name: str) -> None:
        self.client = client
        self.name = name

    def _filtered(self, query: Any, filters: Row) -> Any:
        for column, value in filters.items():
            query = query.eq(column, value)
        return query

    async def select(
        self,
        filters: Row,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        try:
            query = self._filtered(self.client.table(self.name).select("*"), filters)
            if order_by:
                query = query.order(order_by, desc=descending)
            response = query.execute()
        except Exception as e:
            logger.error("Select %s error: %s", self.name, _message(e))
            raise BackendError(_message(e))
        return list(response.data or [])

    async def insert(self, row: Row) -> Row:
        try:
            response = self.client.table(self.name).insert(row).execute()
        except Exception as e:
            logger.error("Insert %s error: %s", self.name, _message(e))
            raise BackendError(_message(e))
        if not response.data:
            raise BackendError(f"Insert into {self.name} returned no row")
        return response.data[0]

    async def update(self, values: Row, filters: Row) -> List[Row]:
        try:
            query = self._filtered(self.client.table(self.name).update(values), filters)
            response = query.execute()
        except Exception as e:
            logger.error("Update %s error: %s", self.name, _message(e))
            raise BackendError(_message(e))
        return list(response.data or [])

    async def delete(self, filters: Row) -> List[Row]:
        try:
            query = self._filtered(self.client.table(self.name).delete(), filters)
            response = query.execute()
        except Exception as e:
            logger.error("Delete %s error: %s", self.name, _message(e))
            raise BackendError(_message(e))
        return list(response.data or [])


class SupabaseStorageGateway:
    def __init__(self, client: Client, bucket: str) -> None:
        self.client = client
        self.bucket = bucket

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        try:
            self.client.storage.from_(self.bucket).upload(
                path,
                data,
                {"content-type": content_type},
            )
        except Exception as e:
            logger.error("Upload %s/%s error: %s", self.bucket, path, _message(e))
            raise BackendError(_message(e))

    async def get_public_url(self, path: str) -> str:
        return self.client.storage.from_(self.bucket).get_public_url(path)


class SupabaseService:
    """
    One supabase client per request: the session set on it (sign in, verify OTP, resume)
    also authorizes its table and storage calls, so row-level security applies.
    """

    def __init__(self, client: Optional[Client] = None) -> None:
        if client is None:
            settings = get_settings()
            client = create_client(
                settings.SUPABASE_URL,
                settings.SUPABASE_ANON_KEY,
            )
        self.client: Client = client
        self.auth = SupabaseAuthGateway(client)
        self._tables: Dict[str, SupabaseTableGateway] = {}
        self._buckets: Dict[str, SupabaseStorageGateway] = {}

    def table(self, name: str) -> SupabaseTableGateway:
        if name not in self._tables:
            self._tables[name] = SupabaseTableGateway(self.client, name)
        return self._tables[name]

    def storage(self, bucket: str) -> SupabaseStorageGateway:
        if bucket not in self._buckets:
            self._buckets[bucket] = SupabaseStorageGateway(self.client, bucket)
        return self._buckets[bucket]
