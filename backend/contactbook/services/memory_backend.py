"""
In-memory stand-in for Supabase auth, tables and storage.
Used when no Supabase project is configured (local development) and by the test-suite.
"""

from __future__ import annotations

import copy
import logging
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set, Tuple

from jose import JWTError, jwt

from contactbook.core.errors import BackendError
from contactbook.models.session import AuthSession, AuthUser
from contactbook.services.ports import Row, SessionCallback, Unsubscribe

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = 60


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class _UserRecord:
    id: str
    email: str
    password: Optional[str]
    display_name: Optional[str]
    created_at: datetime

    def to_user(self) -> AuthUser:
        return AuthUser(
            id=self.id,
            email=self.email,
            display_name=self.display_name,
            created_at=self.created_at,
        )


class InMemoryTable:
    def __init__(self, name: str) -> None:
        self.name = name
        self.rows: List[Row] = []

    @staticmethod
    def _matches(row: Row, filters: Row) -> bool:
        return all(row.get(k) == v for k, v in filters.items())

    async def select(
        self,
        filters: Row,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> List[Row]:
        found = [copy.deepcopy(r) for r in self.rows if self._matches(r, filters)]
        if order_by:
            found.sort(key=lambda r: (r.get(order_by) is None, r.get(order_by) or ""), reverse=descending)
        return found

    async def insert(self, row: Row) -> Row:
        stored = dict(row)
        stored.setdefault("id", str(uuid.uuid4()))
        stored.setdefault("created_at", _now().isoformat())
        self.rows.append(stored)
        return copy.deepcopy(stored)

    async def update(self, values: Row, filters: Row) -> List[Row]:
        updated = []
        for row in self.rows:
            if self._matches(row, filters):
                row.update(values)
                updated.append(copy.deepcopy(row))
        return updated

    async def delete(self, filters: Row) -> List[Row]:
        deleted = [r for r in self.rows if self._matches(r, filters)]
        self.rows = [r for r in self.rows if not self._matches(r, filters)]
        return deleted


@dataclass
class InMemoryBucket:
    name: str
    base_url: str = "https://example.test/storage/v1/object/public"
    objects: Dict[str, Tuple[bytes, str]] = field(default_factory=dict)

    async def upload(self, path: str, data: bytes, content_type: str) -> None:
        if path in self.objects:
            raise BackendError("The resource already exists")
        self.objects[path] = (data, content_type)

    async def get_public_url(self, path: str) -> str:
        return f"{self.base_url}/{self.name}/{path}"


class InMemoryStore:
    """Shared state of the fake project: users, one-time codes, tables and buckets."""

    def __init__(self, secret: Optional[str] = None, profiles_table: str = "profiles") -> None:
        self.secret = secret or secrets.token_hex(32)
        self.profiles_table = profiles_table
        self.users: Dict[str, _UserRecord] = {}
        self.refresh_tokens: Dict[str, str] = {}
        self.session_refresh: Dict[str, str] = {}
        self.revoked_sessions: Set[str] = set()
        self.otps: Dict[str, str] = {}
        self.outbox: List[Tuple[str, str]] = []
        self.tables: Dict[str, InMemoryTable] = {}
        self.buckets: Dict[str, InMemoryBucket] = {}

    def table(self, name: str) -> InMemoryTable:
        if name not in self.tables:
            self.tables[name] = InMemoryTable(name)
        return self.tables[name]

    def bucket(self, name: str) -> InMemoryBucket:
        if name not in self.buckets:
            self.buckets[name] = InMemoryBucket(name)
        return self.buckets[name]

    # -------------------------------------------------------------------------
    # Users and tokens
    # -------------------------------------------------------------------------

    def create_user(self, email: str, password: Optional[str], display_name: Optional[str]) -> _UserRecord:
        email = email.strip().lower()
        if email in self.users:
            raise BackendError("User already registered")
        record = _UserRecord(
            id=str(uuid.uuid4()),
            email=email,
            password=password,
            display_name=display_name,
            created_at=_now(),
        )
        self.users[email] = record
        # Mirrors the handle_new_user trigger that seeds public.profiles.
        self.table(self.profiles_table).rows.append(
            {
                "user_id": record.id,
                "display_name": display_name,
                "avatar_url": None,
                "created_at": record.created_at.isoformat(),
                "updated_at": record.created_at.isoformat(),
            }
        )
        return record

    def user_by_id(self, user_id: str) -> Optional[_UserRecord]:
        return next((u for u in self.users.values() if u.id == user_id), None)

    def issue_session(self, record: _UserRecord) -> AuthSession:
        expires = _now() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
        session_id = str(uuid.uuid4())
        access_token = jwt.encode(
            {"sub": record.id, "email": record.email, "sid": session_id, "exp": expires},
            self.secret,
            algorithm=ALGORITHM,
        )
        refresh_token = secrets.token_urlsafe(24)
        self.refresh_tokens[refresh_token] = record.id
        self.session_refresh[session_id] = refresh_token
        return AuthSession(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            expires_at=int(expires.timestamp()),
            user=record.to_user(),
        )

    def user_for_token(self, access_token: str) -> Optional[_UserRecord]:
        try:
            payload = jwt.decode(access_token, self.secret, algorithms=[ALGORITHM])
        except JWTError:
            return None
        if payload.get("sid") in self.revoked_sessions:
            return None
        return self.user_by_id(payload.get("sub", ""))

    def revoke_session(self, access_token: str) -> None:
        """Invalidate an access token and the refresh token issued with it."""
        try:
            payload = jwt.decode(access_token, self.secret, algorithms=[ALGORITHM])
        except JWTError:
            return
        session_id = payload.get("sid")
        if session_id:
            self.revoked_sessions.add(session_id)
            self.refresh_tokens.pop(self.session_refresh.pop(session_id, ""), None)

    def send_otp(self, email: str) -> str:
        code = f"{secrets.randbelow(1_000_000):06d}"
        self.otps[email] = code
        self.outbox.append((email, code))
        logger.info("One-time code for %s: %s", email, code)
        return code

    def last_otp(self, email: str) -> Optional[str]:
        return self.otps.get(email.strip().lower())


class InMemoryAuthGateway:
    """Per-client auth state (current session and listeners) over a shared store."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.session: Optional[AuthSession] = None
        self._listeners: List[SessionCallback] = []

    def _emit(self, event: str, session: Optional[AuthSession]) -> None:
        self.session = session
        for listener in list(self._listeners):
            listener(event, session)

    def _require_session(self) -> AuthSession:
        if self.session is None:
            raise BackendError("Auth session missing!")
        return self.session

    async def sign_up(self, email: str, password: str, display_name: Optional[str]) -> Optional[AuthSession]:
        record = self.store.create_user(email, password, display_name)
        session = self.store.issue_session(record)
        self._emit("SIGNED_IN", session)
        return session

    async def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        record = self.store.users.get(email.strip().lower())
        if record is None or record.password is None or record.password != password:
            raise BackendError("Invalid login credentials")
        session = self.store.issue_session(record)
        self._emit("SIGNED_IN", session)
        return session

    async def sign_in_with_otp(self, email: str, display_name: Optional[str], create_user: bool = True) -> None:
        email = email.strip().lower()
        if email not in self.store.users:
            if not create_user:
                raise BackendError("Signups not allowed for otp")
            self.store.create_user(email, None, display_name)
        self.store.send_otp(email)

    async def verify_otp(self, email: str, token: str) -> AuthSession:
        email = email.strip().lower()
        expected = self.store.otps.get(email)
        if expected is None or not secrets.compare_digest(expected, token):
            raise BackendError("Token has expired or is invalid")
        del self.store.otps[email]
        session = self.store.issue_session(self.store.users[email])
        self._emit("SIGNED_IN", session)
        return session

    async def update_user(self, password: str) -> AuthUser:
        session = self._require_session()
        record = self.store.user_by_id(session.user.id)
        if record is None:
            raise BackendError("User not found")
        record.password = password
        user = record.to_user()
        self._emit("USER_UPDATED", session)
        return user

    async def sign_out(self) -> None:
        if self.session is not None:
            self.store.revoke_session(self.session.access_token)
            self.store.refresh_tokens.pop(self.session.refresh_token, None)
        self._emit("SIGNED_OUT", None)

    async def get_session(self) -> Optional[AuthSession]:
        return self.session

    async def set_session(self, access_token: str, refresh_token: str) -> AuthSession:
        record = self.store.user_for_token(access_token)
        if record is not None:
            session = AuthSession(access_token=access_token, refresh_token=refresh_token, user=record.to_user())
            self._emit("SIGNED_IN", session)
            return session
        user_id = self.store.refresh_tokens.pop(refresh_token, None) if refresh_token else None
        record = self.store.user_by_id(user_id) if user_id else None
        if record is None:
            raise BackendError("Invalid or expired token")
        session = self.store.issue_session(record)
        self._emit("TOKEN_REFRESHED", session)
        return session

    def on_session_change(self, callback: SessionCallback) -> Unsubscribe:
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe


class InMemoryBackend:
    def __init__(self, store: InMemoryStore) -> None:
        self.store = store
        self.auth = InMemoryAuthGateway(store)

    def table(self, name: str) -> InMemoryTable:
        return self.store.table(name)

    def storage(self, bucket: str) -> InMemoryBucket:
        return self.store.bucket(bucket)
