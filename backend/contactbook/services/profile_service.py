"""
Profile of the signed-in user: display name and avatar.
"""

import logging
from typing import Any, Mapping, Optional

from fastapi import Depends

from contactbook.core.config import get_settings
from contactbook.core.errors import BackendError, NotFound, PersistenceError
from contactbook.core.notifications import Notifier, get_notifier
from contactbook.core.security import get_auth_machine, get_backend
from contactbook.models.profile import Profile
from contactbook.services.auth_service import AuthStateMachine
from contactbook.services.ports import Backend, TableGateway
from contactbook.services.query_cache import QueryCache, get_query_cache
from contactbook.services.uploads import ImageUploader

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "avatar_url")


class ProfileService:
    def __init__(
        self,
        auth: AuthStateMachine,
        table: TableGateway,
        cache: QueryCache,
        notifier: Notifier,
        avatars: Optional[ImageUploader] = None,
    ) -> None:
        self.auth = auth
        self.table = table
        self.cache = cache
        self.notifier = notifier
        self.avatars = avatars

    @staticmethod
    def cache_key(user_id: str) -> tuple:
        return ("profile", user_id)

    async def get(self) -> Optional[Profile]:
        user = self.auth.require_user()
        key = self.cache_key(user.id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        try:
            rows = await self.table.select({"user_id": user.id})
        except BackendError as e:
            logger.error("Get profile error: %s", e.message)
            raise PersistenceError("Failed to load profile")
        if not rows:
            return None
        profile = Profile.model_validate(rows[0])
        self.cache.set(key, profile)
        return profile

    async def update(self, updates: Mapping[str, Any]) -> Profile:
        user = self.auth.require_user()
        values = {k: v for k, v in updates.items() if k in PROFILE_FIELDS}
        if isinstance(values.get("display_name"), str):
            values["display_name"] = values["display_name"].strip()
        try:
            rows = await self.table.update(values, {"user_id": user.id})
        except BackendError as e:
            logger.error("Update profile error: %s", e.message)
            self.notifier.error("Error", "Failed to update profile. Please try again.")
            raise PersistenceError("Failed to update profile")
        if not rows:
            raise NotFound("Profile not found")
        self.cache.invalidate(self.cache_key(user.id))
        self.notifier.notify("Profile updated", "Your changes have been saved.")
        return Profile.model_validate(rows[0])

    async def upload_avatar(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> Profile:
        """Store the image under the user's folder and point the profile at it."""
        user = self.auth.require_user()
        if self.avatars is None:
            raise PersistenceError("Avatar storage is not configured")
        url = await self.avatars.upload(user.id, filename, content_type, data)
        return await self.update({"avatar_url": url})

    async def remove_avatar(self) -> Optional[Profile]:
        profile = await self.get()
        if profile is None or not profile.avatar_url:
            return profile
        return await self.update({"avatar_url": None})


def get_profile_service(
    auth: AuthStateMachine = Depends(get_auth_machine),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
) -> ProfileService:
    """Dependency for FastAPI."""
    settings = get_settings()
    return ProfileService(
        auth=auth,
        table=backend.table(settings.profiles_table),
        cache=get_query_cache(),
        notifier=notifier,
        avatars=ImageUploader(backend.storage(settings.avatars_bucket), notifier, settings.max_upload_bytes),
    )
