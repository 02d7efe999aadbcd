"""
Contacts of the signed-in user: list (cached), add, update, delete and photo upload.
Every mutation invalidates the user's cached list once the write has completed.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from fastapi import Depends

from contactbook.core.config import get_settings
from contactbook.core.errors import BackendError, NotFound, PersistenceError, ValidationError
from contactbook.core.notifications import Notifier, get_notifier
from contactbook.core.security import get_auth_machine, get_backend
from contactbook.models.contact import DEFAULT_DIAL_CODE, Contact
from contactbook.services.auth_service import AuthStateMachine
from contactbook.services.contact_rules import validate_contact, validate_partial
from contactbook.services.ports import Backend, TableGateway
from contactbook.services.query_cache import (
    MutationGuard,
    QueryCache,
    get_mutation_guard,
    get_query_cache,
)
from contactbook.services.uploads import ImageUploader

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "email", "phone")
OPTIONAL_FIELDS = ("message", "company", "address", "notes", "photo_url")
UPDATABLE_FIELDS = REQUIRED_FIELDS + OPTIONAL_FIELDS + ("country_code",)


def _clean(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def normalize_draft(draft: Mapping[str, Any]) -> Dict[str, Any]:
    """Trim text and store empty optional fields as NULL."""
    row: Dict[str, Any] = {f: _clean(draft.get(f) or "") for f in REQUIRED_FIELDS}
    row["country_code"] = _clean(draft.get("country_code")) or DEFAULT_DIAL_CODE
    for f in OPTIONAL_FIELDS:
        row[f] = _clean(draft.get(f)) or None
    return row


def normalize_updates(updates: Mapping[str, Any]) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for f, value in updates.items():
        if f not in UPDATABLE_FIELDS:
            continue
        value = _clean(value)
        if f in OPTIONAL_FIELDS:
            value = value or None
        elif f == "country_code":
            value = value or DEFAULT_DIAL_CODE
        values[f] = value
    return values


class ContactsService:
    def __init__(
        self,
        auth: AuthStateMachine,
        table: TableGateway,
        cache: QueryCache,
        notifier: Notifier,
        photos: Optional[ImageUploader] = None,
        guard: Optional[MutationGuard] = None,
    ) -> None:
        self.auth = auth
        self.table = table
        self.cache = cache
        self.notifier = notifier
        self.photos = photos
        self.guard = guard or MutationGuard()

    @staticmethod
    def cache_key(user_id: str) -> tuple:
        return ("contacts", user_id)

    def is_pending(self, operation: str, contact_id: Optional[str] = None) -> bool:
        """Whether `operation` is in flight for the current user (and `contact_id`, for update/delete)."""
        user = self.auth.user
        if not user:
            return False
        key = (operation, user.id) if contact_id is None else (operation, user.id, contact_id)
        return self.guard.is_pending(key)

    async def list(self) -> List[Contact]:
        """All contacts of the current user, ordered by name."""
        user = self.auth.require_user()
        key = self.cache_key(user.id)
        cached = self.cache.get(key)
        if cached is not None:
            return list(cached)
        try:
            rows = await self.table.select({"user_id": user.id}, order_by="name")
        except BackendError as e:
            logger.error("List contacts error: %s", e.message)
            raise PersistenceError("Failed to load contacts")
        contacts = [Contact.model_validate(r) for r in rows]
        self.cache.set(key, contacts)
        return list(contacts)

    async def add(self, draft: Mapping[str, Any]) -> Contact:
        user = self.auth.require_user()
        errors = validate_contact(draft)
        if errors:
            raise ValidationError(errors)

        row = normalize_draft(draft)
        row["user_id"] = user.id
        async with self.guard.hold(("add", user.id)):
            try:
                created = await self.table.insert(row)
            except BackendError as e:
                logger.error("Error adding contact: %s", e.message)
                self.notifier.error("Error", "Failed to add contact. Please try again.")
                raise PersistenceError("Failed to add contact. Please try again.")
            self.cache.invalidate(self.cache_key(user.id))
        self.notifier.notify("Contact added!", "The contact has been saved successfully.")
        return Contact.model_validate(created)

    async def update(self, contact_id: str, updates: Mapping[str, Any]) -> Contact:
        """Apply only the supplied fields."""
        user = self.auth.require_user()
        errors = validate_partial(updates)
        if errors:
            raise ValidationError(errors)
        values = normalize_updates(updates)

        async with self.guard.hold(("update", user.id, contact_id)):
            try:
                rows = await self.table.update(values, {"id": contact_id, "user_id": user.id})
            except BackendError as e:
                logger.error("Error updating contact %s: %s", contact_id, e.message)
                self.notifier.error("Error", "Failed to update contact. Please try again.")
                raise PersistenceError("Failed to update contact. Please try again.")
            if not rows:
                self.notifier.error("Error", "Contact not found.")
                raise NotFound("Contact not found")
            self.cache.invalidate(self.cache_key(user.id))
        self.notifier.notify("Contact updated", "Changes have been saved.")
        return Contact.model_validate(rows[0])

    async def delete(self, contact_id: str) -> None:
        user = self.auth.require_user()
        async with self.guard.hold(("delete", user.id, contact_id)):
            try:
                rows = await self.table.delete({"id": contact_id, "user_id": user.id})
            except BackendError as e:
                logger.error("Error deleting contact %s: %s", contact_id, e.message)
                self.notifier.error("Error", "Failed to delete contact. Please try again.")
                raise PersistenceError("Failed to delete contact. Please try again.")
            if not rows:
                self.notifier.error("Error", "Contact not found.")
                raise NotFound("Contact not found")
            self.cache.invalidate(self.cache_key(user.id))
        self.notifier.notify("Contact deleted", "The contact has been removed.")

    async def upload_photo(self, filename: Optional[str], content_type: Optional[str], data: bytes) -> str:
        """Store a contact photo and return its public URL (persisted by add/update)."""
        self.auth.require_user()
        if self.photos is None:
            raise PersistenceError("Photo storage is not configured")
        url = await self.photos.upload("contacts", filename, content_type, data)
        self.notifier.notify("Photo uploaded!", "Contact photo has been added.")
        return url

    async def remove_photo(self, contact_id: str) -> Contact:
        contact = await self.update(contact_id, {"photo_url": None})
        self.notifier.notify("Photo removed", "The profile picture has been cleared.")
        return contact


def get_contacts_service(
    auth: AuthStateMachine = Depends(get_auth_machine),
    backend: Backend = Depends(get_backend),
    notifier: Notifier = Depends(get_notifier),
) -> ContactsService:
    """Dependency for FastAPI."""
    settings = get_settings()
    return ContactsService(
        auth=auth,
        table=backend.table(settings.contacts_table),
        cache=get_query_cache(),
        notifier=notifier,
        photos=ImageUploader(backend.storage(settings.photos_bucket), notifier, settings.max_upload_bytes),
        guard=get_mutation_guard(),
    )
