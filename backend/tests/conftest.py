"""
Shared fixtures. Everything runs on the in-memory backend; no network access.
"""

import os
import tempfile

# Settings are cached on first use, so configure the environment before importing the app.
os.environ["USE_IN_MEMORY_BACKEND"] = "true"
os.environ["SUPABASE_URL"] = ""
os.environ["PREFERENCES_PATH"] = os.path.join(tempfile.mkdtemp(prefix="contactbook-"), "preferences.json")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from contactbook.core.notifications import Notifier
from contactbook.core.security import get_backend
from contactbook.main import app
from contactbook.services.auth_service import AuthStateMachine
from contactbook.services.contacts_service import ContactsService
from contactbook.services.memory_backend import InMemoryBackend, InMemoryStore
from contactbook.services.profile_service import ProfileService
from contactbook.services.query_cache import MutationGuard, QueryCache, get_query_cache
from contactbook.services.uploads import ImageUploader

OWNER_EMAIL = "owner@example.com"
OWNER_PASSWORD = "secret123"


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore(secret="test-secret")


@pytest.fixture()
def backend(store) -> InMemoryBackend:
    return InMemoryBackend(store)


@pytest.fixture()
def notifier() -> Notifier:
    return Notifier()


@pytest_asyncio.fixture()
async def anonymous(backend, notifier):
    async with AuthStateMachine(backend.auth, notifier) as machine:
        yield machine


@pytest_asyncio.fixture()
async def signed_in(store, backend, notifier):
    store.create_user(OWNER_EMAIL, OWNER_PASSWORD, "Owner")
    async with AuthStateMachine(backend.auth, notifier) as machine:
        await machine.sign_in(OWNER_EMAIL, OWNER_PASSWORD)
        yield machine


def make_contacts_service(machine, backend, notifier, table=None) -> ContactsService:
    return ContactsService(
        auth=machine,
        table=table or backend.table("contacts"),
        cache=QueryCache(),
        notifier=notifier,
        photos=ImageUploader(backend.storage("photos"), notifier),
        guard=MutationGuard(),
    )


@pytest.fixture()
def contacts(signed_in, backend, notifier) -> ContactsService:
    return make_contacts_service(signed_in, backend, notifier)


@pytest.fixture()
def profiles(signed_in, backend, notifier) -> ProfileService:
    return ProfileService(
        auth=signed_in,
        table=backend.table("profiles"),
        cache=QueryCache(),
        notifier=notifier,
        avatars=ImageUploader(backend.storage("avatars"), notifier),
    )


def draft(**overrides):
    base = {
        "name": "Alice Smith",
        "email": "alice@example.com",
        "phone": "98765 43210",
        "country_code": "+91",
        "message": "",
        "company": "",
        "address": "",
        "notes": "",
        "photo_url": "",
    }
    base.update(overrides)
    return base


@pytest.fixture()
def client(store):
    app.dependency_overrides[get_backend] = lambda: InMemoryBackend(store)
    get_query_cache().clear()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def sign_in(client, store, email=OWNER_EMAIL, password=OWNER_PASSWORD) -> dict:
    """Create the user if needed and return Authorization headers."""
    if email not in store.users:
        store.create_user(email, password, "Owner")
    response = client.post("/api/v1/auth/signin", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
