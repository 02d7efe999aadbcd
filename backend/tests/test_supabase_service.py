"""
Supabase adapters against a mocked client: query building, response mapping, error wrapping.
"""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from contactbook.core.errors import BackendError
from contactbook.services.supabase_service import SupabaseService


def _session(display_name="Jane"):
    user = SimpleNamespace(
        id="u1",
        email="jane@example.com",
        user_metadata={"display_name": display_name},
        created_at="2025-01-15T10:30:00+00:00",
    )
    return SimpleNamespace(
        access_token="access",
        refresh_token="refresh",
        token_type="bearer",
        expires_in=3600,
        expires_at=1736932200,
        user=user,
    )


@pytest.fixture()
def client():
    return MagicMock()


@pytest.fixture()
def service(client):
    return SupabaseService(client=client)


@pytest.mark.asyncio
async def test_select_filters_and_orders(client, service):
    query = client.table.return_value.select.return_value
    query.eq.return_value.order.return_value.execute.return_value.data = [{"id": "c1"}]

    rows = await service.table("contacts").select({"user_id": "u1"}, order_by="name")

    assert rows == [{"id": "c1"}]
    client.table.assert_called_with("contacts")
    query.eq.assert_called_once_with("user_id", "u1")
    query.eq.return_value.order.assert_called_once_with("name", desc=False)


@pytest.mark.asyncio
async def test_update_returns_affected_rows(client, service):
    update = client.table.return_value.update
    update.return_value.eq.return_value.eq.return_value.execute.return_value.data = []

    rows = await service.table("contacts").update({"name": "Bob"}, {"id": "c1", "user_id": "u1"})

    assert rows == []
    update.assert_called_once_with({"name": "Bob"})


@pytest.mark.asyncio
async def test_client_errors_become_backend_errors(client, service):
    client.table.return_value.insert.side_effect = Exception("duplicate key value")
    with pytest.raises(BackendError) as exc_info:
        await service.table("contacts").insert({"name": "Bob"})
    assert exc_info.value.message == "duplicate key value"


@pytest.mark.asyncio
async def test_sign_in_maps_session(client, service):
    client.auth.sign_in_with_password.return_value = SimpleNamespace(user=object(), session=_session())

    session = await service.auth.sign_in_with_password("jane@example.com", "securePass123")

    assert session.access_token == "access"
    assert session.user.id == "u1"
    assert session.user.display_name == "Jane"


@pytest.mark.asyncio
async def test_verify_otp_without_session_fails(client, service):
    client.auth.verify_otp.return_value = SimpleNamespace(user=None, session=None)
    with pytest.raises(BackendError) as exc_info:
        await service.auth.verify_otp("jane@example.com", "123456")
    assert exc_info.value.message == "Token has expired or is invalid"


def test_session_changes_are_forwarded(client, service):
    events = []
    subscription = client.auth.on_auth_state_change.return_value

    unsubscribe = service.auth.on_session_change(lambda event, session: events.append((event, session)))
    forward = client.auth.on_auth_state_change.call_args.args[0]
    forward("SIGNED_IN", _session())
    forward("SIGNED_OUT", None)

    assert [e for e, _ in events] == ["SIGNED_IN", "SIGNED_OUT"]
    assert events[0][1].user.email == "jane@example.com"
    assert events[1][1] is None
    assert unsubscribe == subscription.unsubscribe


@pytest.mark.asyncio
async def test_storage_upload_and_public_url(client, service):
    bucket = client.storage.from_.return_value
    bucket.get_public_url.return_value = "https://project.supabase.co/storage/v1/object/public/avatars/u1/a.png"

    storage = service.storage("avatars")
    await storage.upload("u1/a.png", b"\x89PNG", "image/png")
    url = await storage.get_public_url("u1/a.png")

    client.storage.from_.assert_called_with("avatars")
    bucket.upload.assert_called_once_with("u1/a.png", b"\x89PNG", {"content-type": "image/png"})
    assert url.endswith("/avatars/u1/a.png")
