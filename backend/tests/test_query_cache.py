from types import SimpleNamespace

import pytest

from contactbook.core.errors import SubmissionPending
from contactbook.services import query_cache
from contactbook.services.query_cache import MutationGuard, QueryCache


def test_cache_is_keyed_per_user():
    cache = QueryCache()
    cache.set(("contacts", "u1"), ["a"])
    assert cache.get(("contacts", "u1")) == ["a"]
    assert cache.get(("contacts", "u2")) is None
    assert ("contacts", "u1") in cache
    assert ("profile", "u1") not in cache


def test_invalidate_only_drops_one_key():
    cache = QueryCache()
    cache.set(("contacts", "u1"), [])
    cache.set(("contacts", "u2"), [])
    cache.invalidate(("contacts", "u1"))
    cache.invalidate(("contacts", "missing"))
    assert ("contacts", "u1") not in cache
    assert ("contacts", "u2") in cache


def test_entries_expire(monkeypatch):
    clock = [100.0]
    monkeypatch.setattr(query_cache, "time", SimpleNamespace(monotonic=lambda: clock[0]))
    cache = QueryCache(ttl_seconds=60)
    cache.set(("contacts", "u1"), ["a"])
    clock[0] += 59
    assert cache.get(("contacts", "u1")) == ["a"]
    clock[0] += 2
    assert cache.get(("contacts", "u1")) is None


@pytest.mark.asyncio
async def test_guard_rejects_the_same_mutation_while_pending():
    guard = MutationGuard()
    async with guard.hold(("add", "u1")):
        assert guard.is_pending(("add", "u1"))
        with pytest.raises(SubmissionPending) as exc_info:
            async with guard.hold(("add", "u1")):
                pass
        assert exc_info.value.operation == "add"
        async with guard.hold(("add", "u2")):
            pass
    assert not guard.is_pending(("add", "u1"))


@pytest.mark.asyncio
async def test_guard_releases_after_failure():
    guard = MutationGuard()
    with pytest.raises(RuntimeError):
        async with guard.hold(("delete", "u1")):
            raise RuntimeError("boom")
    async with guard.hold(("delete", "u1")):
        pass
