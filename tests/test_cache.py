import asyncio
from datetime import timedelta

import pytest

from draftsync.cache import CacheKeys
from draftsync.errors import LoadError


def test_get_missing_key_is_miss(cache):
    assert cache.get("teacher-t001-subjects") is None
    assert not cache.has("teacher-t001-subjects")


def test_set_then_get(cache):
    cache.set("teacher-t001-subjects", ["sub001"])

    assert cache.get("teacher-t001-subjects") == ["sub001"]
    assert "teacher-t001-subjects" in cache


def test_get_after_ttl_is_miss(cache, clock):
    cache.set("teacher-t001-subjects", ["sub001"])

    clock.advance(minutes=4, seconds=59)
    assert cache.get("teacher-t001-subjects") == ["sub001"]

    clock.advance(seconds=1)
    assert cache.get("teacher-t001-subjects") is None


def test_set_overwrites_and_resets_expiry(cache, clock):
    cache.set("teacher-t001-subjects", ["sub001"])
    clock.advance(minutes=4)

    cache.set("teacher-t001-subjects", ["sub002"])
    clock.advance(minutes=4)

    assert cache.get("teacher-t001-subjects") == ["sub002"]


def test_custom_ttl(cache, clock):
    cache.set(CacheKeys.CLASSES, {"Grade5": []}, ttl=timedelta(minutes=15))
    clock.advance(minutes=10)

    assert cache.get(CacheKeys.CLASSES) == {"Grade5": []}


def test_invalidate(cache):
    cache.set("teacher-t001-subjects", ["sub001"])
    cache.invalidate("teacher-t001-subjects")

    assert cache.get("teacher-t001-subjects") is None

    # invalidating an absent key is harmless
    cache.invalidate("teacher-t001-subjects")


def test_clear(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.clear()

    assert not cache.has("a")
    assert not cache.has("b")


def test_cached_value_is_isolated_from_callers(cache):
    subjects = ["sub001"]
    cache.set("teacher-t001-subjects", subjects)
    subjects.append("sub002")

    fetched = cache.get("teacher-t001-subjects")
    fetched.append("sub003")

    assert cache.get("teacher-t001-subjects") == ["sub001"]


def test_get_or_fetch_fetches_once_within_ttl(cache, clock):
    calls = []

    async def fetch():
        calls.append(1)
        return ["sub001"]

    async def scenario():
        first = await cache.get_or_fetch("teacher-t001-subjects", fetch)
        second = await cache.get_or_fetch("teacher-t001-subjects", fetch)
        clock.advance(minutes=5)
        third = await cache.get_or_fetch("teacher-t001-subjects", fetch)
        return first, second, third

    first, second, third = asyncio.run(scenario())

    assert first == second == third == ["sub001"]
    assert len(calls) == 2


def test_get_or_fetch_failure_raises_load_error(cache):
    async def fetch():
        raise ConnectionError("network down")

    with pytest.raises(LoadError):
        asyncio.run(cache.get_or_fetch("teacher-t001-subjects", fetch))

    assert not cache.has("teacher-t001-subjects")


def test_teacher_keys():
    assert CacheKeys.teacher_keys("t001") == (
        "teacher-t001-subjects",
        "teacher-t001-grade-levels",
        "teacher-t001-classes",
    )
