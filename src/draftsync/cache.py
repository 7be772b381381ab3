"""Time-boxed in-memory cache for read-mostly reference data.

Holds per-teacher lookups (subject skills, grade levels, allowed classes,
assignment candidates) and the school-wide class roster so that reopening an
editor for the same teacher inside the TTL window does not refetch them.
Expiry is checked lazily on read; nothing is persisted between sessions.
"""

import copy
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from draftsync.config import get_config
from draftsync.errors import LoadError
from draftsync.logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CacheKeys:
    """Deterministic cache keys shared by the schedule and assignment editors."""

    SUBJECTS = "teacher-subjects"
    CLASSES = "teacher-classes"
    GRADE_LEVELS = "teacher-grade-levels"

    @staticmethod
    def teacher_subjects(teacher_id: str) -> str:
        return f"teacher-{teacher_id}-subjects"

    @staticmethod
    def teacher_grade_levels(teacher_id: str) -> str:
        return f"teacher-{teacher_id}-grade-levels"

    @staticmethod
    def teacher_classes(teacher_id: str) -> str:
        return f"teacher-{teacher_id}-classes"

    @staticmethod
    def teacher_assignments(teacher_id: str) -> str:
        return f"teacher-{teacher_id}-assignments"

    @classmethod
    def teacher_keys(cls, teacher_id: str) -> tuple[str, str, str]:
        """Keys holding a teacher's persisted assignment state."""
        return (
            cls.teacher_subjects(teacher_id),
            cls.teacher_grade_levels(teacher_id),
            cls.teacher_classes(teacher_id),
        )


@dataclass
class _CacheEntry:
    value: Any
    expires_at: datetime


class ReferenceCache:
    """Key -> value cache with a per-entry expiry.

    A read of an absent or expired key is a miss. Values are deep-copied on
    the way in and out so callers can edit what they get back.
    """

    def __init__(
        self,
        default_ttl: timedelta | None = None,
        clock: Clock | None = None,
    ) -> None:
        """Initialize ReferenceCache.

        Args:
            default_ttl: TTL used when set() is called without one. Defaults to
                DRAFTSYNC_CACHE_DEFAULT_TTL_SECONDS.
            clock: Callable returning the current aware datetime (tests inject one).
        """
        if default_ttl is None:
            default_ttl = timedelta(seconds=get_config().cache_default_ttl_seconds)
        self.default_ttl = default_ttl
        self._clock = clock or _utcnow
        self._entries: dict[str, _CacheEntry] = {}

    def _live_entry(self, key: str) -> _CacheEntry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() >= entry.expires_at:
            del self._entries[key]
            logger.debug("cache_entry_expired", key=key)
            return None

        return entry

    def get(self, key: str) -> Any | None:
        """Return the cached value, or None on a miss."""
        entry = self._live_entry(key)
        if entry is None:
            return None
        return copy.deepcopy(entry.value)

    def has(self, key: str) -> bool:
        return self._live_entry(key) is not None

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def set(self, key: str, value: Any, ttl: timedelta | None = None) -> None:
        """Store a value, overwriting any entry and resetting its expiry."""
        ttl = ttl if ttl is not None else self.default_ttl
        self._entries[key] = _CacheEntry(
            value=copy.deepcopy(value),
            expires_at=self._clock() + ttl,
        )

    def invalidate(self, key: str) -> None:
        """Drop an entry so the next read misses."""
        if self._entries.pop(key, None) is not None:
            logger.debug("cache_entry_invalidated", key=key)

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        key: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        ttl: timedelta | None = None,
    ) -> Any:
        """Return the cached value, fetching and storing it on a miss.

        Args:
            key: Cache key.
            fetch_fn: Coroutine function producing a fresh value.
            ttl: Optional TTL override for the stored value.

        Raises:
            LoadError: If the fetch fails. Nothing is stored in that case.
        """
        entry = self._live_entry(key)
        if entry is not None:
            logger.debug("cache_hit", key=key)
            return copy.deepcopy(entry.value)

        logger.debug("cache_miss", key=key)
        try:
            value = await fetch_fn()
        except LoadError:
            raise
        except Exception as e:
            logger.warning("reference_fetch_failed", key=key, error=str(e))
            raise LoadError(f"Failed to load {key}: {e}") from e

        self.set(key, value, ttl)
        return copy.deepcopy(value)
