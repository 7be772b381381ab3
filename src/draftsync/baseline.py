"""Baseline store for one class's schedule in one academic year.

The baseline is the last confirmed persisted snapshot. It is swapped as a
whole after a load or a successful publish and never edited in place.
"""

from collections.abc import Iterable
from typing import Any

from draftsync.logging import get_logger
from draftsync.models import ScheduleEntity, ScheduleEntry, as_schedule_entry

logger = get_logger(__name__)


def slot_key(day_of_week: int, period_id: str) -> str:
    """Key of a (day, period) cell, e.g. "1-p3"."""
    return f"{day_of_week}-{period_id}"


class BaselineStore:
    def __init__(self, entries: Iterable[ScheduleEntity | dict[str, Any]] = ()) -> None:
        self._entries: list[ScheduleEntry] = []
        self._by_slot: dict[str, ScheduleEntry] = {}
        self.replace(entries)

    def replace(self, entries: Iterable[ScheduleEntity | dict[str, Any]]) -> None:
        """Swap in a new snapshot. Inactive rows are kept but never looked up."""
        snapshot = [as_schedule_entry(entry) for entry in entries]

        by_slot: dict[str, ScheduleEntry] = {}
        for entry in snapshot:
            if not entry.is_active:
                continue
            key = slot_key(entry.day_of_week, entry.period_id)
            if key in by_slot:
                logger.warning(
                    "duplicate_active_slot",
                    key=key,
                    kept_id=by_slot[key].id,
                    ignored_id=entry.id,
                )
                continue
            by_slot[key] = entry

        self._entries = snapshot
        self._by_slot = by_slot

    def lookup(self, key: str) -> ScheduleEntry | None:
        """Active baseline row at a slot, or None."""
        return self._by_slot.get(key)

    @property
    def entries(self) -> list[ScheduleEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
