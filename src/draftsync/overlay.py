"""Draft overlay for staging schedule edits before publishing them.

`DraftOverlay` records pending slot mutations on top of a BaselineStore
without touching it. Each draft is tagged create/update/delete when it is
staged, so the publish step never has to guess intent from payload shape.

This enables workflows such as:
    - Editing a whole day's periods and staging them in one go
    - Marking a slot for removal while still rendering it struck through
    - Reverting one slot or discarding every pending edit

The overlay never calls external persistence.
"""

from collections import Counter
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from draftsync.logging import get_logger
from draftsync.models import (
    DraftEntry,
    DraftStatus,
    ScheduleEntity,
    ScheduleEntry,
    SlotView,
    as_schedule_entry,
)

logger = get_logger(__name__)

BaselineLookup = Callable[[str], ScheduleEntry | None]


def _same_row(entry: ScheduleEntry, original: ScheduleEntry) -> bool:
    # display objects and a missing id on the edited row do not count
    edited = entry.to_entity().model_copy(update={"id": original.id})
    return edited == original.to_entity()


class DraftOverlay:
    """Pending schedule edits keyed by slot key.

    Notes:
        - The last edit to a key wins.
        - Keys are not validated; callers build them with baseline.slot_key().
    """

    def __init__(self) -> None:
        self._drafts: dict[str, DraftEntry] = {}

    def stage(
        self,
        key: str,
        entry: ScheduleEntity | dict[str, Any],
        baseline_lookup: BaselineLookup,
    ) -> DraftEntry | None:
        """Stage or replace the draft at `key`.

        The status comes from the baseline: an existing row makes this an
        update carrying the row's id, otherwise it is a create with no id.
        An entry whose persisted fields match the baseline row leaves no
        draft behind.

        Args:
            key: Slot key.
            entry: The edited row (display objects may be attached).
            baseline_lookup: Returns the active baseline row for a key.

        Returns:
            DraftEntry | None: The staged draft, or None if the slot is unchanged.
        """
        entry = as_schedule_entry(entry)
        original = baseline_lookup(key)

        if original is not None and _same_row(entry, original):
            self._drafts.pop(key, None)
            logger.debug("unchanged_slot_not_staged", key=key)
            return None

        if original is not None:
            draft = DraftEntry(
                key=key,
                status=DraftStatus.UPDATE,
                data=entry.model_copy(update={"id": original.id}),
                original=original,
            )
        else:
            draft = DraftEntry(
                key=key,
                status=DraftStatus.CREATE,
                data=entry.model_copy(update={"id": None}),
            )

        self._drafts[key] = draft
        logger.debug("draft_staged", key=key, status=draft.status.value)
        return draft

    def mark_deleted(
        self,
        key: str,
        baseline_entry: ScheduleEntity | dict[str, Any] | None,
    ) -> DraftEntry | None:
        """Stage the removal of the row at `key`.

        An uncommitted create draft is simply dropped, since the server never
        saw it. Otherwise a delete draft is recorded against the original row;
        when an update draft is pending, its original wins over `baseline_entry`.

        Returns:
            DraftEntry | None: The delete draft, or None if nothing was recorded.
        """
        existing = self._drafts.get(key)

        if existing is not None and existing.status is DraftStatus.CREATE:
            del self._drafts[key]
            logger.debug("create_draft_dropped", key=key)
            return None

        if existing is not None and existing.original is not None:
            original = existing.original
        elif baseline_entry is not None:
            original = as_schedule_entry(baseline_entry)
        else:
            logger.debug("delete_skipped_empty_slot", key=key)
            return None

        draft = DraftEntry(
            key=key,
            status=DraftStatus.DELETE,
            data=original.model_copy(update={"is_active": False}),
            original=original,
        )
        self._drafts[key] = draft
        logger.debug("draft_staged", key=key, status=draft.status.value)
        return draft

    def revert(self, key: str) -> None:
        """Drop the draft at `key`, if present."""
        self._drafts.pop(key, None)

    def release(self, drafts: Iterable[DraftEntry]) -> list[str]:
        """Drop the given drafts unless their key has been restaged since.

        Returns:
            list[str]: Keys that were dropped.
        """
        released = []
        for draft in drafts:
            if self._drafts.get(draft.key) is draft:
                del self._drafts[draft.key]
                released.append(draft.key)
        return released

    def discard_all(self) -> None:
        """Remove every draft. The baseline is untouched."""
        self._drafts.clear()

    def resolve(self, key: str, baseline_lookup: BaselineLookup) -> SlotView:
        """Return what the grid should show at `key`.

        A pending deletion still returns the original row (flagged deleted) so
        the slot can be rendered as marked for removal.
        """
        draft = self._drafts.get(key)

        if draft is None:
            return SlotView(key=key, entry=baseline_lookup(key))

        if draft.status is DraftStatus.DELETE:
            return SlotView(
                key=key,
                entry=draft.original or baseline_lookup(key),
                is_draft=True,
                is_deleted=True,
            )

        return SlotView(key=key, entry=draft.data, is_draft=True)

    def get(self, key: str) -> DraftEntry | None:
        return self._drafts.get(key)

    def entries(self) -> list[DraftEntry]:
        return list(self._drafts.values())

    def keys(self) -> list[str]:
        return list(self._drafts)

    def counts(self) -> dict[DraftStatus, int]:
        """Number of pending drafts per status (all statuses present)."""
        tally = Counter(draft.status for draft in self._drafts.values())
        return {status: tally.get(status, 0) for status in DraftStatus}

    def is_empty(self) -> bool:
        return not self._drafts

    def __len__(self) -> int:
        return len(self._drafts)

    def __contains__(self, key: str) -> bool:
        return key in self._drafts

    def __iter__(self) -> Iterator[DraftEntry]:
        return iter(list(self._drafts.values()))
