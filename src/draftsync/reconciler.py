"""Publish reconciler for schedule drafts.

Turns a DraftOverlay into the exact operation list the schedule persistence
collaborator expects, submits it in one call, and on success folds the result
into a fresh baseline and clears the drafts.

Payload rules:
    - Only backend columns are sent; display objects never are.
    - `id` is present only for rows that already exist (updates and deletes).
      Its absence is how the backend tells a create from an update.
    - `room_number` is sent only when non-empty.
    - Deletes are soft: the original row is re-sent with is_active=False.

Drafts that break a staging invariant (a delete with no id, a slot missing
its teacher or subject) are skipped, logged and reported, never submitted.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from pydantic import BaseModel, Field

from draftsync.baseline import BaselineStore
from draftsync.errors import LoadError, PublishInProgressError, PublishRejectedError
from draftsync.logging import get_logger
from draftsync.models import (
    DraftStatus,
    PublishResult,
    ScheduleEntity,
    ScheduleEntry,
    SkippedOperation,
)
from draftsync.overlay import DraftOverlay

logger = get_logger(__name__)

PublishScheduleFn = Callable[[list[dict[str, Any]]], Awaitable[Any]]
RefreshScheduleFn = Callable[[], Awaitable[Iterable[Any]]]

# Columns the backend recognises, besides the optional id and room_number.
PERSISTED_FIELDS: tuple[str, ...] = (
    "class_id",
    "teacher_id",
    "subject_id",
    "period_id",
    "day_of_week",
    "academic_year",
    "is_active",
)


def build_schedule_payload(entity: ScheduleEntity) -> dict[str, Any]:
    """Build the persistence payload for one row.

    Args:
        entity: A ScheduleEntity or ScheduleEntry (display objects are dropped).

    Returns:
        dict: Backend columns only, with `id` and `room_number` omitted when empty.
    """
    if isinstance(entity, ScheduleEntry):
        entity = entity.to_entity()

    payload: dict[str, Any] = {field: getattr(entity, field) for field in PERSISTED_FIELDS}

    if entity.room_number:
        payload["room_number"] = entity.room_number

    if entity.id:
        payload["id"] = entity.id

    return payload


class OperationPlan(BaseModel):
    """Operations to submit for one publish, plus what was left out."""

    operations: list[dict[str, Any]] = Field(default_factory=list)
    skipped: list[SkippedOperation] = Field(default_factory=list)
    created: int = 0
    updated: int = 0
    deleted: int = 0

    def to_result(self) -> PublishResult:
        return PublishResult(
            created=self.created,
            updated=self.updated,
            deleted=self.deleted,
            skipped=list(self.skipped),
        )


def build_operations(overlay: DraftOverlay) -> OperationPlan:
    """Convert every staged draft into a persistence operation.

    Deletes are emitted first, then creates and updates, each group in
    staging order.
    """
    plan = OperationPlan()
    drafts = overlay.entries()

    for draft in drafts:
        if draft.status is not DraftStatus.DELETE:
            continue

        original = draft.original
        if original is None or not original.id:
            logger.error("delete_draft_missing_id", key=draft.key)
            plan.skipped.append(
                SkippedOperation(key=draft.key, reason="delete draft has no persisted id")
            )
            continue

        plan.operations.append(
            build_schedule_payload(
                original.to_entity().model_copy(update={"is_active": False})
            )
        )
        plan.deleted += 1

    for draft in drafts:
        if draft.status is DraftStatus.DELETE:
            continue

        data = draft.data
        if not data.teacher_id or not data.subject_id:
            logger.warning(
                "incomplete_slot_skipped",
                key=draft.key,
                has_teacher=bool(data.teacher_id),
                has_subject=bool(data.subject_id),
            )
            plan.skipped.append(
                SkippedOperation(key=draft.key, reason="slot is missing a teacher or subject")
            )
            continue

        plan.operations.append(build_schedule_payload(data))
        if draft.status is DraftStatus.UPDATE:
            plan.updated += 1
        else:
            plan.created += 1

    return plan


class SchedulePublisher:
    """Publishes one overlay against one baseline.

    Only one publish may be in flight at a time; a second call while the first
    is awaiting the collaborator raises PublishInProgressError.
    """

    def __init__(
        self,
        overlay: DraftOverlay,
        baseline: BaselineStore,
        publish_fn: PublishScheduleFn,
        refresh_fn: RefreshScheduleFn,
    ) -> None:
        """Initialize SchedulePublisher.

        Args:
            overlay: Drafts to publish.
            baseline: Baseline to replace after a successful publish.
            publish_fn: Coroutine taking the operation list. It raises on
                rejection. It may return the complete post-publish schedule for
                the scope as a list; anything else triggers refresh_fn.
            refresh_fn: Coroutine returning the current schedule for the scope.
        """
        self.overlay = overlay
        self.baseline = baseline
        self.publish_fn = publish_fn
        self.refresh_fn = refresh_fn
        self._in_flight = False

    @property
    def is_publishing(self) -> bool:
        return self._in_flight

    async def publish(self) -> PublishResult:
        """Submit all drafts in one call and reconcile on success.

        Only the drafts captured when the call starts are cleared afterwards;
        edits staged while it is pending are kept.

        Returns:
            PublishResult: Counts of submitted operations and skipped drafts.

        Raises:
            PublishInProgressError: If a publish is already running.
            PublishRejectedError: If the collaborator rejects the call. Drafts
                and baseline are left exactly as they were.
            LoadError: If the publish succeeded but the baseline refresh failed.
                Submitted drafts are cleared in that case since the server
                accepted them.
        """
        if self._in_flight:
            raise PublishInProgressError("A schedule publish is already in progress")

        if self.overlay.is_empty():
            return PublishResult()

        submitted = self.overlay.entries()
        plan = build_operations(self.overlay)
        if not plan.operations:
            logger.warning("schedule_publish_nothing_to_submit", skipped=len(plan.skipped))
            return plan.to_result()

        self._in_flight = True
        try:
            try:
                returned = await self.publish_fn(plan.operations)
            except Exception as e:
                logger.warning(
                    "schedule_publish_rejected",
                    operations=len(plan.operations),
                    error=str(e),
                )
                raise PublishRejectedError(f"Schedule publish failed: {e}") from e

            # drafts restaged while the call was pending stay for the next publish
            self.overlay.release(submitted)
            await self._reconcile_baseline(returned)
        finally:
            self._in_flight = False

        logger.info(
            "schedule_drafts_published",
            created=plan.created,
            updated=plan.updated,
            deleted=plan.deleted,
            skipped=len(plan.skipped),
        )
        return plan.to_result()

    async def _reconcile_baseline(self, returned: Any) -> None:
        try:
            entries = returned if isinstance(returned, list) else await self.refresh_fn()
            self.baseline.replace(entries)
        except Exception as e:
            logger.error("baseline_refresh_failed", error=str(e))
            raise LoadError(f"Published, but reloading the schedule failed: {e}") from e


# ---------------------------------------------------------------------------
# Draft summary formatting
# ---------------------------------------------------------------------------
def _slot_label(entry: ScheduleEntry | None) -> str:
    if entry is None:
        return "?"
    teacher = entry.teacher.label if entry.teacher else entry.teacher_id
    subject = entry.subject.label if entry.subject else entry.subject_id
    return f"{subject} / {teacher}"


def format_draft_summary(overlay: DraftOverlay, limit: int = 10) -> str:
    """Format pending drafts for human-readable display."""
    counts = overlay.counts()
    lines = [
        f"  Create: {counts[DraftStatus.CREATE]}  |  "
        f"Update: {counts[DraftStatus.UPDATE]}  |  "
        f"Delete: {counts[DraftStatus.DELETE]}"
    ]

    sections = (
        (DraftStatus.CREATE, "New:", "+"),
        (DraftStatus.UPDATE, "Changed:", "~"),
        (DraftStatus.DELETE, "Removed:", "-"),
    )
    for status, title, marker in sections:
        drafts = [draft for draft in overlay.entries() if draft.status is status]
        if not drafts:
            continue

        lines.append(f"  {title}")
        for draft in drafts[:limit]:
            if status is DraftStatus.UPDATE:
                label = f"{_slot_label(draft.original)} -> {_slot_label(draft.data)}"
            elif status is DraftStatus.DELETE:
                label = _slot_label(draft.original)
            else:
                label = _slot_label(draft.data)
            lines.append(f"    {marker} {draft.key}: {label}")
        if len(drafts) > limit:
            lines.append(f"    ... and {len(drafts) - limit} more")

    return "\n".join(lines)
