"""Batch coordinator for the teacher-assignment editor.

Keeps an Initial State and a Draft State per opened teacher and publishes every
dirty teacher's full draft in one remote call. The call is all-or-nothing: on
failure no Initial State moves; on success every published teacher is resynced
and their cached assignment data is invalidated.
"""

from collections.abc import Awaitable, Callable, Mapping
from datetime import timedelta
from typing import Any

from draftsync.assignments import group_classes_by_grade, integrity_problems
from draftsync.cache import CacheKeys, ReferenceCache
from draftsync.config import get_config
from draftsync.detector import AssignmentChanges, compare_assignment_states, dirty_teachers
from draftsync.errors import LoadError, PublishInProgressError, PublishRejectedError
from draftsync.logging import get_logger
from draftsync.models import (
    AssignmentUnit,
    BatchPublishResult,
    ClassSummary,
    SkippedOperation,
    TeacherAssignmentState,
)

logger = get_logger(__name__)

FetchAssignmentsFn = Callable[[str], Awaitable[Any]]
PublishAssignmentsFn = Callable[[list[dict[str, Any]]], Awaitable[Any]]
FetchClassesFn = Callable[[], Awaitable[Any]]

DraftUpdate = (
    TeacherAssignmentState
    | Callable[[TeacherAssignmentState], TeacherAssignmentState]
)


class AssignmentBatch:
    """Draft assignment state for many teachers, published together."""

    def __init__(
        self,
        *,
        fetch_assignments_fn: FetchAssignmentsFn,
        publish_assignments_fn: PublishAssignmentsFn,
        fetch_classes_by_grade_fn: FetchClassesFn,
        cache: ReferenceCache | None = None,
        roster_ttl: timedelta | None = None,
    ) -> None:
        """Initialize AssignmentBatch.

        Args:
            fetch_assignments_fn: Coroutine teacher_id -> {subjects, gradeLevels, classes}.
            publish_assignments_fn: Coroutine taking the list of unit payloads;
                raises on failure.
            fetch_classes_by_grade_fn: Coroutine returning the class roster, either
                grouped {grade: [class, ...]} or as a flat list of classes.
            cache: Reference cache; a private one is created if omitted.
            roster_ttl: TTL for the class roster. Defaults to
                DRAFTSYNC_CACHE_ROSTER_TTL_SECONDS.
        """
        self.cache = cache if cache is not None else ReferenceCache()
        self.roster_ttl = (
            roster_ttl
            if roster_ttl is not None
            else timedelta(seconds=get_config().cache_roster_ttl_seconds)
        )

        self._fetch_assignments_fn = fetch_assignments_fn
        self._publish_assignments_fn = publish_assignments_fn
        self._fetch_classes_fn = fetch_classes_by_grade_fn

        self._initial: dict[str, TeacherAssignmentState] = {}
        self._drafts: dict[str, TeacherAssignmentState] = {}
        self._in_flight = False

    # === loading ===

    def _cached_state(self, teacher_id: str) -> TeacherAssignmentState | None:
        subjects = self.cache.get(CacheKeys.teacher_subjects(teacher_id))
        grade_levels = self.cache.get(CacheKeys.teacher_grade_levels(teacher_id))
        classes = self.cache.get(CacheKeys.teacher_classes(teacher_id))

        if subjects is None or grade_levels is None or classes is None:
            return None

        return TeacherAssignmentState(
            subjects=subjects, grade_levels=grade_levels, classes=classes
        )

    def _cache_state(self, teacher_id: str, state: TeacherAssignmentState) -> None:
        self.cache.set(CacheKeys.teacher_subjects(teacher_id), state.subjects)
        self.cache.set(CacheKeys.teacher_grade_levels(teacher_id), state.grade_levels)
        self.cache.set(CacheKeys.teacher_classes(teacher_id), state.classes)

    async def open_teacher(self, teacher_id: str) -> TeacherAssignmentState:
        """Load a teacher's assignments and return their current draft.

        A teacher already opened in this session keeps its draft. Otherwise the
        baseline comes from the cache when all three parts are cached, or from
        one fetch that then populates the cache.

        Raises:
            LoadError: If the fetch fails; nothing is installed for the teacher.
        """
        if teacher_id in self._initial:
            return self.draft_state(teacher_id)

        state = self._cached_state(teacher_id)
        if state is None:
            try:
                raw = await self._fetch_assignments_fn(teacher_id)
                state = TeacherAssignmentState.model_validate(raw)
            except LoadError:
                raise
            except Exception as e:
                logger.warning("teacher_assignments_load_failed", teacher_id=teacher_id, error=str(e))
                raise LoadError(f"Failed to load assignments for teacher {teacher_id}: {e}") from e

            self._cache_state(teacher_id, state)
            logger.debug("teacher_assignments_fetched", teacher_id=teacher_id)
        else:
            logger.debug("teacher_assignments_from_cache", teacher_id=teacher_id)

        self._initial[teacher_id] = state.model_copy(deep=True)
        self._drafts[teacher_id] = state.model_copy(deep=True)
        return self.draft_state(teacher_id)

    async def class_roster(self) -> dict[str, list[ClassSummary]]:
        """Active classes grouped by grade level, cached with the roster TTL.

        Raises:
            LoadError: If the roster fetch fails.
        """
        return await self.cache.get_or_fetch(
            CacheKeys.CLASSES, self._fetch_roster, ttl=self.roster_ttl
        )

    async def _fetch_roster(self) -> dict[str, list[ClassSummary]]:
        raw = await self._fetch_classes_fn()
        if not isinstance(raw, Mapping):
            return group_classes_by_grade(raw)

        flat = []
        for grade, classes in raw.items():
            for item in classes:
                cls = item if isinstance(item, ClassSummary) else ClassSummary.model_validate(item)
                flat.append(cls.model_copy(update={"grade_level": cls.grade_level or grade}))
        return group_classes_by_grade(flat)

    # === state access ===

    def _require(self, teacher_id: str) -> None:
        if teacher_id not in self._initial:
            raise KeyError(f"Teacher {teacher_id!r} has not been opened")

    def initial_state(self, teacher_id: str) -> TeacherAssignmentState:
        self._require(teacher_id)
        return self._initial[teacher_id].model_copy(deep=True)

    def draft_state(self, teacher_id: str) -> TeacherAssignmentState:
        self._require(teacher_id)
        return self._drafts[teacher_id].model_copy(deep=True)

    def update_draft(self, teacher_id: str, update: DraftUpdate) -> TeacherAssignmentState:
        """Replace a teacher's draft, or apply a function to the current one.

        Args:
            teacher_id: An opened teacher.
            update: A new TeacherAssignmentState, or a callable taking the current
                draft and returning the new one (e.g. a function from
                draftsync.assignments bound with functools.partial).

        Returns:
            TeacherAssignmentState: The new draft.
        """
        self._require(teacher_id)

        new_state = update(self.draft_state(teacher_id)) if callable(update) else update
        new_state = TeacherAssignmentState.model_validate(new_state).model_copy(deep=True)

        self._drafts[teacher_id] = new_state
        return new_state.model_copy(deep=True)

    # === change detection ===

    def dirty_teachers(self) -> list[str]:
        return dirty_teachers(self._initial, self._drafts)

    def changes_for(self, teacher_id: str) -> AssignmentChanges:
        self._require(teacher_id)
        return compare_assignment_states(self._initial[teacher_id], self._drafts[teacher_id])

    @property
    def has_changes(self) -> bool:
        return bool(self.dirty_teachers())

    @property
    def is_publishing(self) -> bool:
        return self._in_flight

    # === publish / discard ===

    async def publish(self) -> BatchPublishResult:
        """Publish every dirty teacher's full draft in one call.

        Teachers whose draft has classes under unselected grade levels are
        skipped and reported; they stay dirty.

        Returns:
            BatchPublishResult: Published teacher IDs and skipped teachers.

        Raises:
            PublishInProgressError: If a batch publish is already running.
            PublishRejectedError: If the collaborator rejects the batch. No
                teacher's Initial State changes.
        """
        if self._in_flight:
            raise PublishInProgressError("An assignment batch publish is already in progress")

        units: list[AssignmentUnit] = []
        skipped: list[SkippedOperation] = []

        for teacher_id in self.dirty_teachers():
            draft = self._drafts[teacher_id]
            orphaned = integrity_problems(draft)
            if orphaned:
                logger.error(
                    "assignment_draft_integrity_violation",
                    teacher_id=teacher_id,
                    grade_levels=orphaned,
                )
                skipped.append(
                    SkippedOperation(
                        key=teacher_id,
                        reason=f"classes selected under unselected grade levels: {', '.join(orphaned)}",
                    )
                )
                continue

            units.append(AssignmentUnit.from_state(teacher_id, draft))

        if not units:
            return BatchPublishResult(skipped=skipped)

        self._in_flight = True
        try:
            await self._publish_assignments_fn([unit.to_payload() for unit in units])
        except Exception as e:
            logger.warning("assignment_batch_rejected", teachers=len(units), error=str(e))
            raise PublishRejectedError(f"Assignment batch publish failed: {e}") from e
        finally:
            self._in_flight = False

        for unit in units:
            self._initial[unit.teacher_id] = unit.to_state()
            for key in CacheKeys.teacher_keys(unit.teacher_id):
                self.cache.invalidate(key)

        published = [unit.teacher_id for unit in units]
        logger.info(
            "assignment_batch_published", teachers=len(published), skipped=len(skipped)
        )
        return BatchPublishResult(published=published, skipped=skipped)

    def discard_teacher(self, teacher_id: str) -> None:
        """Reset one teacher's draft to their Initial State."""
        self._require(teacher_id)
        self._drafts[teacher_id] = self._initial[teacher_id].model_copy(deep=True)

    def discard_all(self) -> list[str]:
        """Reset every dirty teacher's draft. Caches are left alone.

        Returns:
            list[str]: Teachers whose drafts were reset.
        """
        reset = self.dirty_teachers()
        for teacher_id in reset:
            self._drafts[teacher_id] = self._initial[teacher_id].model_copy(deep=True)

        logger.info("assignment_drafts_discarded", teachers=len(reset))
        return reset
