"""Class-schedule editor session.

One ScheduleEditor backs one open schedule grid (a class in an academic year).
It owns the baseline, the draft overlay and a reference cache for teacher
assignment candidates, and wires the publish step to the persistence
collaborators injected at construction.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import Any

from draftsync.baseline import BaselineStore, slot_key
from draftsync.cache import CacheKeys, ReferenceCache
from draftsync.candidates import auto_subject, eligible_teachers, subjects_for_class
from draftsync.detector import schedule_has_changes
from draftsync.errors import LoadError
from draftsync.logging import get_logger
from draftsync.models import (
    DisplayRef,
    DraftEntry,
    PeriodSelection,
    PublishResult,
    ScheduleEntry,
    SlotView,
    TeacherAssignmentCandidate,
    TeacherSummary,
    as_schedule_entry,
)
from draftsync.overlay import DraftOverlay
from draftsync.reconciler import SchedulePublisher, format_draft_summary

logger = get_logger(__name__)

FetchScheduleFn = Callable[[str, str], Awaitable[Iterable[Any]]]
PublishScheduleFn = Callable[[list[dict[str, Any]]], Awaitable[Any]]
FetchCandidatesFn = Callable[[str], Awaitable[Iterable[Any]]]


class ScheduleEditor:
    """Draft-based editor for one class's weekly schedule."""

    def __init__(
        self,
        class_id: str,
        academic_year: str,
        *,
        fetch_schedule_fn: FetchScheduleFn,
        publish_schedule_fn: PublishScheduleFn,
        fetch_candidates_fn: FetchCandidatesFn,
        class_grade_level: str | None = None,
        teachers: Iterable[TeacherSummary] = (),
        subjects: Iterable[DisplayRef] = (),
        cache: ReferenceCache | None = None,
    ) -> None:
        """Initialize ScheduleEditor.

        Args:
            class_id: Class whose schedule is edited.
            academic_year: Academic year the schedule belongs to.
            fetch_schedule_fn: Coroutine (class_id, academic_year) -> schedule rows.
            publish_schedule_fn: Coroutine taking the operation list; raises on failure.
            fetch_candidates_fn: Coroutine teacher_id -> assignment candidates.
            class_grade_level: Grade level of the class, used to filter teachers.
            teachers: Teacher directory for display names and eligibility.
            subjects: Subject directory for display names.
            cache: Reference cache; a private one is created if omitted.
        """
        self.class_id = class_id
        self.academic_year = academic_year
        self.class_grade_level = class_grade_level
        self.teachers = {teacher.id: teacher for teacher in teachers}
        self.subjects = {subject.id: subject for subject in subjects}
        self.cache = cache if cache is not None else ReferenceCache()

        self.baseline = BaselineStore()
        self.overlay = DraftOverlay()

        self._fetch_schedule_fn = fetch_schedule_fn
        self._fetch_candidates_fn = fetch_candidates_fn
        self._publisher = SchedulePublisher(
            self.overlay,
            self.baseline,
            publish_fn=publish_schedule_fn,
            refresh_fn=self._fetch_baseline,
        )

    # === loading ===

    async def _fetch_baseline(self) -> list[ScheduleEntry]:
        rows = await self._fetch_schedule_fn(self.class_id, self.academic_year)
        return [as_schedule_entry(row) for row in rows]

    async def load(self) -> None:
        """Fetch the baseline and drop any drafts staged against the old one.

        Raises:
            LoadError: If the fetch fails; the previous baseline stays in place.
        """
        try:
            entries = await self._fetch_baseline()
        except Exception as e:
            logger.warning(
                "schedule_load_failed",
                class_id=self.class_id,
                academic_year=self.academic_year,
                error=str(e),
            )
            raise LoadError(f"Failed to load schedule for class {self.class_id}: {e}") from e

        self.baseline.replace(entries)
        self.overlay.discard_all()
        logger.info(
            "schedule_loaded",
            class_id=self.class_id,
            academic_year=self.academic_year,
            entries=len(entries),
        )

    # === staging ===

    def _build_entry(self, day: int, selection: PeriodSelection) -> ScheduleEntry:
        teacher = self.teachers.get(selection.teacher_id)
        return ScheduleEntry(
            class_id=self.class_id,
            teacher_id=selection.teacher_id,
            subject_id=selection.subject_id,
            period_id=selection.period_id,
            day_of_week=day,
            room_number=selection.room_number or None,
            academic_year=self.academic_year,
            is_active=True,
            teacher=teacher.to_ref() if teacher else None,
            subject=self.subjects.get(selection.subject_id),
        )

    def stage_slot(self, day: int, selection: PeriodSelection) -> DraftEntry | None:
        """Stage one period of a day.

        Rows without teacher and subject are ignored, and a row matching the
        baseline clears any draft at its slot instead of staging one.
        """
        if not selection.is_complete:
            logger.debug(
                "incomplete_selection_ignored", day=day, period_id=selection.period_id
            )
            return None

        key = slot_key(day, selection.period_id)
        return self.overlay.stage(
            key, self._build_entry(day, selection), self.baseline.lookup
        )

    def save_day(self, day: int, selections: Iterable[PeriodSelection]) -> list[str]:
        """Stage every complete period row of a day.

        Returns:
            list[str]: Slot keys that were staged.
        """
        staged = []
        for selection in selections:
            draft = self.stage_slot(day, selection)
            if draft is not None:
                staged.append(draft.key)

        logger.info("day_drafts_saved", day=day, staged=len(staged))
        return staged

    def remove_slot(self, key: str) -> DraftEntry | None:
        """Mark the row at `key` for removal (or drop an uncommitted create)."""
        return self.overlay.mark_deleted(key, self.baseline.lookup(key))

    def revert(self, key: str) -> None:
        self.overlay.revert(key)

    def discard_all(self) -> None:
        self.overlay.discard_all()
        logger.info("schedule_drafts_discarded", class_id=self.class_id)

    def resolve(self, day: int, period_id: str) -> SlotView:
        return self.overlay.resolve(slot_key(day, period_id), self.baseline.lookup)

    @property
    def has_changes(self) -> bool:
        return schedule_has_changes(self.overlay)

    @property
    def draft_count(self) -> int:
        return len(self.overlay)

    def summary(self) -> str:
        return format_draft_summary(self.overlay)

    # === reference data ===

    async def _fetch_candidates(self, teacher_id: str) -> list[TeacherAssignmentCandidate]:
        rows = await self._fetch_candidates_fn(teacher_id)
        return [TeacherAssignmentCandidate.model_validate(row) for row in rows]

    async def subjects_for_teacher(self, teacher_id: str) -> list[DisplayRef]:
        """Subjects selectable for `teacher_id` in this class.

        Raises:
            LoadError: If the candidates fetch fails.
        """
        candidates = await self.cache.get_or_fetch(
            CacheKeys.teacher_assignments(teacher_id),
            lambda: self._fetch_candidates(teacher_id),
        )
        return subjects_for_class(candidates, self.class_id)

    async def default_subject(self, teacher_id: str) -> DisplayRef | None:
        """The subject to preselect for a teacher, if there is exactly one."""
        return auto_subject(await self.subjects_for_teacher(teacher_id))

    def eligible_teachers(self) -> list[TeacherSummary]:
        return eligible_teachers(self.teachers.values(), self.class_grade_level)

    # === publishing ===

    @property
    def is_publishing(self) -> bool:
        return self._publisher.is_publishing

    async def publish(self) -> PublishResult:
        """Publish all drafts; see SchedulePublisher.publish for failure modes."""
        return await self._publisher.publish()
