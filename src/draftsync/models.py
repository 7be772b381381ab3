"""Pydantic models for schedule and teacher-assignment drafts.

All data structures use Pydantic v2 for validation, serialization, and type safety.

Schedule rows come in two shapes: ScheduleEntity is exactly what the backend
stores, ScheduleEntry adds the teacher/subject display objects the grid needs.
Publish payloads are always built from the entity shape.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class DraftStatus(str, Enum):
    """Intent of a staged schedule draft, fixed at staging time."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class DisplayRef(BaseModel):
    """Denormalized teacher or subject name shown next to a schedule slot."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str | None = None
    name_ar: str | None = None

    @property
    def label(self) -> str:
        return self.name_ar or self.name or self.id


class ScheduleEntity(BaseModel):
    """One class-schedule row as the backend persists it.

    Identity is (class_id, academic_year, day_of_week, period_id); `id` is
    absent until the row has been created server-side.
    """

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    class_id: str
    teacher_id: str
    subject_id: str
    period_id: str
    day_of_week: int
    room_number: str | None = None
    academic_year: str
    is_active: bool = True


class ScheduleEntry(ScheduleEntity):
    """A schedule row with its display objects attached.

    Fetched rows arrive joined with `teacher` and `subject`; drafts carry them
    so the grid can render pending edits. They are dropped by to_entity().
    """

    teacher: DisplayRef | None = None
    subject: DisplayRef | None = None

    def to_entity(self) -> ScheduleEntity:
        """Map to the persistence shape, keeping only ScheduleEntity fields."""
        return ScheduleEntity.model_validate(
            self.model_dump(include=set(ScheduleEntity.model_fields))
        )

    @classmethod
    def from_entity(
        cls,
        entity: ScheduleEntity,
        teacher: DisplayRef | None = None,
        subject: DisplayRef | None = None,
    ) -> "ScheduleEntry":
        return cls(
            **entity.model_dump(include=set(ScheduleEntity.model_fields)),
            teacher=teacher,
            subject=subject,
        )


def as_schedule_entry(row: ScheduleEntity | dict[str, Any]) -> ScheduleEntry:
    """Coerce a fetched row (dict, entity or entry) into a ScheduleEntry."""
    if isinstance(row, ScheduleEntry):
        return row
    if isinstance(row, ScheduleEntity):
        return ScheduleEntry.from_entity(row)
    return ScheduleEntry.model_validate(row)


class DraftEntry(BaseModel):
    """A pending schedule mutation for one slot.

    Invariants (checked on construction):
        - create: no original, data has no id
        - update: original present, data.id == original.id
        - delete: original present, data.is_active is False
    """

    key: str
    status: DraftStatus
    data: ScheduleEntry
    original: ScheduleEntry | None = None

    @model_validator(mode="after")
    def _check_status(self) -> "DraftEntry":
        if self.status is DraftStatus.CREATE:
            if self.original is not None:
                raise ValueError("create draft cannot reference an original entry")
            if self.data.id is not None:
                raise ValueError("create draft data must not carry an id")
            return self

        if self.original is None:
            raise ValueError(f"{self.status.value} draft requires the original entry")

        if self.status is DraftStatus.UPDATE and self.data.id != self.original.id:
            raise ValueError("update draft id must match the original entry id")

        if self.status is DraftStatus.DELETE and self.data.is_active:
            raise ValueError("delete draft data must be inactive")

        return self


class SlotView(BaseModel):
    """What the grid shows for one slot: a draft, a pending removal, or baseline."""

    key: str
    entry: ScheduleEntry | None = None
    is_draft: bool = False
    is_deleted: bool = False


class PeriodSelection(BaseModel):
    """One period row from the per-day editor."""

    period_id: str
    teacher_id: str = ""
    subject_id: str = ""
    room_number: str | None = None

    @property
    def is_complete(self) -> bool:
        return bool(self.teacher_id and self.subject_id)


class TeacherAssignmentState(BaseModel):
    """Subject skills, grade levels and allowed classes for one teacher.

    Used both as the Initial State (last persisted) and the Draft State.
    `classes` maps a grade level to the class IDs selected under it.
    """

    model_config = ConfigDict(populate_by_name=True)

    subjects: list[str] = Field(default_factory=list)
    grade_levels: list[str] = Field(default_factory=list, alias="gradeLevels")
    classes: dict[str, list[str]] = Field(default_factory=dict)


class AssignmentUnit(BaseModel):
    """Full replacement assignment set for one teacher in a batch publish."""

    model_config = ConfigDict(populate_by_name=True)

    teacher_id: str = Field(alias="teacherId")
    subjects: list[str]
    grade_levels: list[str] = Field(alias="gradeLevels")
    classes: dict[str, list[str]]

    @classmethod
    def from_state(
        cls, teacher_id: str, state: TeacherAssignmentState
    ) -> "AssignmentUnit":
        return cls(
            teacher_id=teacher_id,
            subjects=list(state.subjects),
            grade_levels=list(state.grade_levels),
            classes={grade: list(ids) for grade, ids in state.classes.items()},
        )

    def to_state(self) -> TeacherAssignmentState:
        return TeacherAssignmentState(
            subjects=list(self.subjects),
            grade_levels=list(self.grade_levels),
            classes={grade: list(ids) for grade, ids in self.classes.items()},
        )

    def to_payload(self) -> dict[str, Any]:
        """Wire shape: {teacherId, subjects, gradeLevels, classes}."""
        return self.model_dump(by_alias=True)


class TeacherAssignmentCandidate(BaseModel):
    """A teacher-subject assignment, optionally scoped to one class."""

    id: str | None = None
    teacher_id: str | None = None
    class_id: str | None = None
    subject: DisplayRef | None = None


class TeacherSummary(BaseModel):
    id: str
    name: str | None = None
    grade_levels: list[str] = Field(default_factory=list)

    def to_ref(self) -> DisplayRef:
        return DisplayRef(id=self.id, name=self.name)


class ClassSummary(BaseModel):
    id: str
    name: str
    section: str | None = None
    grade_level: str | None = None
    is_active: bool = True


class SkippedOperation(BaseModel):
    """A draft left out of a publish because it broke a staging invariant."""

    key: str
    reason: str


class PublishResult(BaseModel):
    """Outcome of a schedule publish."""

    created: int = 0
    updated: int = 0
    deleted: int = 0
    skipped: list[SkippedOperation] = Field(default_factory=list)

    @property
    def submitted(self) -> int:
        return self.created + self.updated + self.deleted


class BatchPublishResult(BaseModel):
    """Outcome of a multi-teacher assignment publish."""

    published: list[str] = Field(default_factory=list)
    skipped: list[SkippedOperation] = Field(default_factory=list)
