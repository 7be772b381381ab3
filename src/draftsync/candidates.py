"""Selectable teachers and subjects for a class schedule slot."""

from collections.abc import Iterable

from draftsync.models import DisplayRef, TeacherAssignmentCandidate, TeacherSummary


def subjects_for_class(
    candidates: Iterable[TeacherAssignmentCandidate],
    class_id: str,
) -> list[DisplayRef]:
    """Subjects a teacher may teach in `class_id`.

    Class-specific assignments come first, followed by generic (class-less)
    assignments for subjects not already listed. A teacher with no assignment
    for this class falls back to the generic ones only. Each subject appears once.
    """
    candidates = [c for c in candidates if c.subject is not None and c.subject.id]

    class_specific = [c for c in candidates if c.class_id == class_id]
    generic = [c for c in candidates if not c.class_id]

    subjects: dict[str, DisplayRef] = {}
    for candidate in (*class_specific, *generic):
        subjects.setdefault(candidate.subject.id, candidate.subject)

    return list(subjects.values())


def auto_subject(subjects: list[DisplayRef]) -> DisplayRef | None:
    """The subject to preselect when a teacher has exactly one."""
    return subjects[0] if len(subjects) == 1 else None


def eligible_teachers(
    teachers: Iterable[TeacherSummary],
    class_grade_level: str | None,
) -> list[TeacherSummary]:
    """Teachers allowed to teach a class of the given grade level.

    With no grade level every teacher is eligible; otherwise only teachers
    whose grade levels include it (teachers with none are excluded).
    """
    if not class_grade_level:
        return list(teachers)

    return [t for t in teachers if class_grade_level in t.grade_levels]
