"""Editing operations for a teacher's assignment Draft State.

Every function takes a TeacherAssignmentState and returns a new one; inputs are
never mutated. Class selections always live under a selected grade level:
deselecting a grade drops its classes, and selecting a class under an
unselected grade raises IntegrityViolation.
"""

import re
from collections.abc import Iterable
from typing import Any

from draftsync.errors import IntegrityViolation
from draftsync.models import ClassSummary, TeacherAssignmentState

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _copy(state: TeacherAssignmentState) -> TeacherAssignmentState:
    return state.model_copy(deep=True)


# === subjects ===


def toggle_subject(
    state: TeacherAssignmentState, subject_id: str, checked: bool
) -> TeacherAssignmentState:
    new = _copy(state)

    if checked:
        if subject_id not in new.subjects:
            new.subjects.append(subject_id)
    else:
        new.subjects = [sid for sid in new.subjects if sid != subject_id]

    return new


def select_all_subjects(
    state: TeacherAssignmentState, subject_ids: Iterable[str]
) -> TeacherAssignmentState:
    new = _copy(state)
    new.subjects = list(dict.fromkeys(subject_ids))
    return new


def clear_subjects(state: TeacherAssignmentState) -> TeacherAssignmentState:
    new = _copy(state)
    new.subjects = []
    return new


# === grade levels ===


def toggle_grade_level(
    state: TeacherAssignmentState, grade_level: str, checked: bool
) -> TeacherAssignmentState:
    """Select or deselect a grade level.

    Selecting opens an empty class list for the grade. Deselecting removes the
    grade together with every class selected under it, so re-selecting later
    starts from an empty list.
    """
    new = _copy(state)

    if checked:
        if grade_level not in new.grade_levels:
            new.grade_levels.append(grade_level)
        new.classes.setdefault(grade_level, [])
    else:
        new.grade_levels = [g for g in new.grade_levels if g != grade_level]
        new.classes.pop(grade_level, None)

    return new


def select_all_grade_levels(
    state: TeacherAssignmentState, grade_levels: Iterable[str]
) -> TeacherAssignmentState:
    """Select exactly `grade_levels`, keeping class selections of grades that stay."""
    new = _copy(state)
    new.grade_levels = list(dict.fromkeys(grade_levels))
    new.classes = {
        grade: new.classes.get(grade, []) for grade in new.grade_levels
    }
    return new


def clear_grade_levels(state: TeacherAssignmentState) -> TeacherAssignmentState:
    new = _copy(state)
    new.grade_levels = []
    new.classes = {}
    return new


# === classes ===


def toggle_class(
    state: TeacherAssignmentState, grade_level: str, class_id: str, checked: bool
) -> TeacherAssignmentState:
    """Select or deselect one class under a grade level.

    Raises:
        IntegrityViolation: If selecting under a grade level that is not selected.
    """
    if checked and grade_level not in state.grade_levels:
        raise IntegrityViolation(
            f"Cannot select class {class_id!r}: grade level {grade_level!r} is not selected"
        )

    new = _copy(state)
    selected = new.classes.get(grade_level, [])

    if checked:
        if class_id not in selected:
            new.classes[grade_level] = [*selected, class_id]
    elif grade_level in new.classes:
        new.classes[grade_level] = [cid for cid in selected if cid != class_id]

    return new


def integrity_problems(state: TeacherAssignmentState) -> list[str]:
    """Grade levels that have class selections but are not themselves selected."""
    selected = set(state.grade_levels)
    return [
        grade for grade, ids in state.classes.items() if ids and grade not in selected
    ]


# === class roster ===


def _class_sort_key(cls: ClassSummary) -> tuple[int, str]:
    # "5-2" sorts by its section number, "6" or "6B" by the leading number
    parts = cls.name.split("-")
    candidate = parts[1] if len(parts) > 1 and parts[1] else cls.name
    match = _LEADING_INT.match(candidate)
    return (int(match.group(1)) if match else 0, cls.name)


def group_classes_by_grade(
    classes: Iterable[ClassSummary | dict[str, Any]],
) -> dict[str, list[ClassSummary]]:
    """Group active classes by grade level, sorted within each grade.

    Classes without a grade level are left out.
    """
    grouped: dict[str, list[ClassSummary]] = {}

    for raw in classes:
        cls = raw if isinstance(raw, ClassSummary) else ClassSummary.model_validate(raw)
        if not cls.is_active or not cls.grade_level:
            continue
        grouped.setdefault(cls.grade_level, []).append(cls)

    for grade in grouped:
        grouped[grade].sort(key=_class_sort_key)

    return grouped
