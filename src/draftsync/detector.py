"""Change detection for schedule drafts and teacher assignment drafts.

Pure comparisons that drive the publish/discard affordances and decide which
teachers go into a batch publish. Assignment comparisons are by value with set
semantics, so selection order and edit history never make a teacher dirty.
"""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel

from draftsync.models import TeacherAssignmentState
from draftsync.overlay import DraftOverlay


def schedule_has_changes(overlay: DraftOverlay) -> bool:
    """Any staged draft, whatever its status, counts as a change."""
    return not overlay.is_empty()


class AssignmentChanges(BaseModel):
    """Which parts of a teacher's assignment draft differ from baseline."""

    subjects: bool = False
    grade_levels: bool = False
    classes: bool = False

    @property
    def any(self) -> bool:
        return self.subjects or self.grade_levels or self.classes


def _class_sets(classes: Mapping[str, Iterable[str]]) -> dict[str, frozenset[str]]:
    # a grade with no selected classes is the same as no entry for that grade
    sets = {grade: frozenset(ids) for grade, ids in classes.items()}
    return {grade: ids for grade, ids in sets.items() if ids}


def compare_assignment_states(
    initial: TeacherAssignmentState,
    draft: TeacherAssignmentState,
) -> AssignmentChanges:
    return AssignmentChanges(
        subjects=set(initial.subjects) != set(draft.subjects),
        grade_levels=set(initial.grade_levels) != set(draft.grade_levels),
        classes=_class_sets(initial.classes) != _class_sets(draft.classes),
    )


def assignment_is_dirty(
    initial: TeacherAssignmentState,
    draft: TeacherAssignmentState,
) -> bool:
    return compare_assignment_states(initial, draft).any


def dirty_teachers(
    initial_states: Mapping[str, TeacherAssignmentState],
    draft_states: Mapping[str, TeacherAssignmentState],
) -> list[str]:
    """Teacher IDs whose draft differs from their loaded initial state.

    Teachers without an initial state are never reported.
    """
    dirty = []

    for teacher_id, draft in draft_states.items():
        initial = initial_states.get(teacher_id)
        if initial is None:
            continue

        if assignment_is_dirty(initial, draft):
            dirty.append(teacher_id)

    return dirty
