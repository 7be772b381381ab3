from draftsync.baseline import slot_key
from draftsync.detector import (
    assignment_is_dirty,
    compare_assignment_states,
    dirty_teachers,
    schedule_has_changes,
)
from draftsync.models import TeacherAssignmentState


def _state(subjects=(), grade_levels=(), classes=None):
    return TeacherAssignmentState(
        subjects=list(subjects),
        grade_levels=list(grade_levels),
        classes=classes or {},
    )


def test_schedule_has_changes_follows_overlay(overlay, baseline, sample_entry):
    assert not schedule_has_changes(overlay)

    overlay.mark_deleted(slot_key(1, "p1"), sample_entry)
    assert schedule_has_changes(overlay)

    overlay.revert(slot_key(1, "p1"))
    assert not schedule_has_changes(overlay)


def test_selection_order_does_not_matter():
    initial = _state(["math", "physics"], ["Grade5", "Grade6"], {"Grade5": ["5A", "5B"]})
    draft = _state(["physics", "math"], ["Grade6", "Grade5"], {"Grade5": ["5B", "5A"]})

    assert not assignment_is_dirty(initial, draft)


def test_empty_class_list_equals_missing_grade():
    initial = _state(["math"], ["Grade5"], {})
    draft = _state(["math"], ["Grade5"], {"Grade5": []})

    assert not assignment_is_dirty(initial, draft)


def test_compare_reports_changed_parts():
    initial = _state(["math"], ["Grade5"], {"Grade5": ["5A"]})
    draft = _state(["math"], ["Grade5"], {"Grade5": ["5A", "5B"]})

    changes = compare_assignment_states(initial, draft)

    assert not changes.subjects
    assert not changes.grade_levels
    assert changes.classes
    assert changes.any


def test_edit_and_undo_is_not_dirty():
    initial = _state(["math"])
    draft = _state(["math", "art"])
    draft = _state([s for s in draft.subjects if s != "art"])

    assert not assignment_is_dirty(initial, draft)


def test_dirty_teachers_only_reports_loaded_teachers():
    initial_states = {
        "t001": _state(["math"]),
        "t002": _state(["physics"]),
    }
    draft_states = {
        "t001": _state(["math", "art"]),
        "t002": _state(["physics"]),
        "t003": _state(["music"]),
    }

    assert dirty_teachers(initial_states, draft_states) == ["t001"]
