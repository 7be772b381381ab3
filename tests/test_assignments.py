import pytest

from draftsync.assignments import (
    clear_grade_levels,
    clear_subjects,
    group_classes_by_grade,
    integrity_problems,
    select_all_grade_levels,
    select_all_subjects,
    toggle_class,
    toggle_grade_level,
    toggle_subject,
)
from draftsync.errors import IntegrityViolation
from draftsync.models import TeacherAssignmentState


@pytest.fixture
def sample_state():
    return TeacherAssignmentState(
        subjects=["math"],
        grade_levels=["Grade5", "Grade6"],
        classes={"Grade5": ["5A", "5B"], "Grade6": ["6A"]},
    )


def test_toggle_subject(sample_state):
    added = toggle_subject(sample_state, "physics", True)
    again = toggle_subject(added, "physics", True)
    removed = toggle_subject(again, "math", False)

    assert added.subjects == ["math", "physics"]
    assert again.subjects == ["math", "physics"]
    assert removed.subjects == ["physics"]
    assert sample_state.subjects == ["math"]


def test_select_all_and_clear_subjects(sample_state):
    selected = select_all_subjects(sample_state, ["math", "physics", "math"])

    assert selected.subjects == ["math", "physics"]
    assert clear_subjects(selected).subjects == []


def test_deselecting_grade_drops_its_classes(sample_state):
    state = toggle_grade_level(sample_state, "Grade5", False)

    assert state.grade_levels == ["Grade6"]
    assert "Grade5" not in state.classes
    assert state.classes == {"Grade6": ["6A"]}


def test_reselecting_grade_starts_empty(sample_state):
    state = toggle_grade_level(sample_state, "Grade5", False)
    state = toggle_grade_level(state, "Grade5", True)

    assert "Grade5" in state.grade_levels
    assert state.classes["Grade5"] == []


def test_selecting_class_under_unselected_grade_raises(sample_state):
    with pytest.raises(IntegrityViolation):
        toggle_class(sample_state, "Grade7", "7A", True)


def test_toggle_class(sample_state):
    state = toggle_class(sample_state, "Grade6", "6B", True)
    state = toggle_class(state, "Grade5", "5A", False)

    assert state.classes == {"Grade5": ["5B"], "Grade6": ["6A", "6B"]}
    assert sample_state.classes == {"Grade5": ["5A", "5B"], "Grade6": ["6A"]}


def test_select_all_grade_levels_keeps_remaining_classes(sample_state):
    state = select_all_grade_levels(sample_state, ["Grade6", "Grade7"])

    assert state.grade_levels == ["Grade6", "Grade7"]
    assert state.classes == {"Grade6": ["6A"], "Grade7": []}


def test_clear_grade_levels(sample_state):
    state = clear_grade_levels(sample_state)

    assert state.grade_levels == []
    assert state.classes == {}


def test_integrity_problems():
    state = TeacherAssignmentState(
        grade_levels=["Grade5"],
        classes={"Grade5": ["5A"], "Grade6": ["6A"], "Grade7": []},
    )

    assert integrity_problems(state) == ["Grade6"]


def test_group_classes_by_grade_sorts_numerically():
    classes = [
        {"id": "c3", "name": "5-10", "grade_level": "Grade5"},
        {"id": "c1", "name": "5-2", "grade_level": "Grade5"},
        {"id": "c2", "name": "5-1", "grade_level": "Grade5"},
        {"id": "c4", "name": "6-1", "grade_level": "Grade6"},
        {"id": "c5", "name": "5-3", "grade_level": "Grade5", "is_active": False},
        {"id": "c6", "name": "Annex", "grade_level": None},
    ]

    grouped = group_classes_by_grade(classes)

    assert list(grouped) == ["Grade5", "Grade6"]
    assert [c.id for c in grouped["Grade5"]] == ["c2", "c1", "c3"]
    assert [c.id for c in grouped["Grade6"]] == ["c4"]
