from datetime import datetime, timedelta, timezone

import pytest

from draftsync.baseline import BaselineStore
from draftsync.cache import ReferenceCache
from draftsync.config import reset_config
from draftsync.models import DisplayRef, ScheduleEntry, TeacherSummary
from draftsync.overlay import DraftOverlay


class FakeClock:
    def __init__(self):
        self.now = datetime(2025, 9, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture(autouse=True)
def fresh_config():
    reset_config()
    yield
    reset_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ReferenceCache(default_ttl=timedelta(minutes=5), clock=clock)


@pytest.fixture
def sample_entry():
    return ScheduleEntry(
        id="sch001",
        class_id="c001",
        teacher_id="t001",
        subject_id="sub001",
        period_id="p1",
        day_of_week=1,
        room_number="101",
        academic_year="2025-2026",
        teacher=DisplayRef(id="t001", name="Amal Salem"),
        subject=DisplayRef(id="sub001", name="Mathematics"),
    )


@pytest.fixture
def sample_new_entry():
    return ScheduleEntry(
        class_id="c001",
        teacher_id="t002",
        subject_id="sub002",
        period_id="p2",
        day_of_week=1,
        academic_year="2025-2026",
        teacher=DisplayRef(id="t002", name="Omar Idris"),
        subject=DisplayRef(id="sub002", name="Physics"),
    )


@pytest.fixture
def baseline(sample_entry):
    return BaselineStore([sample_entry])


@pytest.fixture
def overlay():
    return DraftOverlay()


@pytest.fixture
def sample_teachers():
    return [
        TeacherSummary(id="t001", name="Amal Salem", grade_levels=["Grade5"]),
        TeacherSummary(id="t002", name="Omar Idris", grade_levels=["Grade5", "Grade6"]),
        TeacherSummary(id="t003", name="Huda Nasser", grade_levels=[]),
    ]


@pytest.fixture
def sample_subjects():
    return [
        DisplayRef(id="sub001", name="Mathematics"),
        DisplayRef(id="sub002", name="Physics"),
    ]
