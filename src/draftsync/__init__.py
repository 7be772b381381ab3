"""Draft-based reconciliation engine for the school admin console.

Stages schedule and teacher-assignment edits as drafts on top of a persisted
baseline, publishes the minimal payload in one call, and reconciles the
baseline afterwards. A short-lived reference cache keeps reopened editors from
refetching teacher data.
"""

from draftsync.baseline import BaselineStore, slot_key
from draftsync.batch import AssignmentBatch
from draftsync.cache import CacheKeys, ReferenceCache
from draftsync.errors import (
    DraftSyncError,
    IntegrityViolation,
    LoadError,
    PublishInProgressError,
    PublishRejectedError,
    RecoverableError,
)
from draftsync.models import (
    AssignmentUnit,
    DraftEntry,
    DraftStatus,
    PeriodSelection,
    ScheduleEntity,
    ScheduleEntry,
    SlotView,
    TeacherAssignmentState,
)
from draftsync.overlay import DraftOverlay
from draftsync.reconciler import SchedulePublisher, build_operations
from draftsync.schedule_editor import ScheduleEditor

__all__ = [
    "AssignmentBatch",
    "AssignmentUnit",
    "BaselineStore",
    "CacheKeys",
    "DraftEntry",
    "DraftOverlay",
    "DraftStatus",
    "DraftSyncError",
    "IntegrityViolation",
    "LoadError",
    "PeriodSelection",
    "PublishInProgressError",
    "PublishRejectedError",
    "RecoverableError",
    "ReferenceCache",
    "ScheduleEditor",
    "ScheduleEntity",
    "ScheduleEntry",
    "SchedulePublisher",
    "SlotView",
    "TeacherAssignmentState",
    "build_operations",
    "slot_key",
]
