from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import RecordStatus


@dataclass(frozen=True)
class ClassStudent:
    """A student's membership in a class. Removal flips status to inactive."""

    assignment_id: int
    class_id: int
    student_id: int
    institute_id: int
    status: RecordStatus
    assigned_at: datetime
    assigned_by: str


@dataclass(frozen=True)
class EnrollmentStats:
    active_students: int
    removed_students: int
    total_assignments: int
