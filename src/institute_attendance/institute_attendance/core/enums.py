from __future__ import annotations

from enum import Enum


class RecordStatus(str, Enum):
    """Soft-delete flag shared by teachers, students, classes and enrollments."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class SessionStatus(str, Enum):
    """Lifecycle of an attendance session."""

    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    """Status stored on an attendance record."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"


class MarkingMethod(str, Enum):
    QR = "qr"
    MANUAL = "manual"
    AUTO = "auto"
