from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, MarkingMethod, SessionStatus


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one class meeting during which students are marked.

    ``student_ids`` is the enrollment snapshot taken when the session
    started; QR scans are only accepted from those students.
    """

    session_id: int
    class_id: int
    teacher_id: int
    student_ids: tuple[int, ...]
    session_date: date
    start_time: datetime
    status: SessionStatus
    qr_code: str
    qr_expiry: datetime
    end_time: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class AttendanceRecord:
    record_id: int
    session_id: int
    class_id: Optional[int]
    student_id: int
    status: AttendanceStatus
    marked_at: datetime
    marked_by: MarkingMethod
    location: Optional[str] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class SessionSummary:
    session: AttendanceSession
    total_students: int
    present_count: int
    absent_count: int
    late_count: int
    unmarked_count: int
    attendance_rate: int
    records: tuple[AttendanceRecord, ...]


@dataclass(frozen=True)
class AttendanceStatistics:
    total_sessions: int
    total_students: int
    average_attendance: int
    present_count: int
    absent_count: int
    late_count: int
