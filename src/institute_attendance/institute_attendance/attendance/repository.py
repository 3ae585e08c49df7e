from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus, MarkingMethod
from .model import AttendanceRecord, AttendanceSession


class AttendanceRepository(Protocol):
    def create_session(
        self,
        *,
        class_id: int,
        teacher_id: int,
        student_ids: Sequence[int],
        session_date: date,
        start_time: datetime,
        qr_expiry: datetime,
    ) -> int:
        """Insert an active session with an empty QR code; returns its id."""
        raise NotImplementedError

    def get_session(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def get_active_session(self, class_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def update_session(self, session_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError

    def list_sessions_for_class(
        self,
        class_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSession]:
        """Newest first."""
        raise NotImplementedError

    def find_record(self, *, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def create_record(
        self,
        *,
        session_id: int,
        class_id: Optional[int],
        student_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def create_records(
        self,
        *,
        session_id: int,
        class_id: Optional[int],
        student_ids: Sequence[int],
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
    ) -> int:
        """Batch insert in one transaction; returns the number of rows."""
        raise NotImplementedError

    def update_record(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
        notes: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    def list_records(self, session_id: int) -> Sequence[AttendanceRecord]:
        """Newest first."""
        raise NotImplementedError

    def list_records_for_sessions(self, session_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        raise NotImplementedError
