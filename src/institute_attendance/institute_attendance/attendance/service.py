from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable, Optional, Sequence

from ..classes.repository import ClassRepository
from ..common.datetime_utils import now_local
from ..common.math_utils import percent
from ..core.constants import DEFAULT_LATE_THRESHOLD_MINUTES, DEFAULT_QR_EXPIRY_MINUTES
from ..core.enums import AttendanceStatus, MarkingMethod, SessionStatus
from ..core.exceptions import (
    ALREADY_MARKED,
    INVALID_QR,
    QR_EXPIRED,
    SESSION_NOT_ACTIVE,
    SESSION_NOT_FOUND,
    STUDENT_NOT_ENROLLED,
    AttendanceError,
    NotFoundError,
    ValidationError,
)
from ..enrollments.service import EnrollmentService
from .events import RecordFeed, RecordsCallback
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord, AttendanceSession, AttendanceStatistics, SessionSummary
from .qr import SessionQR, StudentQR, build_session_payload, parse_payload
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


def _format_location(location) -> Optional[str]:
    if not location:
        return None
    if isinstance(location, str):
        return location.strip() or None
    if isinstance(location, dict):
        return f"{location['latitude']},{location['longitude']}"
    lat, lng = location
    return f"{lat},{lng}"


def _parse_status(value) -> AttendanceStatus:
    if isinstance(value, AttendanceStatus):
        return value
    try:
        return AttendanceStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError("Status must be one of: present, absent, late")


class AttendanceService:
    """Attendance sessions and the QR marking flow.

    A session snapshots the class's enrolled students when it starts; the
    student-side QR scan is accepted only from that snapshot while the
    session is active and its QR code has not expired.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        enrollments: EnrollmentService,
        classes: ClassRepository | None = None,
        *,
        strategy_factory: AttendanceStrategyFactory | None = None,
        feed: RecordFeed | None = None,
        qr_expiry_minutes: int = DEFAULT_QR_EXPIRY_MINUTES,
        late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
    ):
        self._attendance = attendance
        self._enrollments = enrollments
        self._classes = classes
        self._factory = strategy_factory or AttendanceStrategyFactory()
        self._feed = feed or RecordFeed()
        self._qr_expiry = timedelta(minutes=int(qr_expiry_minutes))
        self._late_threshold_minutes = int(late_threshold_minutes)

    # Sessions

    def create_session(
        self,
        class_id: int,
        teacher_id: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceSession:
        now = now or now_local()
        class_id = int(class_id)

        if teacher_id is None:
            cls = self._classes.get_by_id(class_id) if self._classes else None
            if not cls:
                raise NotFoundError("Class not found")
            teacher_id = cls.teacher_id

        student_ids = self._enrollments.student_ids_in_class(class_id)
        session_id = self._attendance.create_session(
            class_id=class_id,
            teacher_id=int(teacher_id),
            student_ids=student_ids,
            session_date=now.date(),
            start_time=now,
            qr_expiry=now + self._qr_expiry,
        )

        payload = build_session_payload(session_id, class_id, now)
        self._attendance.update_session(session_id, {"qr_code": payload})
        logger.info("Attendance session %s started for class %s (%d students)", session_id, class_id, len(student_ids))
        return self._require_session(session_id, code=SESSION_NOT_FOUND, message="Session not found")

    def get_session(self, session_id: int) -> AttendanceSession:
        return self._require_session(session_id, code=SESSION_NOT_FOUND, message="Session not found")

    def get_active_session(self, class_id: int) -> Optional[AttendanceSession]:
        return self._attendance.get_active_session(int(class_id))

    def end_session(self, session_id: int, *, now: Optional[datetime] = None) -> AttendanceSession:
        return self._close_session(session_id, SessionStatus.COMPLETED, now=now)

    def cancel_session(self, session_id: int, *, now: Optional[datetime] = None) -> AttendanceSession:
        return self._close_session(session_id, SessionStatus.CANCELLED, now=now)

    def _close_session(self, session_id: int, status: SessionStatus, *, now: Optional[datetime]) -> AttendanceSession:
        now = now or now_local()
        session = self.get_session(session_id)
        if session.status != SessionStatus.ACTIVE:
            raise AttendanceError(SESSION_NOT_ACTIVE, "Session not active")

        self._attendance.update_session(
            session.session_id,
            {"status": status, "end_time": now, "updated_at": now},
        )
        logger.info("Attendance session %s %s", session.session_id, status.value)
        return self.get_session(session.session_id)

    def refresh_qr(self, session_id: int, *, now: Optional[datetime] = None) -> AttendanceSession:
        now = now or now_local()
        session = self.get_session(session_id)
        if session.status != SessionStatus.ACTIVE:
            raise AttendanceError(SESSION_NOT_ACTIVE, "Session not active")

        self._attendance.update_session(
            session.session_id,
            {
                "qr_code": build_session_payload(session.session_id, session.class_id, now),
                "qr_expiry": now + self._qr_expiry,
                "updated_at": now,
            },
        )
        return self.get_session(session.session_id)

    def _require_session(self, session_id, *, code: str, message: str) -> AttendanceSession:
        try:
            session = self._attendance.get_session(int(session_id))
        except (TypeError, ValueError):
            session = None
        if not session:
            raise AttendanceError(code, message)
        return session

    # Marking

    def mark_manually(
        self,
        session_id: int,
        student_id: int,
        status,
        *,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        now = now or now_local()
        status = _parse_status(status)
        session = self.get_session(session_id)
        student_id = int(student_id)

        existing = self._attendance.find_record(session_id=session.session_id, student_id=student_id)
        if existing:
            self._attendance.update_record(
                record_id=existing.record_id,
                status=status,
                marked_at=now,
                marked_by=MarkingMethod.MANUAL,
                notes=notes,
            )
        else:
            self._attendance.create_record(
                session_id=session.session_id,
                class_id=session.class_id,
                student_id=student_id,
                status=status,
                marked_at=now,
                marked_by=MarkingMethod.MANUAL,
                notes=notes,
            )

        self._publish(session.session_id)
        return self._attendance.find_record(session_id=session.session_id, student_id=student_id)

    def mark_by_qr(
        self,
        qr_data: str,
        student_id: int,
        *,
        location=None,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Student-side scan of the session QR code."""
        now = now or now_local()
        payload = parse_payload(qr_data)
        if not isinstance(payload, SessionQR):
            raise AttendanceError(INVALID_QR, "This is not a valid attendance QR code")

        session = self._require_session(payload.session_id, code=SESSION_NOT_FOUND, message="Invalid session")
        if session.class_id != payload.class_id:
            raise AttendanceError(INVALID_QR, "This is not a valid attendance QR code")
        if session.status != SessionStatus.ACTIVE:
            raise AttendanceError(SESSION_NOT_ACTIVE, "Session not active")
        if session.qr_expiry < now:
            raise AttendanceError(QR_EXPIRED, "QR code expired")

        return self._record_scan(session, int(student_id), now=now, location=_format_location(location))

    def mark_student_qr(
        self,
        session_id: int,
        qr_data: str,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        """Teacher-side scan of a student's personal ``STUDENT_ID:`` code."""
        now = now or now_local()
        payload = parse_payload(qr_data)
        if not isinstance(payload, StudentQR):
            raise AttendanceError(INVALID_QR, "Invalid student QR code")

        session = self._require_session(session_id, code=SESSION_NOT_FOUND, message="Invalid session")
        if session.status != SessionStatus.ACTIVE:
            raise AttendanceError(SESSION_NOT_ACTIVE, "Session not active")

        return self._record_scan(session, payload.student_id, now=now, location=None)

    def _record_scan(
        self,
        session: AttendanceSession,
        student_id: int,
        *,
        now: datetime,
        location: Optional[str],
    ) -> AttendanceRecord:
        if student_id not in session.student_ids:
            raise AttendanceError(STUDENT_NOT_ENROLLED, "not enrolled")
        if self._attendance.find_record(session_id=session.session_id, student_id=student_id):
            raise AttendanceError(ALREADY_MARKED, "already marked")

        strategy = self._factory.for_scan(
            now=now, session=session, late_threshold_minutes=self._late_threshold_minutes
        )
        decision = strategy.decide_scan(
            now=now, session=session, late_threshold_minutes=self._late_threshold_minutes
        )

        self._attendance.create_record(
            session_id=session.session_id,
            class_id=session.class_id,
            student_id=student_id,
            status=decision.status,
            marked_at=now,
            marked_by=MarkingMethod.QR,
            location=location,
            notes=decision.note,
        )
        logger.info("Student %s marked %s in session %s", student_id, decision.status.value, session.session_id)

        self._publish(session.session_id)
        return self._attendance.find_record(session_id=session.session_id, student_id=student_id)

    def mark_absent_students(self, session_id: int, *, now: Optional[datetime] = None) -> int:
        """Mark every currently enrolled student without a record as absent."""
        now = now or now_local()
        session = self.get_session(session_id)

        marked = {r.student_id for r in self._attendance.list_records(session.session_id)}
        unmarked = [sid for sid in self._enrollments.student_ids_in_class(session.class_id) if sid not in marked]
        if not unmarked:
            return 0

        count = self._attendance.create_records(
            session_id=session.session_id,
            class_id=session.class_id,
            student_ids=unmarked,
            status=AttendanceStatus.ABSENT,
            marked_at=now,
            marked_by=MarkingMethod.AUTO,
        )
        logger.info("Marked %d students absent in session %s", count, session.session_id)
        self._publish(session.session_id)
        return count

    # Queries

    def records(self, session_id: int) -> Sequence[AttendanceRecord]:
        return self._attendance.list_records(int(session_id))

    def history(
        self,
        class_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSession]:
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must be before end date")
        return self._attendance.list_sessions_for_class(int(class_id), start_date=start_date, end_date=end_date)

    def statistics(
        self,
        class_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> AttendanceStatistics:
        sessions = self.history(class_id, start_date=start_date, end_date=end_date)
        if not sessions:
            return AttendanceStatistics(
                total_sessions=0,
                total_students=0,
                average_attendance=0,
                present_count=0,
                absent_count=0,
                late_count=0,
            )

        records = self._attendance.list_records_for_sessions([s.session_id for s in sessions])
        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        absent = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        total = present + absent + late

        return AttendanceStatistics(
            total_sessions=len(sessions),
            total_students=len(self._enrollments.student_ids_in_class(class_id)),
            average_attendance=percent(present + late, total),
            present_count=present,
            absent_count=absent,
            late_count=late,
        )

    def session_summary(self, session_id: int) -> SessionSummary:
        session = self.get_session(session_id)
        records = tuple(self._attendance.list_records(session.session_id))

        present = sum(1 for r in records if r.status == AttendanceStatus.PRESENT)
        absent = sum(1 for r in records if r.status == AttendanceStatus.ABSENT)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        total = len(session.student_ids)
        marked = {r.student_id for r in records}

        return SessionSummary(
            session=session,
            total_students=total,
            present_count=present,
            absent_count=absent,
            late_count=late,
            unmarked_count=sum(1 for sid in session.student_ids if sid not in marked),
            attendance_rate=percent(present + late, total),
            records=records,
        )

    # Real-time

    def subscribe(self, session_id: int, callback: RecordsCallback) -> Callable[[], None]:
        """Register ``callback`` for record changes; returns the unsubscribe function.

        The current records are delivered once immediately.
        """
        unsubscribe = self._feed.subscribe(int(session_id), callback)
        callback(self.records(session_id))
        return unsubscribe

    def _publish(self, session_id: int) -> None:
        if self._feed.has_subscribers(session_id):
            self._feed.publish(session_id, self.records(session_id))
