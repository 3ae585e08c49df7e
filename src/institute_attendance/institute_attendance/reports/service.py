from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ..attendance.repository import AttendanceRepository
from ..common.math_utils import percent
from ..core.enums import AttendanceStatus
from ..enrollments.service import EnrollmentService
from ..students.repository import StudentRepository

REPORT_FIELDS = [
    "session_date",
    "session_id",
    "student_id",
    "student_name",
    "email",
    "status",
    "marked_at",
    "marked_by",
    "notes",
]


@dataclass(frozen=True)
class ReportData:
    rows: list[dict]
    summary: list[dict]


class AttendanceReportService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        students: StudentRepository,
        enrollments: EnrollmentService,
    ):
        self._attendance = attendance
        self._students = students
        self._enrollments = enrollments

    def class_report_rows(
        self,
        class_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        """One row per attendance record in the class's sessions, newest session first."""
        sessions = self._attendance.list_sessions_for_class(int(class_id), start_date=start, end_date=end)
        if not sessions:
            return []

        records = self._attendance.list_records_for_sessions([s.session_id for s in sessions])
        by_session: dict[int, list] = {}
        for r in records:
            by_session.setdefault(r.session_id, []).append(r)

        students = {s.student_id: s for s in self._students.get_many({r.student_id for r in records})}

        rows: list[dict] = []
        for s in sessions:
            for r in sorted(by_session.get(s.session_id, []), key=lambda rec: rec.student_id):
                student = students.get(r.student_id)
                rows.append(
                    {
                        "session_date": s.session_date.strftime("%Y-%m-%d"),
                        "session_id": s.session_id,
                        "student_id": r.student_id,
                        "student_name": student.name if student else "-",
                        "email": student.email if student else "-",
                        "status": r.status.value,
                        "marked_at": r.marked_at.strftime("%Y-%m-%d %H:%M:%S"),
                        "marked_by": r.marked_by.value,
                        "notes": r.notes or "",
                    }
                )
        return rows

    def student_summaries(
        self,
        class_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[dict]:
        """Per enrolled student totals across the class's sessions."""
        sessions = self._attendance.list_sessions_for_class(int(class_id), start_date=start, end_date=end)
        records = self._attendance.list_records_for_sessions([s.session_id for s in sessions]) if sessions else []

        enrolled = self._enrollments.student_ids_in_class(class_id)
        students = {s.student_id: s for s in self._students.get_many(enrolled)}

        summary_map: dict[int, dict] = {}
        for sid in enrolled:
            student = students.get(sid)
            summary_map[sid] = {
                "student_id": sid,
                "student_name": student.name if student else "-",
                "present": 0,
                "late": 0,
                "absent": 0,
            }

        for r in records:
            s = summary_map.get(r.student_id)
            if not s:
                continue
            if r.status == AttendanceStatus.PRESENT:
                s["present"] += 1
            elif r.status == AttendanceStatus.LATE:
                s["late"] += 1
            elif r.status == AttendanceStatus.ABSENT:
                s["absent"] += 1

        summary = []
        for s in summary_map.values():
            attended = s["present"] + s["late"]
            total = attended + s["absent"]
            summary.append(
                {
                    **s,
                    "sessions": len(sessions),
                    "attendance_rate": percent(attended, total),
                }
            )
        summary.sort(key=lambda x: x["student_name"].lower())
        return summary

    def build_class_report(
        self,
        class_id: int,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> ReportData:
        return ReportData(
            rows=self.class_report_rows(class_id, start=start, end=end),
            summary=self.student_summaries(class_id, start=start, end=end),
        )
