from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional, Sequence

from ..core.enums import AttendanceStatus, MarkingMethod, SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, dump_id_list, fetchall, fetchone, in_clause, load_id_list
from .model import AttendanceRecord, AttendanceSession
from .repository import AttendanceRepository

_SESSION_COLUMNS = (
    "session_id, class_id, teacher_id, student_ids, session_date, start_time, end_time, "
    "status, qr_code, qr_expiry, created_at, updated_at"
)
_RECORD_COLUMNS = "record_id, session_id, class_id, student_id, status, marked_at, marked_by, location, notes"


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]),
        teacher_id=int(r["teacher_id"]),
        student_ids=load_id_list(r.get("student_ids")),
        session_date=r["session_date"],
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        status=SessionStatus(r["status"]),
        qr_code=r.get("qr_code") or "",
        qr_expiry=r["qr_expiry"],
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        record_id=int(r["record_id"]),
        session_id=int(r["session_id"]),
        class_id=int(r["class_id"]) if r.get("class_id") is not None else None,
        student_id=int(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        marked_at=r["marked_at"],
        marked_by=MarkingMethod(r["marked_by"]),
        location=r.get("location"),
        notes=r.get("notes"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    class_id, teacher_id, student_ids, session_date, start_time,
                    status, qr_code, qr_expiry, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,'active','',%s,%s,%s)
                """,
                (
                    class_id,
                    teacher_id,
                    dump_id_list(student_ids),
                    session_date,
                    start_time,
                    qr_expiry,
                    start_time,
                    start_time,
                ),
            )
            return int(cur.lastrowid)

    def get_session(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_SESSION_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (session_id,))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def get_active_session(self, class_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS} FROM attendance_sessions
                WHERE class_id=%s AND status='active'
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (class_id,),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def update_session(self, session_id: int, fields: dict[str, Any]) -> bool:
        sql, params = build_update("attendance_sessions", "session_id", session_id, fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def list_sessions_for_class(
        self,
        class_id: int,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceSession]:
        where = ["class_id=%s"]
        params: list[Any] = [class_id]
        if start_date:
            where.append("session_date>=%s")
            params.append(start_date)
        if end_date:
            where.append("session_date<=%s")
            params.append(end_date)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_SESSION_COLUMNS} FROM attendance_sessions
                WHERE {' AND '.join(where)}
                ORDER BY start_time DESC
                """,
                params,
            )
            return [_to_session(r) for r in fetchall(cur)]

    def find_record(self, *, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS} FROM attendance_records
                WHERE session_id=%s AND student_id=%s
                LIMIT 1
                """,
                (session_id, student_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(
                    session_id, class_id, student_id, status, marked_at, marked_by,
                    location, notes, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    session_id,
                    class_id,
                    student_id,
                    status.value,
                    marked_at,
                    marked_by.value,
                    location,
                    notes,
                    marked_at,
                    marked_at,
                ),
            )
            return int(cur.lastrowid)

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
        if not student_ids:
            return 0
        rows = [
            (session_id, class_id, sid, status.value, marked_at, marked_by.value, marked_at, marked_at)
            for sid in student_ids
        ]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.executemany(
                """
                INSERT INTO attendance_records(
                    session_id, class_id, student_id, status, marked_at, marked_by, created_at, updated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                rows,
            )
            return len(rows)

    def update_record(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, marked_at=%s, marked_by=%s, notes=COALESCE(%s, notes), updated_at=%s
                WHERE record_id=%s
                """,
                (status.value, marked_at, marked_by.value, notes, marked_at, record_id),
            )
            return cur.rowcount > 0

    def list_records(self, session_id: int) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS} FROM attendance_records
                WHERE session_id=%s
                ORDER BY marked_at DESC, record_id DESC
                """,
                (session_id,),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_records_for_sessions(self, session_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        placeholders, params = in_clause(session_ids)
        if not params:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_RECORD_COLUMNS} FROM attendance_records
                WHERE session_id IN {placeholders}
                ORDER BY marked_at DESC, record_id DESC
                """,
                params,
            )
            return [_to_record(r) for r in fetchall(cur)]
