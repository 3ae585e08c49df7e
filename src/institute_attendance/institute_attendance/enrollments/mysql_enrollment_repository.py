from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import ClassStudent
from .repository import EnrollmentRepository

_COLUMNS = "assignment_id, class_id, student_id, institute_id, status, assigned_at, assigned_by"


def _to_enrollment(row: dict) -> ClassStudent:
    return ClassStudent(
        assignment_id=int(row["assignment_id"]),
        class_id=int(row["class_id"]),
        student_id=int(row["student_id"]),
        institute_id=int(row["institute_id"]),
        status=RecordStatus(row["status"]),
        assigned_at=row["assigned_at"],
        assigned_by=str(row["assigned_by"]),
    )


class MySQLEnrollmentRepository(EnrollmentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(self, *, class_id: int, student_id: int) -> Optional[ClassStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS} FROM class_students
                WHERE class_id=%s AND student_id=%s
                ORDER BY (status='active') DESC, assignment_id DESC
                LIMIT 1
                """,
                (class_id, student_id),
            )
            row = fetchone(cur)
            return _to_enrollment(row) if row else None

    def create(
        self,
        *,
        class_id: int,
        student_id: int,
        institute_id: int,
        assigned_at: datetime,
        assigned_by: str,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO class_students(class_id, student_id, institute_id, status, assigned_at, assigned_by)
                VALUES(%s,%s,%s,'active',%s,%s)
                """,
                (class_id, student_id, institute_id, assigned_at, assigned_by),
            )
            return int(cur.lastrowid)

    def create_many(
        self,
        *,
        class_id: int,
        student_ids: Sequence[int],
        institute_id: int,
        assigned_at: datetime,
        assigned_by: str,
    ) -> list[int]:
        ids: list[int] = []
        with db_cursor(self._conn_factory) as (_, cur):
            for student_id in student_ids:
                cur.execute(
                    """
                    INSERT INTO class_students(class_id, student_id, institute_id, status, assigned_at, assigned_by)
                    VALUES(%s,%s,%s,'active',%s,%s)
                    """,
                    (class_id, student_id, institute_id, assigned_at, assigned_by),
                )
                ids.append(int(cur.lastrowid))
        return ids

    def reactivate(self, assignment_id: int, *, assigned_at: datetime, assigned_by: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_students SET status='active', assigned_at=%s, assigned_by=%s
                WHERE assignment_id=%s
                """,
                (assigned_at, assigned_by, assignment_id),
            )
            return cur.rowcount > 0

    def deactivate(self, *, class_id: int, student_id: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE class_students SET status='inactive'
                WHERE class_id=%s AND student_id=%s AND status='active'
                """,
                (class_id, student_id),
            )
            return int(cur.rowcount)

    def list_for_class(self, class_id: int, *, status: Optional[RecordStatus] = RecordStatus.ACTIVE) -> Sequence[ClassStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(f"SELECT {_COLUMNS} FROM class_students WHERE class_id=%s", (class_id,))
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM class_students WHERE class_id=%s AND status=%s",
                    (class_id, status.value),
                )
            return [_to_enrollment(r) for r in fetchall(cur)]

    def list_for_student(self, student_id: int, *, status: Optional[RecordStatus] = RecordStatus.ACTIVE) -> Sequence[ClassStudent]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(f"SELECT {_COLUMNS} FROM class_students WHERE student_id=%s", (student_id,))
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM class_students WHERE student_id=%s AND status=%s",
                    (student_id, status.value),
                )
            return [_to_enrollment(r) for r in fetchall(cur)]
