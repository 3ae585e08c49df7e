from __future__ import annotations

from typing import Any, Iterable, Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchall, fetchone, in_clause
from .model import Student
from .repository import StudentRepository

_COLUMNS = "student_id, institute_id, name, email, phone, address, status, created_at"


def _to_student(row: dict) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        institute_id=int(row["institute_id"]),
        name=row["name"],
        email=row["email"],
        phone=row.get("phone"),
        address=row.get("address"),
        status=RecordStatus(row["status"]),
        created_at=row.get("created_at"),
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id=%s", (student_id,))
            row = fetchone(cur)
            return _to_student(row) if row else None

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        placeholders, params = in_clause(student_ids)
        if not params:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students WHERE student_id IN {placeholders} ORDER BY name", params)
            return [_to_student(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        institute_id: int,
        name: str,
        email: str,
        phone: str,
        address: str,
        status: RecordStatus,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(institute_id, name, email, phone, address, status)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (institute_id, name, email, phone, address, status.value),
            )
            return int(cur.lastrowid)

    def update(self, student_id: int, fields: dict[str, Any]) -> bool:
        sql, params = build_update("students", "student_id", student_id, fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students ORDER BY name")
            return [_to_student(r) for r in fetchall(cur)]

    def list_by_institute(self, institute_id: int, *, status: Optional[RecordStatus] = None) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            if status is None:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM students WHERE institute_id=%s ORDER BY name",
                    (institute_id,),
                )
            else:
                cur.execute(
                    f"SELECT {_COLUMNS} FROM students WHERE institute_id=%s AND status=%s ORDER BY name",
                    (institute_id, status.value),
                )
            return [_to_student(r) for r in fetchall(cur)]
