from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchall, fetchone
from .model import Teacher
from .repository import TeacherRepository

_COLUMNS = "teacher_id, institute_id, name, email, phone, status"


def _to_teacher(row: dict) -> Teacher:
    return Teacher(
        teacher_id=int(row["teacher_id"]),
        institute_id=int(row["institute_id"]),
        name=row["name"],
        email=row["email"],
        phone=row.get("phone"),
        status=RecordStatus(row["status"]),
    )


class MySQLTeacherRepository(TeacherRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE teacher_id=%s", (teacher_id,))
            row = fetchone(cur)
            return _to_teacher(row) if row else None

    def create(self, *, institute_id: int, name: str, email: str, phone: Optional[str], status: RecordStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO teachers(institute_id, name, email, phone, status)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (institute_id, name, email, phone, status.value),
            )
            return int(cur.lastrowid)

    def update(self, teacher_id: int, fields: dict[str, Any]) -> bool:
        sql, params = build_update("teachers", "teacher_id", teacher_id, fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def list_all(self) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers ORDER BY name")
            return [_to_teacher(r) for r in fetchall(cur)]

    def list_by_institute(self, institute_id: int) -> Sequence[Teacher]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM teachers WHERE institute_id=%s ORDER BY name", (institute_id,))
            return [_to_teacher(r) for r in fetchall(cur)]
