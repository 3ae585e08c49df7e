from __future__ import annotations

from typing import Any, Optional, Sequence

from ..core.enums import RecordStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_update, db_cursor, fetchall, fetchone
from .model import ClassRoom
from .repository import ClassRepository

_COLUMNS = "class_id, institute_id, teacher_id, name, status, created_at"


def _to_class(row: dict) -> ClassRoom:
    return ClassRoom(
        class_id=int(row["class_id"]),
        institute_id=int(row["institute_id"]),
        teacher_id=int(row["teacher_id"]),
        name=row["name"],
        status=RecordStatus(row["status"]),
        created_at=row.get("created_at"),
    )


class MySQLClassRepository(ClassRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, class_id: int) -> Optional[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE class_id=%s", (class_id,))
            row = fetchone(cur)
            return _to_class(row) if row else None

    def create(self, *, institute_id: int, teacher_id: int, name: str, status: RecordStatus) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO classes(institute_id, teacher_id, name, status) VALUES(%s,%s,%s,%s)",
                (institute_id, teacher_id, name, status.value),
            )
            return int(cur.lastrowid)

    def update(self, class_id: int, fields: dict[str, Any]) -> bool:
        sql, params = build_update("classes", "class_id", class_id, fields)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return cur.rowcount > 0

    def list_all(self) -> Sequence[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes ORDER BY name")
            return [_to_class(r) for r in fetchall(cur)]

    def list_by_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE teacher_id=%s ORDER BY name", (teacher_id,))
            return [_to_class(r) for r in fetchall(cur)]

    def list_by_institute(self, institute_id: int) -> Sequence[ClassRoom]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM classes WHERE institute_id=%s ORDER BY name", (institute_id,))
            return [_to_class(r) for r in fetchall(cur)]
