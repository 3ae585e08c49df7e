from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Institute
from .repository import InstituteRepository

_COLUMNS = "institute_id, institute_name, email, password_hash, email_verified, created_at"


def _to_institute(row: dict) -> Institute:
    return Institute(
        institute_id=int(row["institute_id"]),
        institute_name=row["institute_name"],
        email=row["email"],
        password_hash=row["password_hash"],
        email_verified=bool(row.get("email_verified", False)),
        created_at=row.get("created_at"),
    )


class MySQLInstituteRepository(InstituteRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, institute_id: int) -> Optional[Institute]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM institutes WHERE institute_id=%s", (institute_id,))
            row = fetchone(cur)
            return _to_institute(row) if row else None

    def get_by_email(self, email: str) -> Optional[Institute]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM institutes WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_institute(row) if row else None

    def create(self, *, institute_name: str, email: str, password_hash: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO institutes(institute_name, email, password_hash, email_verified)
                VALUES(%s,%s,%s,0)
                """,
                (institute_name, email, password_hash),
            )
            return int(cur.lastrowid)

    def set_email_verified(self, institute_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE institutes SET email_verified=1 WHERE institute_id=%s", (institute_id,))
            return cur.rowcount > 0
