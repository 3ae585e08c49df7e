from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from institute_attendance.attendance.mysql_attendance_repository import MySQLAttendanceRepository
from institute_attendance.core.enums import RecordStatus, SessionStatus
from institute_attendance.database.bootstrap import _iter_sql_statements, _strip_comments, _strip_create_db_and_use
from institute_attendance.database.mysql_base import build_update, dump_id_list, in_clause, load_id_list

REPO_ROOT = Path(__file__).resolve().parents[2]


def test_schema_file_splits_into_table_statements():
    sql = (REPO_ROOT / "database" / "schema.sql").read_text(encoding="utf-8")

    statements = list(_iter_sql_statements(_strip_create_db_and_use(_strip_comments(sql))))

    assert len(statements) == 7
    assert all(s.upper().startswith("CREATE TABLE IF NOT EXISTS") for s in statements)


def test_splitter_ignores_semicolons_in_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"
    assert list(_iter_sql_statements(sql)) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
    ]


def test_build_update_unwraps_enums():
    sql, params = build_update("classes", "class_id", 3, {"name": "Math", "status": RecordStatus.INACTIVE})

    assert sql == "UPDATE classes SET name=%s, status=%s WHERE class_id=%s"
    assert params == ["Math", "inactive", 3]


def test_in_clause():
    assert in_clause([1, 2]) == ("(%s,%s)", [1, 2])
    assert in_clause([]) == ("(NULL)", [])


def test_id_list_json_column():
    assert dump_id_list([3, "4"]) == "[3, 4]"
    assert load_id_list("[3, 4]") == (3, 4)
    assert load_id_list(b"[5]") == (5,)
    assert load_id_list(None) == ()
    assert load_id_list([6]) == (6,)


class _FakeCursor:
    def __init__(self, rows):
        self._rows = rows
        self.executed = []

    def execute(self, sql, params=None):
        self.executed.append((sql, params))

    def fetchone(self):
        return self._rows[0] if self._rows else None

    def fetchall(self):
        return self._rows

    def close(self):
        pass


class _FakeConnection:
    def __init__(self, cursor):
        self._cursor = cursor
        self.committed = False

    def cursor(self, dictionary=False):
        return self._cursor

    def commit(self):
        self.committed = True

    def rollback(self):
        pass

    def close(self):
        pass


class _FakeFactory:
    def __init__(self, rows):
        self.cursor = _FakeCursor(rows)
        self.conn = _FakeConnection(self.cursor)

    def connect(self, *, with_database: bool = True):
        return self.conn


def test_mysql_attendance_repository_maps_session_row():
    start = datetime(2026, 3, 2, 9, 0)
    row = {
        "session_id": 1,
        "class_id": 2,
        "teacher_id": 3,
        "student_ids": '["7", 8]',
        "session_date": date(2026, 3, 2),
        "start_time": start,
        "end_time": None,
        "status": "active",
        "qr_code": None,
        "qr_expiry": start,
        "created_at": start,
        "updated_at": start,
    }
    factory = _FakeFactory([row])

    session = MySQLAttendanceRepository(factory).get_session(1)

    assert session.student_ids == (7, 8)
    assert session.status == SessionStatus.ACTIVE
    assert session.qr_code == ""
    assert factory.cursor.executed[0][1] == (1,)
    assert factory.conn.committed
