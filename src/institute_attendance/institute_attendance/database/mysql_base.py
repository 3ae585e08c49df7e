from __future__ import annotations

import json
from contextlib import contextmanager
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True):
    conn = conn_factory.connect()
    try:
        cur = conn.cursor(dictionary=dictionary)
        try:
            yield conn, cur
            conn.commit()
        finally:
            cur.close()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    row = cur.fetchone()
    return row if row else None


def fetchall(cur) -> List[Dict[str, Any]]:
    rows = cur.fetchall()
    return list(rows or [])


def build_update(table: str, key_col: str, key: Any, fields: Dict[str, Any]) -> Tuple[str, Sequence[Any]]:
    """Build ``UPDATE table SET a=%s, b=%s WHERE key_col=%s``.

    Column names come from repository code, never from request input.
    """
    if not fields:
        raise ValueError("No fields to update")
    assignments = ", ".join(f"{col}=%s" for col in fields)
    params = [v.value if hasattr(v, "value") else v for v in fields.values()]
    params.append(key)
    return f"UPDATE {table} SET {assignments} WHERE {key_col}=%s", params


def in_clause(values: Iterable[Any]) -> Tuple[str, List[Any]]:
    items = list(values)
    if not items:
        return "(NULL)", []
    return "(" + ",".join(["%s"] * len(items)) + ")", items


def dump_id_list(ids: Sequence[int]) -> str:
    return json.dumps([int(i) for i in ids])


def load_id_list(value: Any) -> tuple[int, ...]:
    """MySQL JSON columns come back as str or bytes depending on the connector."""
    if value is None:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    return tuple(int(v) for v in value)
