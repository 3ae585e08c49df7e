from __future__ import annotations

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any


def to_json(value: Any) -> Any:
    """Convert domain dataclasses into JSON-friendly structures.

    Enums become their value, dates/datetimes become ISO strings and
    tuples become lists. Password hashes never leave the service layer.
    """
    if is_dataclass(value) and not isinstance(value, type):
        data = asdict(value)
        data.pop("password_hash", None)
        return to_json(data)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_json(v) for v in value]
    return value
