from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RecordStatus


@dataclass(frozen=True)
class Student:
    """Domain entity: a student registered under an institute.

    Email is not unique; two students may share one (e.g. siblings using a
    parent's address).
    """

    student_id: int
    institute_id: int
    name: str
    email: str
    phone: Optional[str]
    address: Optional[str]
    status: RecordStatus = RecordStatus.ACTIVE
    created_at: Optional[datetime] = None
