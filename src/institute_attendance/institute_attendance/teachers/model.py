from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import RecordStatus


@dataclass(frozen=True)
class Teacher:
    teacher_id: int
    institute_id: int
    name: str
    email: str
    phone: Optional[str]
    status: RecordStatus = RecordStatus.ACTIVE
