from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import RecordStatus


@dataclass(frozen=True)
class ClassRoom:
    class_id: int
    institute_id: int
    teacher_id: int
    name: str
    status: RecordStatus = RecordStatus.ACTIVE
    created_at: Optional[datetime] = None
