from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import RecordStatus
from .model import ClassStudent


class EnrollmentRepository(Protocol):
    def find(self, *, class_id: int, student_id: int) -> Optional[ClassStudent]:
        raise NotImplementedError

    def create(
        self,
        *,
        class_id: int,
        student_id: int,
        institute_id: int,
        assigned_at: datetime,
        assigned_by: str,
    ) -> int:
        raise NotImplementedError

    def create_many(
        self,
        *,
        class_id: int,
        student_ids: Sequence[int],
        institute_id: int,
        assigned_at: datetime,
        assigned_by: str,
    ) -> list[int]:
        """Insert all rows in one transaction; returns new ids in input order."""
        raise NotImplementedError

    def reactivate(self, assignment_id: int, *, assigned_at: datetime, assigned_by: str) -> bool:
        raise NotImplementedError

    def deactivate(self, *, class_id: int, student_id: int) -> int:
        """Flip active rows to inactive; returns how many rows changed."""
        raise NotImplementedError

    def list_for_class(self, class_id: int, *, status: Optional[RecordStatus] = RecordStatus.ACTIVE) -> Sequence[ClassStudent]:
        raise NotImplementedError

    def list_for_student(self, student_id: int, *, status: Optional[RecordStatus] = RecordStatus.ACTIVE) -> Sequence[ClassStudent]:
        raise NotImplementedError
