from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol, Sequence

from ..core.enums import RecordStatus
from .model import Student


class StudentRepository(Protocol):
    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        raise NotImplementedError

    def create(
        self,
        *,
        institute_id: int,
        name: str,
        email: str,
        phone: str,
        address: str,
        status: RecordStatus,
    ) -> int:
        raise NotImplementedError

    def update(self, student_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Student]:
        raise NotImplementedError

    def list_by_institute(self, institute_id: int, *, status: Optional[RecordStatus] = None) -> Sequence[Student]:
        raise NotImplementedError
