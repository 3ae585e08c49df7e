from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import RecordStatus
from .model import Teacher


class TeacherRepository(Protocol):
    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        raise NotImplementedError

    def create(self, *, institute_id: int, name: str, email: str, phone: Optional[str], status: RecordStatus) -> int:
        raise NotImplementedError

    def update(self, teacher_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[Teacher]:
        raise NotImplementedError

    def list_by_institute(self, institute_id: int) -> Sequence[Teacher]:
        raise NotImplementedError
