from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from ..core.enums import RecordStatus
from .model import ClassRoom


class ClassRepository(Protocol):
    def get_by_id(self, class_id: int) -> Optional[ClassRoom]:
        raise NotImplementedError

    def create(self, *, institute_id: int, teacher_id: int, name: str, status: RecordStatus) -> int:
        raise NotImplementedError

    def update(self, class_id: int, fields: dict[str, Any]) -> bool:
        raise NotImplementedError

    def list_all(self) -> Sequence[ClassRoom]:
        raise NotImplementedError

    def list_by_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        raise NotImplementedError

    def list_by_institute(self, institute_id: int) -> Sequence[ClassRoom]:
        raise NotImplementedError
