from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import parse_record_status
from ..core.enums import RecordStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import ClassRoom
from .repository import ClassRepository

logger = logging.getLogger(__name__)


class ClassService:
    def __init__(self, classes: ClassRepository):
        self._classes = classes

    def register(self, *, institute_id: int, teacher_id: Optional[int], name: str, status: Optional[str] = None) -> int:
        name = (name or "").strip()
        if not name or not teacher_id:
            raise ValidationError("Missing required class fields")
        if not institute_id:
            raise ValidationError("No institute found for this user")

        class_id = self._classes.create(
            institute_id=int(institute_id),
            teacher_id=int(teacher_id),
            name=name,
            status=parse_record_status(status),
        )
        logger.info("Class %s (%s) created for teacher %s", class_id, name, teacher_id)
        return class_id

    def get(self, class_id: int, *, current_institute_id: Optional[int] = None) -> ClassRoom:
        cls = self._classes.get_by_id(int(class_id))
        if not cls:
            raise NotFoundError("Class not found")
        if current_institute_id is not None and cls.institute_id != int(current_institute_id):
            raise AuthorizationError("You do not have access to this class")
        return cls

    def update(
        self,
        class_id: int,
        *,
        current_institute_id: Optional[int] = None,
        name: Optional[str] = None,
        teacher_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> ClassRoom:
        self.get(class_id, current_institute_id=current_institute_id)

        fields: dict = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Please enter a class name")
            fields["name"] = name.strip()
        if teacher_id is not None:
            fields["teacher_id"] = int(teacher_id)
        if status is not None:
            fields["status"] = parse_record_status(status)
        if not fields:
            raise ValidationError("Nothing to update")

        self._classes.update(int(class_id), fields)
        return self.get(class_id)

    def delete(self, class_id: int, *, current_institute_id: Optional[int] = None) -> None:
        self.get(class_id, current_institute_id=current_institute_id)
        self._classes.update(int(class_id), {"status": RecordStatus.INACTIVE})
        logger.info("Class %s set inactive", class_id)

    def list_all(self) -> Sequence[ClassRoom]:
        return self._classes.list_all()

    def list_by_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        return self._classes.list_by_teacher(int(teacher_id))

    def list_by_institute(self, institute_id: int) -> Sequence[ClassRoom]:
        return self._classes.list_by_institute(int(institute_id))
