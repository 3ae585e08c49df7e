from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import is_valid_email, parse_record_status
from ..core.enums import RecordStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from .model import Teacher
from .repository import TeacherRepository

logger = logging.getLogger(__name__)

_UPDATABLE = {"name", "email", "phone", "status"}


class TeacherService:
    """Use cases: register and maintain an institute's teachers."""

    def __init__(self, teachers: TeacherRepository):
        self._teachers = teachers

    def register(
        self,
        *,
        institute_id: int,
        name: str,
        email: str,
        phone: Optional[str] = None,
        status: Optional[str] = None,
    ) -> int:
        name = (name or "").strip()
        email = (email or "").strip()
        if not name or not email or not institute_id:
            raise ValidationError("Missing required teacher fields")
        if not is_valid_email(email):
            raise ValidationError("Invalid email format")

        teacher_id = self._teachers.create(
            institute_id=int(institute_id),
            name=name,
            email=email,
            phone=(phone or "").strip() or None,
            status=parse_record_status(status),
        )
        logger.info("Teacher %s added to institute %s", teacher_id, institute_id)
        return teacher_id

    def get(self, teacher_id: int, *, current_institute_id: Optional[int] = None) -> Teacher:
        teacher = self._teachers.get_by_id(int(teacher_id))
        if not teacher:
            raise NotFoundError("Teacher not found")
        if current_institute_id is not None and teacher.institute_id != int(current_institute_id):
            raise AuthorizationError("You do not have access to this teacher")
        return teacher

    def update(self, teacher_id: int, *, current_institute_id: Optional[int] = None, **changes) -> Teacher:
        self.get(teacher_id, current_institute_id=current_institute_id)

        fields = {k: v for k, v in changes.items() if k in _UPDATABLE and v is not None}
        if "name" in fields:
            fields["name"] = str(fields["name"]).strip()
            if not fields["name"]:
                raise ValidationError("Missing required teacher fields")
        if "email" in fields:
            fields["email"] = str(fields["email"]).strip()
            if not is_valid_email(fields["email"]):
                raise ValidationError("Invalid email format")
        if "status" in fields:
            fields["status"] = parse_record_status(fields["status"])
        if not fields:
            raise ValidationError("Nothing to update")

        self._teachers.update(int(teacher_id), fields)
        return self.get(teacher_id)

    def delete(self, teacher_id: int, *, current_institute_id: Optional[int] = None) -> None:
        """Soft delete: the teacher row stays, flagged inactive."""
        self.get(teacher_id, current_institute_id=current_institute_id)
        self._teachers.update(int(teacher_id), {"status": RecordStatus.INACTIVE})
        logger.info("Teacher %s set inactive", teacher_id)

    def list_all(self) -> Sequence[Teacher]:
        return self._teachers.list_all()

    def list_by_institute(self, institute_id: int) -> Sequence[Teacher]:
        return self._teachers.list_by_institute(int(institute_id))
