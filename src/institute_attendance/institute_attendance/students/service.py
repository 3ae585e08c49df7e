from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from ..attendance.qr import build_student_payload, render_png, to_data_url
from ..common.validators import collect_student_errors
from ..core.enums import RecordStatus
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from .model import Student
from .repository import StudentRepository

logger = logging.getLogger(__name__)

_UPDATABLE = ("name", "email", "phone", "address", "status")


@dataclass(frozen=True)
class NewStudent:
    student: Student
    qr_payload: str
    welcome_sent: bool


class StudentService:
    """Use cases: register, edit and remove students, hand out their QR codes."""

    def __init__(self, students: StudentRepository, *, notifications: Optional[NotificationService] = None):
        self._students = students
        self._notifications = notifications

    @staticmethod
    def _validate(*, name: str, email: str, phone: str, address: str, status: str) -> None:
        errors = collect_student_errors(name=name, email=email, phone=phone, address=address, status=status)
        if errors:
            raise ValidationError("\n".join(errors))

    def add(
        self,
        *,
        institute_id: int,
        name: str,
        email: str,
        phone: str,
        address: str,
        status: str = RecordStatus.ACTIVE.value,
        institute_name: str = "",
        send_welcome: bool = True,
        build_qr_url: Optional[Callable[[int], str]] = None,
    ) -> NewStudent:
        if not institute_id:
            raise ValidationError("No institute found for this user")
        self._validate(name=name, email=email, phone=phone, address=address, status=status)

        student_id = self._students.create(
            institute_id=int(institute_id),
            name=name.strip(),
            email=email.strip(),
            phone=phone.strip(),
            address=address.strip(),
            status=RecordStatus(status.strip().lower()),
        )
        student = self._students.get_by_id(student_id)
        if not student:
            raise NotFoundError("Student not found")
        logger.info("Student %s added to institute %s", student_id, institute_id)

        sent = False
        if send_welcome and self._notifications:
            qr_url = build_qr_url(student_id) if build_qr_url else self.qr_data_url(student_id)
            sent = self._notifications.send_student_welcome(student, institute_name=institute_name, qr_code_url=qr_url)

        return NewStudent(student=student, qr_payload=build_student_payload(student_id), welcome_sent=sent)

    def get(self, student_id: int, *, current_institute_id: Optional[int] = None) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError("Student not found")
        if current_institute_id is not None and student.institute_id != int(current_institute_id):
            raise AuthorizationError("You do not have access to this student")
        return student

    def update(self, student_id: int, *, current_institute_id: Optional[int] = None, **changes) -> Student:
        current = self.get(student_id, current_institute_id=current_institute_id)

        merged = {
            "name": current.name,
            "email": current.email,
            "phone": current.phone or "",
            "address": current.address or "",
            "status": current.status.value,
        }
        fields = {k: v for k, v in changes.items() if k in _UPDATABLE and v is not None}
        if not fields:
            raise ValidationError("Nothing to update")
        merged.update(fields)
        self._validate(**merged)

        clean = {k: str(merged[k]).strip() for k in fields}
        if "status" in clean:
            clean["status"] = RecordStatus(clean["status"].lower())
        self._students.update(int(student_id), clean)
        return self.get(student_id)

    def delete(self, student_id: int, *, current_institute_id: Optional[int] = None) -> None:
        """Hard delete; enrollments and attendance records keep the dangling id."""
        self.get(student_id, current_institute_id=current_institute_id)
        if not self._students.delete_by_id(int(student_id)):
            raise ValidationError("Failed to delete student")
        logger.info("Student %s deleted", student_id)

    def list_all(self) -> Sequence[Student]:
        return self._students.list_all()

    def list_by_institute(self, institute_id: int, *, active_only: bool = False) -> Sequence[Student]:
        status = RecordStatus.ACTIVE if active_only else None
        return self._students.list_by_institute(int(institute_id), status=status)

    def get_many(self, student_ids: Sequence[int]) -> Sequence[Student]:
        return self._students.get_many(student_ids)

    @staticmethod
    def qr_payload(student_id: int) -> str:
        return build_student_payload(int(student_id))

    def qr_png(self, student_id: int, *, current_institute_id: Optional[int] = None) -> bytes:
        self.get(student_id, current_institute_id=current_institute_id)
        return render_png(self.qr_payload(student_id))

    def qr_data_url(self, student_id: int) -> str:
        return to_data_url(render_png(self.qr_payload(student_id)))
