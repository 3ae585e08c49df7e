from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import RecordStatus
from ..core.exceptions import ValidationError
from ..students.model import Student
from ..students.repository import StudentRepository
from .model import ClassStudent, EnrollmentStats
from .repository import EnrollmentRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssignResult:
    assignment_id: int
    reactivated: bool
    message: str


class EnrollmentService:
    """Use cases around the class ↔ student membership table."""

    def __init__(self, enrollments: EnrollmentRepository, students: StudentRepository):
        self._enrollments = enrollments
        self._students = students

    def assign(
        self,
        *,
        class_id: int,
        student_id: int,
        institute_id: int,
        assigned_by: str,
        now: Optional[datetime] = None,
    ) -> AssignResult:
        now = now or now_local()
        existing = self._enrollments.find(class_id=int(class_id), student_id=int(student_id))

        if existing:
            if existing.status == RecordStatus.ACTIVE:
                raise ValidationError("Student is already assigned to this class")
            self._enrollments.reactivate(existing.assignment_id, assigned_at=now, assigned_by=str(assigned_by))
            return AssignResult(
                assignment_id=existing.assignment_id,
                reactivated=True,
                message="Student re-assigned to class successfully",
            )

        assignment_id = self._enrollments.create(
            class_id=int(class_id),
            student_id=int(student_id),
            institute_id=int(institute_id),
            assigned_at=now,
            assigned_by=str(assigned_by),
        )
        logger.info("Student %s assigned to class %s", student_id, class_id)
        return AssignResult(assignment_id=assignment_id, reactivated=False, message="Student assigned to class successfully")

    def remove(self, *, class_id: int, student_id: int) -> None:
        if self._enrollments.deactivate(class_id=int(class_id), student_id=int(student_id)) == 0:
            raise ValidationError("Student assignment not found")
        logger.info("Student %s removed from class %s", student_id, class_id)

    def students_in_class(self, class_id: int) -> Sequence[ClassStudent]:
        return self._enrollments.list_for_class(int(class_id), status=RecordStatus.ACTIVE)

    def student_ids_in_class(self, class_id: int) -> list[int]:
        return [e.student_id for e in self.students_in_class(class_id)]

    def classes_for_student(self, student_id: int) -> Sequence[ClassStudent]:
        return self._enrollments.list_for_student(int(student_id), status=RecordStatus.ACTIVE)

    def unassigned_students(self, *, class_id: int, institute_id: int) -> list[Student]:
        assigned = set(self.student_ids_in_class(class_id))
        candidates = self._students.list_by_institute(int(institute_id), status=RecordStatus.ACTIVE)
        return [s for s in candidates if s.student_id not in assigned]

    def bulk_assign(
        self,
        *,
        class_id: int,
        student_ids: Sequence[int],
        institute_id: int,
        assigned_by: str,
        now: Optional[datetime] = None,
    ) -> list[tuple[int, int]]:
        """Assign every student that has never been in the class.

        Students with any existing row, active or removed, are skipped.
        Returns ``(student_id, assignment_id)`` pairs.
        """
        now = now or now_local()
        fresh: list[int] = []
        for student_id in dict.fromkeys(int(s) for s in student_ids):
            if self._enrollments.find(class_id=int(class_id), student_id=student_id) is None:
                fresh.append(student_id)

        if not fresh:
            raise ValidationError("All students are already assigned to this class")

        ids = self._enrollments.create_many(
            class_id=int(class_id),
            student_ids=fresh,
            institute_id=int(institute_id),
            assigned_at=now,
            assigned_by=str(assigned_by),
        )
        logger.info("Bulk assigned %d students to class %s", len(ids), class_id)
        return list(zip(fresh, ids))

    def stats(self, class_id: int) -> EnrollmentStats:
        rows = self._enrollments.list_for_class(int(class_id), status=None)
        active = sum(1 for r in rows if r.status == RecordStatus.ACTIVE)
        removed = sum(1 for r in rows if r.status == RecordStatus.INACTIVE)
        return EnrollmentStats(active_students=active, removed_students=removed, total_assignments=active + removed)
