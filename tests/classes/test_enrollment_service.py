from __future__ import annotations

import pytest

from institute_attendance.core.enums import RecordStatus
from institute_attendance.core.exceptions import ValidationError


def test_assign_twice_is_rejected(container, school, fixed_now):
    with pytest.raises(ValidationError, match="already assigned"):
        container.enrollment_service.assign(
            class_id=school.class_id,
            student_id=school.student_ids[0],
            institute_id=school.institute_id,
            assigned_by="admin",
            now=fixed_now,
        )


def test_remove_then_reassign_reactivates_same_row(container, school, fixed_now):
    sid = school.student_ids[0]
    before = container.enrollment_service.classes_for_student(sid)[0]

    container.enrollment_service.remove(class_id=school.class_id, student_id=sid)
    assert sid not in container.enrollment_service.student_ids_in_class(school.class_id)

    result = container.enrollment_service.assign(
        class_id=school.class_id, student_id=sid, institute_id=school.institute_id, assigned_by="admin", now=fixed_now
    )
    assert result.reactivated is True
    assert result.assignment_id == before.assignment_id
    assert result.message == "Student re-assigned to class successfully"


def test_remove_unknown_assignment(container, school):
    with pytest.raises(ValidationError, match="Student assignment not found"):
        container.enrollment_service.remove(class_id=school.class_id, student_id=999)


def test_stats(container, school):
    container.enrollment_service.remove(class_id=school.class_id, student_id=school.student_ids[0])

    stats = container.enrollment_service.stats(school.class_id)

    assert (stats.active_students, stats.removed_students, stats.total_assignments) == (2, 1, 3)


def test_unassigned_students(container, repos, school):
    newcomer = repos.students.create(
        institute_id=school.institute_id,
        name="Eve",
        email="eve@demo.edu",
        phone="0123456780",
        address="2 Side Street",
        status=RecordStatus.ACTIVE,
    )

    unassigned = container.enrollment_service.unassigned_students(
        class_id=school.class_id, institute_id=school.institute_id
    )

    assert [s.student_id for s in unassigned] == [newcomer]


def test_bulk_assign_skips_existing_rows(container, repos, school, fixed_now):
    newcomer = repos.students.create(
        institute_id=school.institute_id,
        name="Eve",
        email="eve@demo.edu",
        phone="0123456780",
        address="2 Side Street",
        status=RecordStatus.ACTIVE,
    )

    pairs = container.enrollment_service.bulk_assign(
        class_id=school.class_id,
        student_ids=[school.student_ids[0], newcomer, newcomer],
        institute_id=school.institute_id,
        assigned_by="admin",
        now=fixed_now,
    )

    assert [sid for sid, _ in pairs] == [newcomer]

    with pytest.raises(ValidationError, match="All students are already assigned to this class"):
        container.enrollment_service.bulk_assign(
            class_id=school.class_id,
            student_ids=school.student_ids,
            institute_id=school.institute_id,
            assigned_by="admin",
            now=fixed_now,
        )
