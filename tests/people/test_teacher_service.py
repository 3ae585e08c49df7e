from __future__ import annotations

import pytest

from institute_attendance.core.enums import RecordStatus
from institute_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError


def test_register_and_list(container):
    teacher_id = container.teacher_service.register(
        institute_id=1, name=" Alice ", email="alice@demo.edu", phone="0123456789"
    )

    teacher = container.teacher_service.get(teacher_id)
    assert teacher.name == "Alice"
    assert teacher.status == RecordStatus.ACTIVE
    assert [t.teacher_id for t in container.teacher_service.list_by_institute(1)] == [teacher_id]
    assert container.teacher_service.list_by_institute(2) == []


def test_register_requires_fields(container):
    with pytest.raises(ValidationError, match="Missing required teacher fields"):
        container.teacher_service.register(institute_id=1, name="", email="a@b.co")
    with pytest.raises(ValidationError, match="Invalid email format"):
        container.teacher_service.register(institute_id=1, name="Al", email="nope")


def test_update_and_soft_delete(container):
    teacher_id = container.teacher_service.register(institute_id=1, name="Alice", email="alice@demo.edu")

    updated = container.teacher_service.update(teacher_id, current_institute_id=1, phone="0999999999")
    assert updated.phone == "0999999999"

    container.teacher_service.delete(teacher_id, current_institute_id=1)
    assert container.teacher_service.get(teacher_id).status == RecordStatus.INACTIVE


def test_other_institute_cannot_touch_teacher(container):
    teacher_id = container.teacher_service.register(institute_id=1, name="Alice", email="alice@demo.edu")

    with pytest.raises(AuthorizationError):
        container.teacher_service.update(teacher_id, current_institute_id=2, name="Mallory")
    with pytest.raises(AuthorizationError):
        container.teacher_service.delete(teacher_id, current_institute_id=2)


def test_get_unknown_teacher(container):
    with pytest.raises(NotFoundError):
        container.teacher_service.get(99)
