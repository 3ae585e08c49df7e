from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from types import SimpleNamespace
from typing import Any, Iterable, Optional, Sequence

import pytest

from institute_attendance.attendance.model import AttendanceRecord, AttendanceSession
from institute_attendance.classes.model import ClassRoom
from institute_attendance.container import build_services
from institute_attendance.core.enums import AttendanceStatus, MarkingMethod, RecordStatus, SessionStatus
from institute_attendance.enrollments.model import ClassStudent
from institute_attendance.institutes.model import Institute
from institute_attendance.notifications.email_client import EmailSettings
from institute_attendance.students.model import Student
from institute_attendance.teachers.model import Teacher

os.environ.setdefault("APP_ENV", "testing")


class InMemoryInstitutes:
    def __init__(self):
        self.items: dict[int, Institute] = {}
        self._id = 0

    def get_by_id(self, institute_id: int) -> Optional[Institute]:
        return self.items.get(institute_id)

    def get_by_email(self, email: str) -> Optional[Institute]:
        for i in self.items.values():
            if i.email.lower() == email.lower():
                return i
        return None

    def create(self, *, institute_name: str, email: str, password_hash: str) -> int:
        self._id += 1
        self.items[self._id] = Institute(
            institute_id=self._id,
            institute_name=institute_name,
            email=email,
            password_hash=password_hash,
        )
        return self._id

    def set_email_verified(self, institute_id: int) -> bool:
        if institute_id not in self.items:
            return False
        self.items[institute_id] = replace(self.items[institute_id], email_verified=True)
        return True


class InMemoryTeachers:
    def __init__(self):
        self.items: dict[int, Teacher] = {}
        self._id = 0

    def get_by_id(self, teacher_id: int) -> Optional[Teacher]:
        return self.items.get(teacher_id)

    def create(self, *, institute_id: int, name: str, email: str, phone: Optional[str], status: RecordStatus) -> int:
        self._id += 1
        self.items[self._id] = Teacher(
            teacher_id=self._id, institute_id=institute_id, name=name, email=email, phone=phone, status=status
        )
        return self._id

    def update(self, teacher_id: int, fields: dict[str, Any]) -> bool:
        self.items[teacher_id] = replace(self.items[teacher_id], **fields)
        return True

    def list_all(self) -> Sequence[Teacher]:
        return list(self.items.values())

    def list_by_institute(self, institute_id: int) -> Sequence[Teacher]:
        return [t for t in self.items.values() if t.institute_id == institute_id]


class InMemoryStudents:
    def __init__(self):
        self.items: dict[int, Student] = {}
        self._id = 0

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.items.get(student_id)

    def get_many(self, student_ids: Iterable[int]) -> Sequence[Student]:
        found = [self.items[i] for i in set(student_ids) if i in self.items]
        return sorted(found, key=lambda s: s.name)

    def create(
        self,
        *,
        institute_id: int,
        name: str,
        email: str,
        phone: Optional[str],
        address: Optional[str],
        status: RecordStatus,
    ) -> int:
        self._id += 1
        self.items[self._id] = Student(
            student_id=self._id,
            institute_id=institute_id,
            name=name,
            email=email,
            phone=phone,
            address=address,
            status=status,
        )
        return self._id

    def update(self, student_id: int, fields: dict[str, Any]) -> bool:
        self.items[student_id] = replace(self.items[student_id], **fields)
        return True

    def delete_by_id(self, student_id: int) -> bool:
        return self.items.pop(student_id, None) is not None

    def list_all(self) -> Sequence[Student]:
        return list(self.items.values())

    def list_by_institute(self, institute_id: int, *, status: Optional[RecordStatus] = None) -> Sequence[Student]:
        return [
            s
            for s in self.items.values()
            if s.institute_id == institute_id and (status is None or s.status == status)
        ]


class InMemoryClasses:
    def __init__(self):
        self.items: dict[int, ClassRoom] = {}
        self._id = 0

    def get_by_id(self, class_id: int) -> Optional[ClassRoom]:
        return self.items.get(class_id)

    def create(self, *, institute_id: int, teacher_id: int, name: str, status: RecordStatus) -> int:
        self._id += 1
        self.items[self._id] = ClassRoom(
            class_id=self._id, institute_id=institute_id, teacher_id=teacher_id, name=name, status=status
        )
        return self._id

    def update(self, class_id: int, fields: dict[str, Any]) -> bool:
        self.items[class_id] = replace(self.items[class_id], **fields)
        return True

    def list_all(self) -> Sequence[ClassRoom]:
        return list(self.items.values())

    def list_by_teacher(self, teacher_id: int) -> Sequence[ClassRoom]:
        return [c for c in self.items.values() if c.teacher_id == teacher_id]

    def list_by_institute(self, institute_id: int) -> Sequence[ClassRoom]:
        return [c for c in self.items.values() if c.institute_id == institute_id]


class InMemoryEnrollments:
    def __init__(self):
        self.items: dict[int, ClassStudent] = {}
        self._id = 0

    def find(self, *, class_id: int, student_id: int) -> Optional[ClassStudent]:
        rows = [r for r in self.items.values() if r.class_id == class_id and r.student_id == student_id]
        rows.sort(key=lambda r: r.status != RecordStatus.ACTIVE)
        return rows[0] if rows else None

    def create(
        self, *, class_id: int, student_id: int, institute_id: int, assigned_at: datetime, assigned_by: str
    ) -> int:
        self._id += 1
        self.items[self._id] = ClassStudent(
            assignment_id=self._id,
            class_id=class_id,
            student_id=student_id,
            institute_id=institute_id,
            status=RecordStatus.ACTIVE,
            assigned_at=assigned_at,
            assigned_by=assigned_by,
        )
        return self._id

    def create_many(
        self,
        *,
        class_id: int,
        student_ids: Sequence[int],
        institute_id: int,
        assigned_at: datetime,
        assigned_by: str,
    ) -> list[int]:
        return [
            self.create(
                class_id=class_id,
                student_id=sid,
                institute_id=institute_id,
                assigned_at=assigned_at,
                assigned_by=assigned_by,
            )
            for sid in student_ids
        ]

    def reactivate(self, assignment_id: int, *, assigned_at: datetime, assigned_by: str) -> bool:
        self.items[assignment_id] = replace(
            self.items[assignment_id], status=RecordStatus.ACTIVE, assigned_at=assigned_at, assigned_by=assigned_by
        )
        return True

    def deactivate(self, *, class_id: int, student_id: int) -> int:
        count = 0
        for k, r in list(self.items.items()):
            if r.class_id == class_id and r.student_id == student_id and r.status == RecordStatus.ACTIVE:
                self.items[k] = replace(r, status=RecordStatus.INACTIVE)
                count += 1
        return count

    def list_for_class(self, class_id: int, *, status: Optional[RecordStatus] = RecordStatus.ACTIVE):
        return [r for r in self.items.values() if r.class_id == class_id and (status is None or r.status == status)]

    def list_for_student(self, student_id: int, *, status: Optional[RecordStatus] = RecordStatus.ACTIVE):
        return [
            r for r in self.items.values() if r.student_id == student_id and (status is None or r.status == status)
        ]


class InMemoryAttendance:
    def __init__(self):
        self.sessions: dict[int, AttendanceSession] = {}
        self.records: dict[int, AttendanceRecord] = {}
        self._session_id = 0
        self._record_id = 0

    def create_session(
        self,
        *,
        class_id: int,
        teacher_id: int,
        student_ids: Sequence[int],
        session_date: date,
        start_time: datetime,
        qr_expiry: datetime,
    ) -> int:
        self._session_id += 1
        self.sessions[self._session_id] = AttendanceSession(
            session_id=self._session_id,
            class_id=class_id,
            teacher_id=teacher_id,
            student_ids=tuple(student_ids),
            session_date=session_date,
            start_time=start_time,
            status=SessionStatus.ACTIVE,
            qr_code="",
            qr_expiry=qr_expiry,
            created_at=start_time,
            updated_at=start_time,
        )
        return self._session_id

    def get_session(self, session_id: int) -> Optional[AttendanceSession]:
        return self.sessions.get(session_id)

    def get_active_session(self, class_id: int) -> Optional[AttendanceSession]:
        active = [s for s in self.sessions.values() if s.class_id == class_id and s.status == SessionStatus.ACTIVE]
        active.sort(key=lambda s: s.start_time, reverse=True)
        return active[0] if active else None

    def update_session(self, session_id: int, fields: dict[str, Any]) -> bool:
        if session_id not in self.sessions:
            return False
        self.sessions[session_id] = replace(self.sessions[session_id], **fields)
        return True

    def list_sessions_for_class(self, class_id: int, *, start_date=None, end_date=None):
        rows = [
            s
            for s in self.sessions.values()
            if s.class_id == class_id
            and (start_date is None or s.session_date >= start_date)
            and (end_date is None or s.session_date <= end_date)
        ]
        rows.sort(key=lambda s: s.start_time, reverse=True)
        return rows

    def find_record(self, *, session_id: int, student_id: int) -> Optional[AttendanceRecord]:
        for r in self.records.values():
            if r.session_id == session_id and r.student_id == student_id:
                return r
        return None

    def create_record(
        self,
        *,
        session_id: int,
        class_id: Optional[int],
        student_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
        location: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        self._record_id += 1
        self.records[self._record_id] = AttendanceRecord(
            record_id=self._record_id,
            session_id=session_id,
            class_id=class_id,
            student_id=student_id,
            status=status,
            marked_at=marked_at,
            marked_by=marked_by,
            location=location,
            notes=notes,
        )
        return self._record_id

    def create_records(
        self,
        *,
        session_id: int,
        class_id: Optional[int],
        student_ids: Sequence[int],
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
    ) -> int:
        for sid in student_ids:
            self.create_record(
                session_id=session_id,
                class_id=class_id,
                student_id=sid,
                status=status,
                marked_at=marked_at,
                marked_by=marked_by,
            )
        return len(student_ids)

    def update_record(
        self,
        *,
        record_id: int,
        status: AttendanceStatus,
        marked_at: datetime,
        marked_by: MarkingMethod,
        notes: Optional[str] = None,
    ) -> bool:
        r = self.records[record_id]
        self.records[record_id] = replace(
            r, status=status, marked_at=marked_at, marked_by=marked_by, notes=notes if notes is not None else r.notes
        )
        return True

    def list_records(self, session_id: int) -> Sequence[AttendanceRecord]:
        rows = [r for r in self.records.values() if r.session_id == session_id]
        rows.sort(key=lambda r: (r.marked_at, r.record_id), reverse=True)
        return rows

    def list_records_for_sessions(self, session_ids: Sequence[int]) -> Sequence[AttendanceRecord]:
        wanted = set(session_ids)
        rows = [r for r in self.records.values() if r.session_id in wanted]
        rows.sort(key=lambda r: (r.marked_at, r.record_id), reverse=True)
        return rows


@dataclass
class FakeResponse:
    status_code: int = 200
    text: str = "OK"

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


@dataclass
class FakeHttpSession:
    """Stands in for ``requests.Session``; records every POST."""

    response: FakeResponse = field(default_factory=FakeResponse)
    error: Optional[Exception] = None
    posts: list[dict] = field(default_factory=list)

    def post(self, url, *, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.error:
            raise self.error
        return self.response


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 9, 0, 0)


@pytest.fixture
def email_settings() -> EmailSettings:
    return EmailSettings(
        service_id="service_test",
        template_id="template_test",
        public_key="public_test",
        verify_template_id="template_verify",
    )


@pytest.fixture
def http_session() -> FakeHttpSession:
    return FakeHttpSession()


@pytest.fixture
def repos():
    return SimpleNamespace(
        institutes=InMemoryInstitutes(),
        teachers=InMemoryTeachers(),
        students=InMemoryStudents(),
        classes=InMemoryClasses(),
        enrollments=InMemoryEnrollments(),
        attendance=InMemoryAttendance(),
    )


@pytest.fixture
def container(repos, email_settings, http_session):
    return build_services(
        institutes_repo=repos.institutes,
        teachers_repo=repos.teachers,
        students_repo=repos.students,
        classes_repo=repos.classes,
        enrollments_repo=repos.enrollments,
        attendance_repo=repos.attendance,
        secret_key="test-secret",
        email_settings=email_settings,
        email_session=http_session,
    )


@pytest.fixture
def school(container, repos, fixed_now):
    """One institute with a teacher, a class and three enrolled students."""
    institute_id = repos.institutes.create(
        institute_name="Demo Institute", email="admin@demo.edu", password_hash="x"
    )
    teacher_id = container.teacher_service.register(
        institute_id=institute_id, name="Alice Teacher", email="alice@demo.edu", phone="0123456789"
    )
    class_id = container.class_service.register(institute_id=institute_id, teacher_id=teacher_id, name="Math 101")

    student_ids = []
    for i, name in enumerate(["Bob", "Carol", "Dave"]):
        student_ids.append(
            repos.students.create(
                institute_id=institute_id,
                name=name,
                email=f"{name.lower()}@demo.edu",
                phone=f"012345678{i}",
                address="1 Main Street",
                status=RecordStatus.ACTIVE,
            )
        )
    for sid in student_ids:
        container.enrollment_service.assign(
            class_id=class_id, student_id=sid, institute_id=institute_id, assigned_by="admin", now=fixed_now
        )

    return SimpleNamespace(
        institute_id=institute_id,
        teacher_id=teacher_id,
        class_id=class_id,
        student_ids=student_ids,
    )
