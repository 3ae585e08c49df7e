from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.events import RecordFeed
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .classes.mysql_class_repository import MySQLClassRepository
from .classes.service import ClassService
from .core.constants import DEFAULT_LATE_THRESHOLD_MINUTES, DEFAULT_QR_EXPIRY_MINUTES, DEFAULT_VERIFY_TOKEN_MAX_AGE
from .database.connection import DBConfig, DatabaseConnection
from .enrollments.mysql_enrollment_repository import MySQLEnrollmentRepository
from .enrollments.service import EnrollmentService
from .institutes.mysql_institute_repository import MySQLInstituteRepository
from .institutes.service import AuthService
from .notifications.email_client import EmailClient, EmailSettings
from .notifications.service import NotificationService
from .reports.service import AttendanceReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService
from .teachers.mysql_teacher_repository import MySQLTeacherRepository
from .teachers.service import TeacherService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    teacher_service: TeacherService
    student_service: StudentService
    class_service: ClassService
    enrollment_service: EnrollmentService
    attendance_service: AttendanceService
    report_service: AttendanceReportService
    notification_service: NotificationService

    conn: Optional[DatabaseConnection] = None


def build_services(
    *,
    institutes_repo,
    teachers_repo,
    students_repo,
    classes_repo,
    enrollments_repo,
    attendance_repo,
    secret_key: str,
    email_settings: EmailSettings,
    email_session=None,
    qr_expiry_minutes: int = DEFAULT_QR_EXPIRY_MINUTES,
    late_threshold_minutes: int = DEFAULT_LATE_THRESHOLD_MINUTES,
    verify_token_max_age: int = DEFAULT_VERIFY_TOKEN_MAX_AGE,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services over any set of repositories (MySQL in production, fakes in tests)."""
    notification_service = NotificationService(EmailClient(email_settings, session=email_session))
    enrollment_service = EnrollmentService(enrollments_repo, students_repo)

    return Container(
        conn=conn,
        auth_service=AuthService(
            institutes_repo,
            secret_key=secret_key,
            notifications=notification_service,
            token_max_age=verify_token_max_age,
        ),
        teacher_service=TeacherService(teachers_repo),
        student_service=StudentService(students_repo, notifications=notification_service),
        class_service=ClassService(classes_repo),
        enrollment_service=enrollment_service,
        attendance_service=AttendanceService(
            attendance_repo,
            enrollment_service,
            classes_repo,
            strategy_factory=AttendanceStrategyFactory(),
            feed=RecordFeed(),
            qr_expiry_minutes=qr_expiry_minutes,
            late_threshold_minutes=late_threshold_minutes,
        ),
        report_service=AttendanceReportService(attendance_repo, students_repo, enrollment_service),
        notification_service=notification_service,
    )


def build_container(*, db_config: dict, settings=None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    email_settings = EmailSettings(
        service_id=getattr(settings, "EMAILJS_SERVICE_ID", ""),
        template_id=getattr(settings, "EMAILJS_TEMPLATE_ID", ""),
        public_key=getattr(settings, "EMAILJS_PUBLIC_KEY", ""),
        verify_template_id=getattr(settings, "EMAILJS_VERIFY_TEMPLATE_ID", "") or None,
        send_url=getattr(settings, "EMAILJS_SEND_URL", None) or EmailSettings.send_url,
    )

    return build_services(
        conn=conn,
        institutes_repo=MySQLInstituteRepository(conn),
        teachers_repo=MySQLTeacherRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        classes_repo=MySQLClassRepository(conn),
        enrollments_repo=MySQLEnrollmentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        secret_key=str(getattr(settings, "SECRET_KEY", "dev-secret-key")),
        email_settings=email_settings,
        qr_expiry_minutes=int(getattr(settings, "QR_EXPIRY_MINUTES", DEFAULT_QR_EXPIRY_MINUTES)),
        late_threshold_minutes=int(getattr(settings, "LATE_THRESHOLD_MINUTES", DEFAULT_LATE_THRESHOLD_MINUTES)),
        verify_token_max_age=int(getattr(settings, "VERIFY_TOKEN_MAX_AGE", DEFAULT_VERIFY_TOKEN_MAX_AGE)),
    )
