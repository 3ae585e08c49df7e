from __future__ import annotations

import json
import logging
import queue

from flask import Flask, request

from ..common.datetime_utils import parse_optional_date
from ..common.serialization import to_json
from ..common.web import current_institute_id, flag, login_required, ok, optional_int, optional_text, request_data
from ..core.enums import SessionStatus
from ..core.exceptions import SESSION_NOT_ACTIVE, AttendanceError, ValidationError
from ..container import Container
from .qr import StudentQR, decode_image, parse_payload, render_png

logger = logging.getLogger(__name__)

_STREAM_KEEPALIVE_SECONDS = 15


def register(app: Flask, container: Container) -> None:
    def _owned_class(class_id: int):
        return container.class_service.get(class_id, current_institute_id=current_institute_id())

    def _owned_session(session_id: int):
        s = container.attendance_service.get_session(session_id)
        _owned_class(s.class_id)
        return s

    def _uploaded_qr_text() -> str:
        f = request.files.get("image")
        if not f or not f.filename:
            raise ValidationError("Please upload an image containing a QR code")
        return decode_image(f.stream)

    def _qr_text(data) -> str:
        if request.files:
            return _uploaded_qr_text()
        return (optional_text(data.get("qr_data"), "qr_data") or "").strip()

    # Sessions (teacher side)

    @app.route("/api/classes/<int:class_id>/sessions", methods=["POST"], endpoint="start_session")
    @login_required
    def start_session(class_id: int):
        _owned_class(class_id)
        data = request_data()
        existing = container.attendance_service.get_active_session(class_id)
        if existing:
            return ok("An attendance session is already active for this class", session=existing)

        teacher_id = optional_int(data.get("teacher_id"), "teacher_id")
        if teacher_id is not None:
            container.teacher_service.get(teacher_id, current_institute_id=current_institute_id())

        s = container.attendance_service.create_session(class_id, teacher_id)
        return ok("Attendance session started", 201, session=s)

    @app.route("/api/classes/<int:class_id>/sessions/active", methods=["GET"], endpoint="active_session")
    @login_required
    def active_session(class_id: int):
        _owned_class(class_id)
        return ok(session=container.attendance_service.get_active_session(class_id))

    @app.route("/api/classes/<int:class_id>/sessions", methods=["GET"], endpoint="session_history")
    @login_required
    def session_history(class_id: int):
        _owned_class(class_id)
        start = parse_optional_date(request.args.get("start"), "start")
        end = parse_optional_date(request.args.get("end"), "end")
        sessions = container.attendance_service.history(class_id, start_date=start, end_date=end)
        return ok(sessions=sessions)

    @app.route("/api/classes/<int:class_id>/statistics", methods=["GET"], endpoint="attendance_statistics")
    @login_required
    def attendance_statistics(class_id: int):
        _owned_class(class_id)
        start = parse_optional_date(request.args.get("start"), "start")
        end = parse_optional_date(request.args.get("end"), "end")
        stats = container.attendance_service.statistics(class_id, start_date=start, end_date=end)
        return ok(statistics=stats)

    @app.route("/api/sessions/<int:session_id>", methods=["GET"], endpoint="session_summary")
    @login_required
    def session_summary(session_id: int):
        _owned_session(session_id)
        return ok(summary=container.attendance_service.session_summary(session_id))

    @app.route("/api/sessions/<int:session_id>/end", methods=["POST"], endpoint="end_session")
    @login_required
    def end_session(session_id: int):
        s = _owned_session(session_id)
        if s.status != SessionStatus.ACTIVE:
            raise AttendanceError(SESSION_NOT_ACTIVE, "Session not active")

        data = request_data()
        marked_absent = 0
        if flag(data.get("mark_absent")):
            marked_absent = container.attendance_service.mark_absent_students(session_id)
        s = container.attendance_service.end_session(session_id)
        return ok("Attendance session ended", session=s, marked_absent=marked_absent)

    @app.route("/api/sessions/<int:session_id>/cancel", methods=["POST"], endpoint="cancel_session")
    @login_required
    def cancel_session(session_id: int):
        _owned_session(session_id)
        return ok("Attendance session cancelled", session=container.attendance_service.cancel_session(session_id))

    @app.route("/api/sessions/<int:session_id>/refresh-qr", methods=["POST"], endpoint="refresh_qr")
    @login_required
    def refresh_qr(session_id: int):
        _owned_session(session_id)
        s = container.attendance_service.refresh_qr(session_id)
        return ok("QR code refreshed", session=s)

    @app.route("/api/sessions/<int:session_id>/qr.png", methods=["GET"], endpoint="session_qr_png")
    @login_required
    def session_qr_png(session_id: int):
        s = _owned_session(session_id)
        resp = app.response_class(render_png(s.qr_code), mimetype="image/png")
        resp.headers["Cache-Control"] = "no-store"
        return resp

    # Marking

    @app.route("/api/sessions/<int:session_id>/records", methods=["GET"], endpoint="session_records")
    @login_required
    def session_records(session_id: int):
        _owned_session(session_id)
        return ok(records=container.attendance_service.records(session_id))

    @app.route("/api/sessions/<int:session_id>/records", methods=["POST"], endpoint="mark_manually")
    @login_required
    def mark_manually(session_id: int):
        _owned_session(session_id)
        data = request_data()
        student_id = optional_int(data.get("student_id"), "student_id")
        if student_id is None:
            raise ValidationError("Please select a student")
        record = container.attendance_service.mark_manually(
            session_id,
            student_id,
            optional_text(data.get("status"), "status"),
            notes=optional_text(data.get("notes"), "notes"),
        )
        return ok("Attendance updated", record=record)

    @app.route("/api/sessions/<int:session_id>/mark-absent", methods=["POST"], endpoint="mark_absent")
    @login_required
    def mark_absent(session_id: int):
        _owned_session(session_id)
        count = container.attendance_service.mark_absent_students(session_id)
        return ok(f"{count} students marked absent", marked_absent=count)

    @app.route("/api/sessions/<int:session_id>/scan-student", methods=["POST"], endpoint="scan_student")
    @login_required
    def scan_student(session_id: int):
        """Teacher scans a student's personal QR code (JSON body or uploaded image)."""
        _owned_session(session_id)
        qr_data = _qr_text(request_data())
        if not qr_data:
            raise ValidationError("QR code must not be empty")

        record = container.attendance_service.mark_student_qr(session_id, qr_data)
        student = container.student_service.get(record.student_id)
        return ok(f"Attendance marked for {student.name}", record=record, student=student)

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="scan_session_qr")
    def scan_session_qr():
        """Student scans the session QR code shown by the teacher.

        Public: the payload, its expiry and the session's student snapshot are the guard.
        Accepts a JSON body or a multipart upload with an ``image`` field.
        """
        data = request_data()
        qr_data = _qr_text(data)
        if not qr_data:
            raise ValidationError("QR code must not be empty")
        if isinstance(parse_payload(qr_data), StudentQR):
            raise ValidationError("This is a student QR code; scan it from the session screen")

        student_id = optional_int(data.get("student_id"), "student_id")
        if student_id is None:
            raise ValidationError("Please enter your student ID")

        location = None
        if data.get("latitude") not in (None, "") and data.get("longitude") not in (None, ""):
            location = (optional_text(data["latitude"], "latitude"), optional_text(data["longitude"], "longitude"))

        record = container.attendance_service.mark_by_qr(qr_data, student_id, location=location)
        return ok("Attendance marked successfully!", record=record)

    # Real-time

    @app.route("/api/sessions/<int:session_id>/stream", methods=["GET"], endpoint="session_stream")
    @login_required
    def session_stream(session_id: int):
        """Server-Sent Events: the full record list after every change."""
        _owned_session(session_id)
        updates: "queue.Queue" = queue.Queue()
        unsubscribe = container.attendance_service.subscribe(session_id, updates.put)

        def generate():
            try:
                while True:
                    try:
                        records = updates.get(timeout=_STREAM_KEEPALIVE_SECONDS)
                    except queue.Empty:
                        yield ": keep-alive\n\n"
                        continue
                    yield f"event: records\ndata: {json.dumps(to_json(list(records)))}\n\n"
            finally:
                unsubscribe()
                logger.debug("Record stream for session %s closed", session_id)

        return app.response_class(
            generate(),
            mimetype="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )
