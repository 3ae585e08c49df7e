from __future__ import annotations

from flask import Flask, request, session, url_for

from ..common.web import current_institute_id, flag, login_required, ok, optional_text, request_data
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _qr_url(student_id: int) -> str:
        return url_for("student_qr_png", student_id=student_id, _external=True)

    @app.route("/api/students", methods=["GET"], endpoint="list_students")
    @login_required
    def list_students():
        active_only = flag(request.args.get("active"))
        students = container.student_service.list_by_institute(current_institute_id(), active_only=active_only)
        return ok(students=students)

    @app.route("/api/students", methods=["POST"], endpoint="add_student")
    @login_required
    def add_student():
        data = request_data()
        result = container.student_service.add(
            institute_id=current_institute_id(),
            name=optional_text(data.get("name"), "name") or "",
            email=optional_text(data.get("email"), "email") or "",
            phone=optional_text(data.get("phone"), "phone") or "",
            address=optional_text(data.get("address"), "address") or "",
            status=optional_text(data.get("status"), "status") or "active",
            institute_name=session.get("institute_name", ""),
            send_welcome=flag(data.get("send_welcome"), default=True),
            build_qr_url=_qr_url,
        )
        message = "Student added successfully!"
        if result.welcome_sent:
            message = "Student added successfully! Welcome email sent."
        return ok(
            message,
            201,
            student=result.student,
            qr_payload=result.qr_payload,
            welcome_sent=result.welcome_sent,
        )

    @app.route("/api/students/<int:student_id>", methods=["GET"], endpoint="get_student")
    @login_required
    def get_student(student_id: int):
        student = container.student_service.get(student_id, current_institute_id=current_institute_id())
        classes = container.enrollment_service.classes_for_student(student_id)
        return ok(student=student, classes=classes)

    @app.route("/api/students/<int:student_id>", methods=["PUT", "PATCH"], endpoint="update_student")
    @login_required
    def update_student(student_id: int):
        data = request_data()
        student = container.student_service.update(
            student_id,
            current_institute_id=current_institute_id(),
            name=optional_text(data.get("name"), "name"),
            email=optional_text(data.get("email"), "email"),
            phone=optional_text(data.get("phone"), "phone"),
            address=optional_text(data.get("address"), "address"),
            status=optional_text(data.get("status"), "status"),
        )
        return ok("Student updated successfully!", student=student)

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="delete_student")
    @login_required
    def delete_student(student_id: int):
        container.student_service.delete(student_id, current_institute_id=current_institute_id())
        return ok("Student deleted.")

    @app.route("/api/students/<int:student_id>/qr.png", methods=["GET"], endpoint="student_qr_png")
    def student_qr_png(student_id: int):
        # Public: this link is embedded in the welcome email.
        png = container.student_service.qr_png(student_id)
        return app.response_class(png, mimetype="image/png")
