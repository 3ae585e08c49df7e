from __future__ import annotations

from flask import Flask

from ..common.web import current_institute_id, login_required, ok, optional_text, request_data
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teachers", methods=["GET"], endpoint="list_teachers")
    @login_required
    def list_teachers():
        teachers = container.teacher_service.list_by_institute(current_institute_id())
        return ok(teachers=teachers)

    @app.route("/api/teachers", methods=["POST"], endpoint="add_teacher")
    @login_required
    def add_teacher():
        data = request_data()
        teacher_id = container.teacher_service.register(
            institute_id=current_institute_id(),
            name=optional_text(data.get("name"), "name") or "",
            email=optional_text(data.get("email"), "email") or "",
            phone=optional_text(data.get("phone"), "phone"),
            status=optional_text(data.get("status"), "status"),
        )
        return ok("Teacher added successfully!", 201, teacher_id=teacher_id)

    @app.route("/api/teachers/<int:teacher_id>", methods=["GET"], endpoint="get_teacher")
    @login_required
    def get_teacher(teacher_id: int):
        teacher = container.teacher_service.get(teacher_id, current_institute_id=current_institute_id())
        classes = container.class_service.list_by_teacher(teacher_id)
        return ok(teacher=teacher, classes=classes)

    @app.route("/api/teachers/<int:teacher_id>", methods=["PUT", "PATCH"], endpoint="update_teacher")
    @login_required
    def update_teacher(teacher_id: int):
        data = request_data()
        teacher = container.teacher_service.update(
            teacher_id,
            current_institute_id=current_institute_id(),
            name=optional_text(data.get("name"), "name"),
            email=optional_text(data.get("email"), "email"),
            phone=optional_text(data.get("phone"), "phone"),
            status=optional_text(data.get("status"), "status"),
        )
        return ok("Teacher updated successfully!", teacher=teacher)

    @app.route("/api/teachers/<int:teacher_id>", methods=["DELETE"], endpoint="delete_teacher")
    @login_required
    def delete_teacher(teacher_id: int):
        container.teacher_service.delete(teacher_id, current_institute_id=current_institute_id())
        return ok("Teacher deactivated.")
