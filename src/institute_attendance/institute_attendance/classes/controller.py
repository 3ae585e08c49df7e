from __future__ import annotations

from flask import Flask

from ..common.web import current_institute_id, login_required, ok, optional_int, optional_text, request_data
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _owned_class(class_id: int):
        return container.class_service.get(class_id, current_institute_id=current_institute_id())

    @app.route("/api/classes", methods=["GET"], endpoint="list_classes")
    @login_required
    def list_classes():
        return ok(classes=container.class_service.list_by_institute(current_institute_id()))

    @app.route("/api/classes", methods=["POST"], endpoint="add_class")
    @login_required
    def add_class():
        data = request_data()
        teacher_id = optional_int(data.get("teacher_id"), "teacher_id")
        if teacher_id is not None:
            container.teacher_service.get(teacher_id, current_institute_id=current_institute_id())

        class_id = container.class_service.register(
            institute_id=current_institute_id(),
            teacher_id=teacher_id,
            name=optional_text(data.get("name"), "name") or "",
            status=optional_text(data.get("status"), "status"),
        )
        return ok("Class added successfully!", 201, class_id=class_id)

    @app.route("/api/classes/<int:class_id>", methods=["GET"], endpoint="get_class")
    @login_required
    def get_class(class_id: int):
        cls = _owned_class(class_id)
        return ok(
            **{"class": cls},
            students=container.enrollment_service.students_in_class(class_id),
            stats=container.enrollment_service.stats(class_id),
        )

    @app.route("/api/classes/<int:class_id>", methods=["PUT", "PATCH"], endpoint="update_class")
    @login_required
    def update_class(class_id: int):
        data = request_data()
        teacher_id = optional_int(data.get("teacher_id"), "teacher_id")
        if teacher_id is not None:
            container.teacher_service.get(teacher_id, current_institute_id=current_institute_id())

        cls = container.class_service.update(
            class_id,
            current_institute_id=current_institute_id(),
            name=optional_text(data.get("name"), "name"),
            teacher_id=teacher_id,
            status=optional_text(data.get("status"), "status"),
        )
        return ok("Class updated successfully!", **{"class": cls})

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="delete_class")
    @login_required
    def delete_class(class_id: int):
        container.class_service.delete(class_id, current_institute_id=current_institute_id())
        return ok("Class deactivated.")
