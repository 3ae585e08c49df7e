from __future__ import annotations

from flask import Flask, session

from ..common.web import current_institute_id, login_required, ok, request_data
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _owned_class(class_id: int):
        return container.class_service.get(class_id, current_institute_id=current_institute_id())

    def _assigned_by() -> str:
        return str(session.get("email") or session.get("institute_id"))

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="class_students")
    @login_required
    def class_students(class_id: int):
        _owned_class(class_id)
        ids = container.enrollment_service.student_ids_in_class(class_id)
        return ok(students=container.student_service.get_many(ids))

    @app.route("/api/classes/<int:class_id>/students/unassigned", methods=["GET"], endpoint="unassigned_students")
    @login_required
    def unassigned_students(class_id: int):
        _owned_class(class_id)
        students = container.enrollment_service.unassigned_students(
            class_id=class_id, institute_id=current_institute_id()
        )
        return ok(students=students)

    @app.route("/api/classes/<int:class_id>/students", methods=["POST"], endpoint="assign_student")
    @login_required
    def assign_student(class_id: int):
        _owned_class(class_id)
        data = request_data()
        student_ids = data.get("student_ids")

        if isinstance(student_ids, list):
            for sid in student_ids:
                container.student_service.get(sid, current_institute_id=current_institute_id())
            pairs = container.enrollment_service.bulk_assign(
                class_id=class_id,
                student_ids=student_ids,
                institute_id=current_institute_id(),
                assigned_by=_assigned_by(),
            )
            return ok(
                f"{len(pairs)} students assigned to class successfully",
                201,
                assignments=[{"student_id": s, "assignment_id": a} for s, a in pairs],
            )

        if not data.get("student_id"):
            raise ValidationError("Please select a student")
        student = container.student_service.get(data["student_id"], current_institute_id=current_institute_id())
        result = container.enrollment_service.assign(
            class_id=class_id,
            student_id=student.student_id,
            institute_id=current_institute_id(),
            assigned_by=_assigned_by(),
        )
        return ok(result.message, 201, assignment_id=result.assignment_id, reactivated=result.reactivated)

    @app.route(
        "/api/classes/<int:class_id>/students/<int:student_id>",
        methods=["DELETE"],
        endpoint="remove_student",
    )
    @login_required
    def remove_student(class_id: int, student_id: int):
        _owned_class(class_id)
        container.enrollment_service.remove(class_id=class_id, student_id=student_id)
        return ok("Student removed from class successfully")

    @app.route("/api/classes/<int:class_id>/enrollment-stats", methods=["GET"], endpoint="enrollment_stats")
    @login_required
    def enrollment_stats(class_id: int):
        _owned_class(class_id)
        return ok(stats=container.enrollment_service.stats(class_id))
