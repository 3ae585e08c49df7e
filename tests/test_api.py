from __future__ import annotations

import io

import pytest
from werkzeug.security import generate_password_hash

from institute_attendance.core.enums import RecordStatus
from institute_attendance.main import create_app


@pytest.fixture
def app(container):
    app = create_app(container=container)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def institute(repos):
    return repos.institutes.create(
        institute_name="Demo Institute", email="admin@demo.edu", password_hash=generate_password_hash("admin123")
    )


@pytest.fixture
def logged_in(client, institute):
    resp = client.post("/api/auth/login", json={"email": "admin@demo.edu", "password": "admin123"})
    assert resp.status_code == 200
    return client


def test_login_failure_is_401(client, institute):
    resp = client.post("/api/auth/login", json={"email": "admin@demo.edu", "password": "wrong-pass"})

    assert resp.status_code == 401
    assert resp.get_json() == {"success": False, "message": "Please check your email and password!"}


def test_routes_require_login(client):
    resp = client.get("/api/students")
    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


def test_register_institute(client):
    resp = client.post(
        "/api/auth/register",
        json={
            "institute_name": "Sunrise",
            "email": "office@sunrise.edu",
            "password": "secret1",
            "confirm_password": "secret1",
        },
    )
    assert resp.status_code == 201
    assert resp.get_json()["success"] is True


def test_student_crud_and_duplicate_email(logged_in):
    body = {"name": "Bob", "email": "bob@demo.edu", "phone": "0123456789", "address": "12 Long Road"}

    first = logged_in.post("/api/students", json=body)
    second = logged_in.post("/api/students", json=body)

    assert first.status_code == 201
    assert second.status_code == 201
    student = first.get_json()["student"]
    assert "password_hash" not in student
    assert student["status"] == "active"

    listing = logged_in.get("/api/students").get_json()["students"]
    assert len(listing) == 2

    bad = logged_in.post("/api/students", json={**body, "phone": "12"})
    assert bad.status_code == 400
    assert bad.get_json()["message"] == "Invalid phone number"

    resp = logged_in.delete(f"/api/students/{student['student_id']}")
    assert resp.status_code == 200
    assert logged_in.get(f"/api/students/{student['student_id']}").status_code == 404


def test_other_institutes_data_is_forbidden(logged_in, repos):
    foreign = repos.students.create(
        institute_id=99,
        name="Zed",
        email="zed@other.edu",
        phone="0123456789",
        address="9 Far Away",
        status=RecordStatus.ACTIVE,
    )
    assert logged_in.get(f"/api/students/{foreign}").status_code == 403


def _setup_class(client):
    teacher = client.post("/api/teachers", json={"name": "Alice", "email": "alice@demo.edu"}).get_json()
    cls = client.post("/api/classes", json={"name": "Math", "teacher_id": teacher["teacher_id"]}).get_json()
    student = client.post(
        "/api/students",
        json={"name": "Bob", "email": "bob@demo.edu", "phone": "0123456789", "address": "12 Long Road"},
    ).get_json()["student"]
    resp = client.post(f"/api/classes/{cls['class_id']}/students", json={"student_id": student["student_id"]})
    assert resp.status_code == 201
    return cls["class_id"], student["student_id"]


def test_attendance_flow_over_http(logged_in):
    class_id, student_id = _setup_class(logged_in)

    started = logged_in.post(f"/api/classes/{class_id}/sessions", json={})
    assert started.status_code == 201
    session = started.get_json()["session"]
    assert session["student_ids"] == [student_id]

    again = logged_in.post(f"/api/classes/{class_id}/sessions", json={}).get_json()
    assert again["session"]["session_id"] == session["session_id"]

    png = logged_in.get(f"/api/sessions/{session['session_id']}/qr.png")
    assert png.mimetype == "image/png"

    # Student side: no login needed.
    anon = logged_in.application.test_client()
    marked = anon.post("/api/attendance/scan", json={"qr_data": session["qr_code"], "student_id": student_id})
    assert marked.status_code == 200
    assert marked.get_json()["record"]["status"] == "present"

    dup = anon.post("/api/attendance/scan", json={"qr_data": session["qr_code"], "student_id": student_id})
    assert dup.status_code == 400
    assert dup.get_json() == {"success": False, "message": "already marked", "code": "ALREADY_MARKED"}

    summary = logged_in.get(f"/api/sessions/{session['session_id']}").get_json()["summary"]
    assert summary["present_count"] == 1

    ended = logged_in.post(f"/api/sessions/{session['session_id']}/end", json={"mark_absent": True})
    assert ended.get_json()["session"]["status"] == "completed"

    stats = logged_in.get(f"/api/classes/{class_id}/statistics").get_json()["statistics"]
    assert stats["average_attendance"] == 100


def test_teacher_scans_student_code(logged_in):
    class_id, student_id = _setup_class(logged_in)
    session = logged_in.post(f"/api/classes/{class_id}/sessions", json={}).get_json()["session"]

    resp = logged_in.post(
        f"/api/sessions/{session['session_id']}/scan-student", json={"qr_data": f"STUDENT_ID:{student_id}"}
    )

    assert resp.status_code == 200
    assert resp.get_json()["message"] == "Attendance marked for Bob"


def test_scan_rejects_garbage(client):
    resp = client.post("/api/attendance/scan", json={"qr_data": "hello", "student_id": 1})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "INVALID_QR"


def test_report_csv(logged_in):
    class_id, student_id = _setup_class(logged_in)
    session = logged_in.post(f"/api/classes/{class_id}/sessions", json={}).get_json()["session"]
    logged_in.post(
        f"/api/sessions/{session['session_id']}/records", json={"student_id": student_id, "status": "late"}
    )

    resp = logged_in.get(f"/api/classes/{class_id}/report.csv")

    assert resp.mimetype == "text/csv"
    text = resp.data.decode("utf-8-sig")
    header, row = text.strip().splitlines()
    assert header.startswith("session_date,session_id,student_id,student_name")
    assert ",Bob," in row and ",late," in row


def test_upload_without_image_is_rejected(logged_in):
    class_id, _ = _setup_class(logged_in)
    session = logged_in.post(f"/api/classes/{class_id}/sessions", json={}).get_json()["session"]

    resp = logged_in.post(
        f"/api/sessions/{session['session_id']}/scan-student",
        data={"image": (io.BytesIO(b""), "")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400


def test_scan_rejects_non_text_qr_data(client):
    resp = client.post("/api/attendance/scan", json={"qr_data": {"sessionId": "1"}, "student_id": 1})

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": "qr_data must be text"}


def test_scan_student_rejects_non_text_qr_data(logged_in):
    class_id, _ = _setup_class(logged_in)
    session = logged_in.post(f"/api/classes/{class_id}/sessions", json={}).get_json()["session"]

    resp = logged_in.post(f"/api/sessions/{session['session_id']}/scan-student", json={"qr_data": ["STUDENT_ID:1"]})

    assert resp.status_code == 400
    assert resp.get_json()["success"] is False


def test_update_student_accepts_numeric_phone(logged_in):
    _, student_id = _setup_class(logged_in)

    resp = logged_in.patch(f"/api/students/{student_id}", json={"phone": 9876543210})

    assert resp.status_code == 200
    assert resp.get_json()["student"]["phone"] == "9876543210"

    bad = logged_in.patch(f"/api/students/{student_id}", json={"name": {"first": "Bob"}})
    assert bad.status_code == 400
    assert bad.get_json()["message"] == "name must be text"


def test_update_teacher_rejects_non_text_name(logged_in):
    teacher = logged_in.post("/api/teachers", json={"name": "Alice", "email": "alice@demo.edu"}).get_json()

    resp = logged_in.patch(f"/api/teachers/{teacher['teacher_id']}", json={"name": ["Alice"]})

    assert resp.status_code == 400


def test_ending_a_closed_session_does_not_mark_absent(logged_in):
    class_id, _ = _setup_class(logged_in)
    session = logged_in.post(f"/api/classes/{class_id}/sessions", json={}).get_json()["session"]
    sid = session["session_id"]
    assert logged_in.post(f"/api/sessions/{sid}/cancel", json={}).status_code == 200

    resp = logged_in.post(f"/api/sessions/{sid}/end", json={"mark_absent": True})

    assert resp.status_code == 400
    assert resp.get_json()["code"] == "SESSION_NOT_ACTIVE"
    assert logged_in.get(f"/api/sessions/{sid}/records").get_json()["records"] == []


def test_start_session_rejects_foreign_teacher(logged_in, repos):
    class_id, _ = _setup_class(logged_in)
    foreign = repos.teachers.create(
        institute_id=99, name="Zed", email="zed@other.edu", phone=None, status=RecordStatus.ACTIVE
    )

    resp = logged_in.post(f"/api/classes/{class_id}/sessions", json={"teacher_id": foreign})

    assert resp.status_code == 403
    assert logged_in.get(f"/api/classes/{class_id}/sessions/active").get_json()["session"] is None


def test_add_student_form_can_opt_out_of_welcome_email(logged_in, http_session):
    resp = logged_in.post(
        "/api/students",
        data={
            "name": "Bob",
            "email": "bob@demo.edu",
            "phone": "0123456789",
            "address": "12 Long Road",
            "send_welcome": "false",
        },
    )

    assert resp.status_code == 201
    assert resp.get_json()["welcome_sent"] is False
    assert http_session.posts == []
