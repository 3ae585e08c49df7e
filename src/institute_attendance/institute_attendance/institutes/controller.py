from __future__ import annotations

from datetime import timedelta

from flask import Flask, session, url_for

from ..common.web import current_institute_id, flag, login_required, ok, optional_text, request_data
from ..container import Container


def register(app: Flask, container: Container) -> None:
    def _verify_url(token: str) -> str:
        return url_for("verify_email", token=token, _external=True)

    @app.route("/api/auth/register", methods=["POST"], endpoint="register_institute")
    def register_institute():
        data = request_data()
        result = container.auth_service.register(
            institute_name=optional_text(data.get("institute_name"), "institute_name") or "",
            email=optional_text(data.get("email"), "email") or "",
            password=optional_text(data.get("password"), "password") or "",
            confirm_password=optional_text(data.get("confirm_password"), "confirm_password") or "",
            build_verify_url=_verify_url,
        )
        message = "Registration successful! Please verify your email."
        if not result.verification_sent:
            message = "Registration successful!"
        return ok(message, 201, institute_id=result.institute_id, verification_sent=result.verification_sent)

    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request_data()
        user = container.auth_service.authenticate(
            optional_text(data.get("email"), "email") or "", optional_text(data.get("password"), "password") or ""
        )

        session.permanent = flag(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=7)

        session["institute_id"] = user.institute_id
        session["institute_name"] = user.institute_name
        session["email"] = user.email
        return ok("Login successful!", user=user)

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    def logout():
        session.clear()
        return ok("Logged out.")

    @app.route("/api/auth/me", methods=["GET"], endpoint="me")
    @login_required
    def me():
        institute = container.auth_service.get_institute(current_institute_id())
        return ok(institute=institute)

    @app.route("/api/auth/verify/<token>", methods=["GET"], endpoint="verify_email")
    def verify_email(token: str):
        institute = container.auth_service.verify_email(token)
        return ok("Email verified successfully!", institute=institute)

    @app.route("/api/auth/verified", methods=["GET"], endpoint="email_verified")
    @login_required
    def email_verified():
        return ok(email_verified=container.auth_service.check_email_verified(current_institute_id()))
