from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length
from ..core.constants import DEFAULT_VERIFY_TOKEN_MAX_AGE, MIN_PASSWORD_LENGTH
from ..core.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..notifications.service import NotificationService
from .model import Institute
from .repository import InstituteRepository

logger = logging.getLogger(__name__)

_VERIFY_SALT = "institute-email-verify"


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    institute_id: int
    institute_name: str
    email: str
    email_verified: bool


@dataclass(frozen=True)
class Registration:
    institute_id: int
    verify_token: str
    verification_sent: bool


class AuthService:
    """Use cases: register an institute, log in, verify its email."""

    def __init__(
        self,
        institutes: InstituteRepository,
        *,
        secret_key: str,
        notifications: Optional[NotificationService] = None,
        token_max_age: int = DEFAULT_VERIFY_TOKEN_MAX_AGE,
    ):
        self._institutes = institutes
        self._serializer = URLSafeTimedSerializer(secret_key, salt=_VERIFY_SALT)
        self._notifications = notifications
        self._token_max_age = int(token_max_age)

    def register(
        self,
        *,
        institute_name: str,
        email: str,
        password: str,
        confirm_password: str,
        build_verify_url: Optional[Callable[[str], str]] = None,
    ) -> Registration:
        if not (institute_name or "").strip() or not (email or "").strip() or not password:
            raise ValidationError("Please fill all fields!")
        email = require_email(email).lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        if password != confirm_password:
            raise ValidationError("Passwords do not match.")

        if self._institutes.get_by_email(email):
            raise ValidationError("Email already registered!")

        institute_id = self._institutes.create(
            institute_name=institute_name.strip(),
            email=email,
            password_hash=generate_password_hash(password),
        )
        token = self.make_verify_token(institute_id)
        logger.info("Registered institute %s (%s)", institute_id, email)

        sent = False
        if self._notifications and build_verify_url:
            institute = self._institutes.get_by_id(institute_id)
            if institute:
                sent = self._notifications.send_verification(institute, build_verify_url(token))
        return Registration(institute_id=institute_id, verify_token=token, verification_sent=sent)

    def authenticate(self, email: str, password: str) -> SessionUser:
        if not (email or "").strip() or not password:
            raise ValidationError("Please enter both email and password!")
        email = require_email(email).lower()
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        institute = self._institutes.get_by_email(email)
        if not institute:
            raise AuthenticationError("Please check your email and password!")

        try:
            ok = check_password_hash(institute.password_hash, password)
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            raise AuthenticationError("Please check your email and password!")

        return SessionUser(
            institute_id=institute.institute_id,
            institute_name=institute.institute_name,
            email=institute.email,
            email_verified=institute.email_verified,
        )

    def make_verify_token(self, institute_id: int) -> str:
        return self._serializer.dumps({"institute_id": int(institute_id)})

    def verify_email(self, token: str) -> Institute:
        try:
            data = self._serializer.loads(token, max_age=self._token_max_age)
        except SignatureExpired:
            raise ValidationError("Verification link has expired")
        except BadSignature:
            raise ValidationError("Invalid verification link")

        institute = self._institutes.get_by_id(int(data["institute_id"]))
        if not institute:
            raise NotFoundError("Institute not found")
        if not institute.email_verified:
            self._institutes.set_email_verified(institute.institute_id)
            logger.info("Institute %s verified its email", institute.institute_id)
        return self._institutes.get_by_id(institute.institute_id) or institute

    def check_email_verified(self, institute_id: int) -> bool:
        institute = self._institutes.get_by_id(int(institute_id))
        if not institute:
            raise NotFoundError("Institute not found")
        return institute.email_verified

    def get_institute(self, institute_id: int) -> Institute:
        institute = self._institutes.get_by_id(int(institute_id))
        if not institute:
            raise NotFoundError("Institute not found")
        return institute
