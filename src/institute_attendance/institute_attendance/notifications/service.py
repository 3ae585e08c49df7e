from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .email_client import EmailClient

if TYPE_CHECKING:
    from ..institutes.model import Institute
    from ..students.model import Student

logger = logging.getLogger(__name__)


class NotificationService:
    """Fixed-template emails sent on behalf of an institute."""

    def __init__(self, client: EmailClient):
        self._client = client

    def send_student_welcome(self, student: "Student", *, institute_name: str, qr_code_url: str) -> bool:
        return self._client.send(
            {
                "institute_name": institute_name or "Your Institute",
                "student_name": student.name,
                "qr_code_image": qr_code_url,
                "student_id": str(student.student_id),
                "title": "Welcome to the Institute",
                "email": student.email,
                "name": "Admin",
            }
        )

    def send_verification(self, institute: "Institute", verify_url: str) -> bool:
        template_id = self._client.settings.verify_template_id
        if not template_id:
            logger.warning("Verification template not configured; skipping email to %s", institute.email)
            return False
        return self._client.send(
            {
                "institute_name": institute.institute_name,
                "email": institute.email,
                "name": institute.institute_name,
                "title": "Verify your email",
                "verify_url": verify_url,
            },
            template_id=template_id,
        )
