from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

import requests

from ..core.constants import EMAIL_TIMEOUT_SECONDS, EMAILJS_SEND_URL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailSettings:
    service_id: str
    template_id: str
    public_key: str
    verify_template_id: Optional[str] = None
    send_url: str = EMAILJS_SEND_URL
    timeout: float = EMAIL_TIMEOUT_SECONDS

    @property
    def enabled(self) -> bool:
        return bool(self.service_id and self.template_id and self.public_key)


class EmailClient:
    """Thin client for the transactional email HTTP API.

    Every send is a single POST; failures are logged and reported as False,
    never raised, so a broken mail provider cannot break a registration.
    """

    def __init__(self, settings: EmailSettings, *, session: Optional[requests.Session] = None):
        self._settings = settings
        self._http = session or requests.Session()

    @property
    def settings(self) -> EmailSettings:
        return self._settings

    def send(self, template_params: Mapping[str, Any], *, template_id: Optional[str] = None) -> bool:
        if not self._settings.enabled:
            logger.warning("Email API not configured; skipping send to %s", template_params.get("email"))
            return False

        payload = {
            "service_id": self._settings.service_id,
            "template_id": template_id or self._settings.template_id,
            "user_id": self._settings.public_key,
            "template_params": dict(template_params),
        }
        try:
            response = self._http.post(
                self._settings.send_url,
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self._settings.timeout,
            )
        except requests.RequestException as e:
            logger.error("Email send error: %s", e)
            return False

        if response.ok:
            logger.info("Email sent to %s", template_params.get("email"))
            return True

        logger.error("Email failed (%s): %s", response.status_code, response.text)
        return False
