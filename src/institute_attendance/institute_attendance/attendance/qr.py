"""QR payloads used by the attendance flow.

Two formats are accepted:

* session codes shown by the teacher and scanned by a student, a compact
  JSON object ``{"sessionId", "classId", "type": "attendance", "timestamp"}``;
* student codes emailed to each student and scanned by the teacher,
  the plain text ``STUDENT_ID:<id>``.
"""
from __future__ import annotations

import base64
import io
import json
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Union

import qrcode
from PIL import Image

from ..common.datetime_utils import to_epoch_millis
from ..core.constants import QR_PAYLOAD_TYPE, STUDENT_QR_PREFIX
from ..core.exceptions import INVALID_QR, AttendanceError


@dataclass(frozen=True)
class SessionQR:
    session_id: int
    class_id: int
    timestamp: int


@dataclass(frozen=True)
class StudentQR:
    student_id: int


QRPayload = Union[SessionQR, StudentQR]


def build_session_payload(session_id: int, class_id: int, now: datetime) -> str:
    return json.dumps(
        {
            "sessionId": str(session_id),
            "classId": str(class_id),
            "type": QR_PAYLOAD_TYPE,
            "timestamp": to_epoch_millis(now),
        },
        separators=(",", ":"),
    )


def build_student_payload(student_id: int) -> str:
    return f"{STUDENT_QR_PREFIX}{student_id}"


def _as_id(value, message: str) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise AttendanceError(INVALID_QR, message)


def parse_payload(text: str) -> QRPayload:
    text = (text or "").strip()

    if text.startswith(STUDENT_QR_PREFIX):
        raw = text[len(STUDENT_QR_PREFIX):].strip()
        if not raw:
            raise AttendanceError(INVALID_QR, "Invalid student ID in QR.")
        return StudentQR(student_id=_as_id(raw, "Invalid student ID in QR."))

    try:
        data = json.loads(text)
    except ValueError:
        raise AttendanceError(INVALID_QR, "Invalid QR code format")

    if (
        not isinstance(data, dict)
        or not data.get("sessionId")
        or not data.get("classId")
        or data.get("type") != QR_PAYLOAD_TYPE
    ):
        raise AttendanceError(INVALID_QR, "This is not a valid attendance QR code")

    message = "This is not a valid attendance QR code"
    return SessionQR(
        session_id=_as_id(data["sessionId"], message),
        class_id=_as_id(data["classId"], message),
        timestamp=_as_id(data.get("timestamp") or 0, message),
    )


def render_png(text: str, *, box_size: int = 10, border: int = 2) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(text)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(png: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def decode_image(stream: BinaryIO) -> str:
    """Return the text of the first QR code found in an uploaded image."""
    # zbar is a system library; only the upload endpoint needs it.
    from pyzbar.pyzbar import decode as pyzbar_decode

    img = Image.open(stream).convert("RGB")
    decoded = pyzbar_decode(img)
    if not decoded:
        raise AttendanceError(INVALID_QR, "No QR code detected in the image")
    return decoded[0].data.decode("utf-8").strip()
