from __future__ import annotations

import re
from typing import Optional

from ..core.constants import MIN_ADDRESS_LENGTH, MIN_NAME_LENGTH
from ..core.enums import RecordStatus
from ..core.exceptions import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9]{10}$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters!")
    return value


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_RE.match(value.strip()) is not None


def require_email(value: Optional[str]) -> str:
    if not is_valid_email(value):
        raise ValidationError("Please enter a valid email address!")
    return value.strip()


def parse_record_status(value: Optional[str], *, default: RecordStatus = RecordStatus.ACTIVE) -> RecordStatus:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    if isinstance(value, RecordStatus):
        return value
    try:
        return RecordStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Status must be either 'active' or 'inactive'")


def collect_student_errors(*, name: str, email: str, phone: str, address: str, status: str) -> list[str]:
    """Return every problem with a student form, in display order."""
    errors: list[str] = []
    name = str(name or "").strip()
    email = str(email or "").strip()
    phone = str(phone or "").strip()
    address = str(address or "").strip()
    status = str(status or "").strip()

    if not name:
        errors.append("Name is required")
    elif len(name) < MIN_NAME_LENGTH:
        errors.append(f"Name must be at least {MIN_NAME_LENGTH} characters")

    if not email:
        errors.append("Email is required")
    elif not EMAIL_RE.match(email):
        errors.append("Invalid email format")

    if not phone:
        errors.append("Phone number is required")
    elif not PHONE_RE.match(phone):
        errors.append("Invalid phone number")

    if not address:
        errors.append("Address is required")
    elif len(address) < MIN_ADDRESS_LENGTH:
        errors.append(f"Address must be at least {MIN_ADDRESS_LENGTH} characters")

    if not status:
        errors.append("Status is required")
    elif status.lower() not in {s.value for s in RecordStatus}:
        errors.append("Status must be either 'active' or 'inactive'")

    return errors
