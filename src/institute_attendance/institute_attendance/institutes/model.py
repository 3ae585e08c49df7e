from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Institute:
    """Domain entity: the tenant that owns teachers, students and classes.

    Plain data object; no database access lives here.
    """

    institute_id: int
    institute_name: str
    email: str
    password_hash: str
    email_verified: bool = False
    created_at: Optional[datetime] = None
