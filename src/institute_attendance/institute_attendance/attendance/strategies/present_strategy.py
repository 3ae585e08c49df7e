from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import AttendanceSession
from .base import AttendanceStrategy, StatusDecision


class PresentStrategy(AttendanceStrategy):
    """Scan within the late threshold."""

    def decide_scan(self, *, now: datetime, session: AttendanceSession, late_threshold_minutes: int) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT)
