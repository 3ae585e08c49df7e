from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ..model import AttendanceSession
from .base import AttendanceStrategy, StatusDecision


class LateStrategy(AttendanceStrategy):
    """Scan after the late threshold."""

    def decide_scan(self, *, now: datetime, session: AttendanceSession, late_threshold_minutes: int) -> StatusDecision:
        minutes = int((now - session.start_time).total_seconds() // 60)
        return StatusDecision(status=AttendanceStatus.LATE, note=f"Late by {minutes} minutes")
