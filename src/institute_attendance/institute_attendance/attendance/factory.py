from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .model import AttendanceSession
from .strategies.base import AttendanceStrategy
from .strategies.late_strategy import LateStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose appropriate strategy based on rules."""

    def for_scan(self, *, now: datetime, session: AttendanceSession, late_threshold_minutes: int) -> AttendanceStrategy:
        if late_threshold_minutes <= 0:
            return PresentStrategy()

        if now <= session.start_time + timedelta(minutes=late_threshold_minutes):
            return PresentStrategy()
        return LateStrategy()
