from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable, Sequence

from .model import AttendanceRecord

logger = logging.getLogger(__name__)

RecordsCallback = Callable[[Sequence[AttendanceRecord]], None]


class RecordFeed:
    """In-process subscriptions to a session's attendance records.

    Subscribers get the full, newest-first record list after each change.
    There is no merging or backpressure: a slow callback slows the writer.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._subscribers: dict[int, list[RecordsCallback]] = defaultdict(list)

    def subscribe(self, session_id: int, callback: RecordsCallback) -> Callable[[], None]:
        session_id = int(session_id)
        with self._lock:
            self._subscribers[session_id].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                callbacks = self._subscribers.get(session_id)
                if callbacks and callback in callbacks:
                    callbacks.remove(callback)
                if not callbacks:
                    self._subscribers.pop(session_id, None)

        return unsubscribe

    def has_subscribers(self, session_id: int) -> bool:
        with self._lock:
            return bool(self._subscribers.get(int(session_id)))

    def publish(self, session_id: int, records: Sequence[AttendanceRecord]) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(int(session_id), ()))
        for callback in callbacks:
            try:
                callback(records)
            except Exception:
                logger.exception("Attendance subscriber failed for session %s", session_id)
