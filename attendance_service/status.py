"""
Status board module.

Keeps the station status message shown on the dashboard and the last
attendance confirmation.
"""

import logging
import threading
import time
from collections import deque
from typing import Deque, Dict, Optional
from .logging_config import get_logger
from .models import AttendanceRecord

logger = get_logger(__name__)

LEVELS = ('loading', 'success', 'error', 'warning', 'info')

_LOG_LEVELS = {
    'error': logging.ERROR,
    'warning': logging.WARNING,
}


class StatusBoard:
    """Current status message plus a short history."""

    def __init__(self, history_size: int = 50):
        self._lock = threading.Lock()
        self._history: Deque[Dict] = deque(maxlen=history_size)
        self._current: Dict = {'message': 'Starting...', 'level': 'loading', 'at': time.time()}
        self._last_confirmation: Optional[Dict] = None

    def update(self, message: str, level: str = 'info') -> None:
        """
        Set the status message.

        Unknown levels are shown as info.
        """
        if level not in LEVELS:
            level = 'info'

        entry = {'message': message, 'level': level, 'at': time.time()}
        with self._lock:
            self._current = entry
            self._history.append(entry)

        logger.log(_LOG_LEVELS.get(level, logging.INFO), message)

    def confirm(self, record: AttendanceRecord) -> None:
        """Remember the latest attendance confirmation."""
        with self._lock:
            self._last_confirmation = {
                'message': 'Attendance marked successfully!',
                'studentName': record.student_name,
                'time': record.time,
                'subject': record.subject_text,
            }

    def current(self) -> Dict:
        with self._lock:
            return dict(self._current)

    def history(self):
        with self._lock:
            return list(self._history)

    def last_confirmation(self) -> Optional[Dict]:
        with self._lock:
            return dict(self._last_confirmation) if self._last_confirmation else None
