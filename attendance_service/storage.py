"""
Local store module.

A JSON key/value file that keeps students, attendance records and
station flags between restarts.
"""

import json
import os
import tempfile
import threading
from typing import Any, Dict, Optional
from .errors import StorageError
from .logging_config import get_logger

logger = get_logger(__name__)

STUDENTS_KEY = 'attendanceStudents'
RECORDS_KEY = 'attendanceRecords'
VISITED_KEY = 'hasVisitedAttendanceSystem'


class LocalStore:
    """
    Key/value store backed by a single JSON file.

    Values must be JSON-serializable. Every write rewrites the whole
    file through a temporary file so a crash never leaves it half written.
    """

    def __init__(self, path: str):
        """
        Initialize store.

        Args:
            path: Path to the JSON file (created on first write)
        """
        self.path = path
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            logger.debug('Store file not found, starting empty')
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f'Failed to read store {self.path}: {e}')
            return {}

        if not isinstance(data, dict):
            logger.error(f'Store {self.path} is not a JSON object, ignoring it')
            return {}

        logger.info(f'Store loaded from {self.path} ({len(data)} keys)')
        return data

    def _flush(self) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.store-', suffix='.json')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(self._data, f)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except (OSError, TypeError, ValueError) as e:
            logger.error(f'Failed to save store: {e}')
            raise StorageError('Error saving data. Storage might be full.') from e

    def get_item(self, key: str, default: Optional[Any] = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set_item(self, key: str, value: Any) -> None:
        with self._lock:
            had_key = key in self._data
            previous = self._data.get(key)
            self._data[key] = value
            try:
                self._flush()
            except StorageError:
                # Keep memory consistent with disk
                if had_key:
                    self._data[key] = previous
                else:
                    del self._data[key]
                raise

    def remove_item(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            previous = self._data.pop(key)
            try:
                self._flush()
            except StorageError:
                self._data[key] = previous
                raise

    def clear(self) -> None:
        with self._lock:
            previous, self._data = self._data, {}
            try:
                self._flush()
            except StorageError:
                self._data = previous
                raise
