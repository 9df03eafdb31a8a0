"""
Attendance ledger module.

Keeps daily attendance records and guarantees at most one Present
record per (student, day, subject).
"""

import threading
from datetime import datetime
from typing import Dict, List, Optional
from .logging_config import get_logger
from .models import AttendanceRecord, Student
from .storage import LocalStore, RECORDS_KEY
from .utils.timing import clock_time, day_key, epoch_millis

logger = get_logger(__name__)

GOOD_RATE = 80
FAIR_RATE = 50


def rate_band(rate: int) -> str:
    """
    Classify an attendance rate.

    Args:
        rate: Attendance rate in percent

    Returns:
        'good', 'fair' or 'poor'
    """
    if rate >= GOOD_RATE:
        return 'good'
    if rate >= FAIR_RATE:
        return 'fair'
    return 'poor'


class AttendanceLedger:
    """
    Attendance records persisted in the local store.

    Marking is serialized by a lock so the recognition worker and HTTP
    requests cannot both add a record for the same key.
    """

    def __init__(self, store: LocalStore):
        """
        Initialize ledger from store.

        Args:
            store: Local store holding the records
        """
        self.store = store
        self._lock = threading.Lock()
        self._records: List[AttendanceRecord] = []

        for raw in store.get_item(RECORDS_KEY, []) or []:
            try:
                self._records.append(AttendanceRecord.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f'Dropping malformed attendance record {raw!r}: {e}')

        logger.info(f'Loaded {len(self._records)} attendance records')

    def _save(self, records: List[AttendanceRecord]) -> None:
        self.store.set_item(RECORDS_KEY, [r.to_dict() for r in records])
        self._records = records

    def is_marked(self, student_id: str, date: str, subject: str) -> bool:
        key = (student_id, date, subject)
        return any(r.key() == key for r in self._records)

    def mark_attendance(
        self,
        student: Student,
        subject: str,
        subject_text: str,
        now: Optional[datetime] = None
    ) -> Optional[AttendanceRecord]:
        """
        Mark a student present for a subject today.

        Args:
            student: Recognized student
            subject: Subject code
            subject_text: Subject display label
            now: Moment of marking (defaults to current local time)

        Returns:
            The new record, or None if already marked for this day and subject
        """
        now = now or datetime.now()
        date = day_key(now)

        with self._lock:
            if self.is_marked(student.id, date, subject):
                logger.debug(f'{student.id} already marked for {subject} on {date}')
                return None

            record = AttendanceRecord(
                student_id=student.id,
                student_name=student.name,
                date=date,
                time=clock_time(now),
                timestamp=epoch_millis(now),
                subject=subject,
                subject_text=subject_text,
            )
            self._save(self._records + [record])

        logger.info(f'✅ {student.name} ({student.id}) marked present for {subject_text}')
        return record

    def records_on(self, date: str) -> List[AttendanceRecord]:
        return [r for r in self._records if r.date == date]

    def records_for(self, date: str, subject: str) -> List[AttendanceRecord]:
        """Records for a day and subject, most recent first."""
        records = [r for r in self._records if r.date == date and r.subject == subject]
        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    def all(self) -> List[AttendanceRecord]:
        return list(self._records)

    def remove_student(self, student_id: str) -> int:
        """
        Drop every record of a student.

        Returns:
            Number of records removed
        """
        with self._lock:
            kept = [r for r in self._records if r.student_id != student_id]
            removed = len(self._records) - len(kept)
            if removed:
                self._save(kept)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._save([])

    def statistics(self, total_students: int, now: Optional[datetime] = None) -> Dict:
        """
        Compute today's dashboard statistics.

        Present counts distinct students with at least one record today.

        Args:
            total_students: Number of registered students
            now: Reference moment (defaults to current local time)

        Returns:
            Dict with totalStudents, presentToday, attendanceRate and rating
        """
        today = day_key(now or datetime.now())
        present = len({r.student_id for r in self.records_on(today)})

        rate = int(present * 100 / total_students + 0.5) if total_students > 0 else 0

        return {
            'date': today,
            'totalStudents': total_students,
            'presentToday': present,
            'attendanceRate': rate,
            'rating': rate_band(rate),
        }

    def __len__(self) -> int:
        return len(self._records)
