"""
Export module.

Builds the student CSV export and the plain-text attendance summary.
"""

import csv
import io
from datetime import datetime
from typing import Iterable, List, Sequence, Tuple
from .errors import NoDataError
from .models import AttendanceRecord, Student
from .utils.timing import clock_time, day_key, parse_timestamp, short_date

CSV_HEADER = 'Student ID,Name,Course,Registration Date'
SUMMARY_FILENAME = 'attendance_summary.txt'


def _registration_date(student: Student) -> str:
    try:
        return short_date(parse_timestamp(student.registered_at))
    except ValueError:
        return student.registered_at


def students_csv(students: Sequence[Student]) -> str:
    """
    Render registered students as CSV.

    Args:
        students: Students to export

    Returns:
        CSV text with a header line and one quoted row per student

    Raises:
        NoDataError: If there are no students
    """
    if not students:
        raise NoDataError('No data to export')

    buffer = io.StringIO()
    buffer.write(CSV_HEADER + '\n')

    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    for student in students:
        writer.writerow([student.id, student.name, student.course, _registration_date(student)])

    return buffer.getvalue()


def students_csv_filename(now: datetime) -> str:
    return f'attendance_students_{now:%Y-%m-%d}.csv'


def attendance_summary(
    students: Sequence[Student],
    records: Iterable[AttendanceRecord],
    subjects: Sequence[Tuple[str, str]],
    now: datetime
) -> str:
    """
    Render a plain-text attendance summary for the day of ``now``.

    Args:
        students: Registered students
        records: All attendance records
        subjects: Configured (code, label) pairs
        now: Export moment

    Returns:
        Summary text
    """
    today = day_key(now)
    todays: List[AttendanceRecord] = [r for r in records if r.date == today]
    present = len({r.student_id for r in todays})
    total = len(students)
    rate = int(present * 100 / total + 0.5) if total else 0

    lines = [
        'ATTENDANCE SUMMARY',
        '==================',
        f'Date: {short_date(now)}',
        f'Exported: {clock_time(now)}',
        f'Registered students: {total}',
        f'Present today: {present}',
        f'Attendance rate: {rate}%',
        '',
        'By subject:',
    ]

    known = {code for code, _ in subjects}
    for code, label in subjects:
        count = sum(1 for r in todays if r.subject == code)
        lines.append(f'  {label}: {count}')

    # Records for subjects removed from the configuration
    for record_subject in sorted({r.subject for r in todays} - known):
        count = sum(1 for r in todays if r.subject == record_subject)
        lines.append(f'  {record_subject}: {count}')

    lines.append('==================')
    return '\n'.join(lines) + '\n'
