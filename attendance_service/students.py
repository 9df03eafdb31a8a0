"""
Student registry module.

Handles registering, searching and deleting students and keeps them
in the local store.
"""

import threading
from datetime import datetime
from typing import List, Optional, Sequence
from .errors import DuplicateStudentError, StudentNotFoundError, ValidationError
from .logging_config import get_logger
from .models import Student
from .storage import LocalStore, STUDENTS_KEY

logger = get_logger(__name__)


class StudentRegistry:
    """Registered students in registration order."""

    def __init__(self, store: LocalStore):
        """
        Initialize registry from store.

        Args:
            store: Local store holding the students
        """
        self.store = store
        self._lock = threading.Lock()
        self._students: List[Student] = []

        for raw in store.get_item(STUDENTS_KEY, []) or []:
            try:
                self._students.append(Student.from_dict(raw))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f'Dropping malformed student entry: {e}')

        with_face = sum(1 for s in self._students if s.face_descriptor)
        logger.info(f'Loaded {len(self._students)} students ({with_face} with face descriptors)')

    def _save(self, students: List[Student]) -> None:
        self.store.set_item(STUDENTS_KEY, [s.to_dict() for s in students])
        self._students = students

    def register(
        self,
        student_id: str,
        name: str,
        course: str,
        descriptor: Optional[Sequence[float]],
        photo: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> Student:
        """
        Register a new student.

        Args:
            student_id: Unique student ID
            name: Full name
            course: Course name
            descriptor: Face descriptor from a capture
            photo: Face image as data URL
            now: Registration moment (defaults to current time)

        Returns:
            The registered student

        Raises:
            ValidationError: If a field is blank or the descriptor is missing
            DuplicateStudentError: If the ID is already registered
        """
        student_id = (student_id or '').strip()
        name = (name or '').strip()
        course = (course or '').strip()

        if not student_id or not name or not course:
            raise ValidationError('Please fill all fields')

        if descriptor is None or len(descriptor) == 0:
            raise ValidationError('Please capture face first')

        student = Student(
            id=student_id,
            name=name,
            course=course,
            face_descriptor=[float(v) for v in descriptor],
            photo=photo,
            registered_at=(now or datetime.now()).isoformat(),
        )

        with self._lock:
            if any(s.id == student_id for s in self._students):
                raise DuplicateStudentError('Student ID already exists')
            self._save(self._students + [student])

        logger.info(f'✅ Student {name} ({student_id}) registered. Total: {len(self._students)}')
        return student

    def get(self, student_id: str) -> Student:
        for student in self._students:
            if student.id == student_id:
                return student
        raise StudentNotFoundError(f'Student {student_id} not found')

    def delete(self, student_id: str) -> Student:
        """
        Remove a student.

        Attendance records are not touched here.

        Returns:
            The removed student

        Raises:
            StudentNotFoundError: If the ID is unknown
        """
        with self._lock:
            student = self.get(student_id)
            self._save([s for s in self._students if s.id != student_id])

        logger.info(f'Student {student.name} ({student_id}) deleted')
        return student

    def search(self, term: str = '') -> List[Student]:
        """
        Filter students by ID, name or course (case-insensitive).

        Args:
            term: Search text, empty returns everyone

        Returns:
            Matching students in registration order
        """
        term = (term or '').strip().lower()
        if not term:
            return list(self._students)

        return [
            s for s in self._students
            if term in s.id.lower() or term in s.name.lower() or term in s.course.lower()
        ]

    def all(self) -> List[Student]:
        return list(self._students)

    def clear(self) -> None:
        with self._lock:
            self._save([])

    def __contains__(self, student_id: object) -> bool:
        return any(s.id == student_id for s in self._students)

    def __len__(self) -> int:
        return len(self._students)
