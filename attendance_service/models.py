"""
Data models for students and attendance records.

Both models round-trip through the camelCase JSON shape kept in the
local store.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

PRESENT = 'Present'


@dataclass
class Student:
    """A registered student with an optional face descriptor."""

    id: str
    name: str
    course: str
    face_descriptor: Optional[List[float]]
    photo: Optional[str]
    registered_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'course': self.course,
            'faceDescriptor': self.face_descriptor,
            'photo': self.photo,
            'registeredAt': self.registered_at,
        }

    def summary(self) -> Dict[str, Any]:
        """Public view without the descriptor."""
        return {
            'id': self.id,
            'name': self.name,
            'course': self.course,
            'photo': self.photo,
            'registeredAt': self.registered_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Student':
        descriptor = data.get('faceDescriptor')
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            course=data.get('course', ''),
            face_descriptor=[float(v) for v in descriptor] if descriptor else None,
            photo=data.get('photo'),
            registered_at=data.get('registeredAt', ''),
        )


@dataclass
class AttendanceRecord:
    """One Present mark for a student, day and subject."""

    student_id: str
    student_name: str
    date: str
    time: str
    timestamp: int
    subject: str
    subject_text: str
    status: str = PRESENT

    def key(self) -> tuple:
        """Deduplication key."""
        return self.student_id, self.date, self.subject

    def to_dict(self) -> Dict[str, Any]:
        return {
            'studentId': self.student_id,
            'studentName': self.student_name,
            'date': self.date,
            'time': self.time,
            'timestamp': self.timestamp,
            'subject': self.subject,
            'subjectText': self.subject_text,
            'status': self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AttendanceRecord':
        return cls(
            student_id=str(data['studentId']),
            student_name=data.get('studentName', ''),
            date=data['date'],
            time=data.get('time', ''),
            timestamp=int(data.get('timestamp', 0)),
            subject=data['subject'],
            subject_text=data.get('subjectText', data['subject']),
            status=data.get('status', PRESENT),
        )
