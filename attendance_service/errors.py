"""
Exception hierarchy for Attendance Service.

Every error carries an HTTP status so the Flask layer can map it directly.
"""


class AttendanceError(Exception):
    """Base exception for the attendance service."""

    status_code = 400


class ValidationError(AttendanceError):
    """Raised when user input is missing or invalid."""

    status_code = 422


class DuplicateStudentError(AttendanceError):
    """Raised when registering a student ID that already exists."""

    status_code = 409


class StudentNotFoundError(AttendanceError):
    """Raised when a student ID is unknown."""

    status_code = 404


class NoFaceDetectedError(AttendanceError):
    """Raised when face capture finds no face in the frame."""

    status_code = 422


class CameraUnavailableError(AttendanceError):
    """Raised when the webcam is missing or fails to deliver a frame."""

    status_code = 503


class StorageError(AttendanceError):
    """Raised when the local store cannot be written."""

    status_code = 507


class NoDataError(AttendanceError):
    """Raised when an export has nothing to export."""

    status_code = 404


class RecognitionStateError(AttendanceError):
    """Raised when recognition cannot start in the current state."""

    status_code = 409
