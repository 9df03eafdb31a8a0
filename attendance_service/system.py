"""
Attendance system module.

Wires the store, student registry, attendance ledger, face analyzer,
webcam and status board into the operations the HTTP layer exposes.
"""

import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence
import numpy as np
from .attendance import AttendanceLedger
from .config import Config
from .errors import (
    CameraUnavailableError,
    NoFaceDetectedError,
    RecognitionStateError,
    ValidationError,
)
from .face_app import DemoAnalyzer
from .imaging import capture_face_image
from .logging_config import get_logger
from .models import AttendanceRecord, Student
from .recognition.matching import find_best_match
from .status import StatusBoard
from .storage import LocalStore, VISITED_KEY
from .streaming import FrameBuffer
from .students import StudentRegistry
from .utils.timing import day_key
from .worker import Overlay, PreviewWorker, RecognitionWorker

logger = get_logger(__name__)


@dataclass
class PendingCapture:
    """Face captured for the next registration."""

    descriptor: List[float]
    image: Optional[str]


class AttendanceSystem:
    """
    Single-station attendance system.

    The recognition worker and the HTTP threads share one instance.
    """

    def __init__(
        self,
        config: Config,
        store: LocalStore,
        analyzer: Any,
        webcam: Optional[Any] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """
        Initialize system.

        Args:
            config: Service configuration
            store: Local store
            analyzer: FaceAnalyzer or DemoAnalyzer
            webcam: Webcam, or None for manual mode
            rng: Random generator for demo mode
        """
        self.config = config
        self.store = store
        self.analyzer = analyzer
        self.webcam = webcam
        self.rng = rng or np.random.default_rng()

        self.students = StudentRegistry(store)
        self.ledger = AttendanceLedger(store)
        self.status = StatusBoard()
        self.preview = FrameBuffer()
        self.overlay = Overlay()

        self.subjects: Dict[str, str] = dict(config.subjects)
        self.selected_subject: str = config.subjects[0][0]

        self.started_at = time.time()
        self._capture_lock = threading.Lock()
        # Guards the roster against deletes landing between match and mark
        self._roster_lock = threading.RLock()
        self._worker_lock = threading.Lock()
        self._pending: Optional[PendingCapture] = None
        self._worker = None
        self._preview_worker = None

    # ------------------------------------------------------------------
    # Station state
    # ------------------------------------------------------------------

    @property
    def models_loaded(self) -> bool:
        return bool(self.analyzer.models_loaded)

    @property
    def webcam_active(self) -> bool:
        return self.webcam is not None and self.webcam.is_open

    @property
    def is_recognizing(self) -> bool:
        return self._worker is not None and self._worker.is_running

    @property
    def pending_capture(self) -> Optional[PendingCapture]:
        return self._pending

    def first_visit(self) -> bool:
        """
        Report whether the instructions should be shown.

        Returns True once, then remembers the visit.
        """
        if self.store.get_item(VISITED_KEY):
            return False
        self.store.set_item(VISITED_KEY, 'true')
        return True

    def select_subject(self, code: str) -> str:
        """
        Change the subject used for marking.

        Raises:
            ValidationError: If the subject code is unknown
        """
        if code not in self.subjects:
            raise ValidationError(f'Unknown subject: {code}')
        self.selected_subject = code
        logger.info(f'Subject changed to {self.subjects[code]}')
        return code

    def _subject_text(self, code: str) -> str:
        return self.subjects.get(code, code)

    # ------------------------------------------------------------------
    # Capture and registration
    # ------------------------------------------------------------------

    def capture_face(self) -> PendingCapture:
        """
        Capture a face from the webcam for the next registration.

        In demo mode the descriptor is random.

        Returns:
            The pending capture

        Raises:
            CameraUnavailableError: If there is no webcam
            NoFaceDetectedError: If no face is in the frame
        """
        if not self.webcam_active:
            raise CameraUnavailableError('Webcam not available')

        self.status.update('Detecting face...', 'loading')
        frame = self.webcam.read()
        image = capture_face_image(
            frame, self.config.face_image_size, self.config.face_image_quality
        )

        if isinstance(self.analyzer, DemoAnalyzer):
            descriptor = self.analyzer.random_descriptor()
            message = '✅ Face captured (Demo Mode)'
        else:
            detection = self.analyzer.detect_single(frame)
            if detection is None:
                self.status.update('❌ No face detected. Please position face clearly.', 'error')
                raise NoFaceDetectedError('No face detected. Please position face clearly.')

            descriptor = detection.descriptor
            self.overlay.publish([detection.bbox], [None])
            message = '✅ Face captured successfully! Fill details below.'

        pending = PendingCapture(descriptor=[float(v) for v in descriptor], image=image)
        with self._capture_lock:
            self._pending = pending

        self.status.update(message, 'success')
        return pending

    def reset_capture(self) -> None:
        with self._capture_lock:
            self._pending = None

    def register_student(self, student_id: str, name: str, course: str) -> Student:
        """
        Register a student with the pending capture.

        Raises:
            ValidationError: If a field is blank or nothing was captured
            DuplicateStudentError: If the ID exists
        """
        with self._capture_lock:
            pending = self._pending

        student = self.students.register(
            student_id,
            name,
            course,
            pending.descriptor if pending else None,
            pending.image if pending else None,
        )
        self.reset_capture()

        self.status.update(
            f'Student {student.name} registered. Total: {len(self.students)}', 'success'
        )
        return student

    def delete_student(self, student_id: str) -> Student:
        """Delete a student and their attendance records."""
        with self._roster_lock:
            student = self.students.delete(student_id)
            removed = self.ledger.remove_student(student_id)
        logger.debug(f'Removed {removed} attendance records of {student_id}')
        self.status.update(f'Student "{student.name}" deleted', 'warning')
        return student

    def clear_all(self) -> None:
        """Delete every student and attendance record."""
        self.stop_recognition()
        with self._roster_lock:
            self.students.clear()
            self.ledger.clear()
        self.reset_capture()
        self.status.update('All data cleared', 'warning')

    # ------------------------------------------------------------------
    # Recognition and marking
    # ------------------------------------------------------------------

    def recognize_face(
        self,
        descriptor: Sequence[float],
        now: Optional[datetime] = None
    ) -> Optional[Student]:
        """
        Match a live descriptor and mark the student present.

        Returns:
            Matched student, or None
        """
        student, distance = find_best_match(
            descriptor, self.students.all(), self.config.match_threshold
        )
        if student is None:
            return None

        logger.debug(f'Matched {student.id} at distance {distance:.3f}')
        self.mark_attendance(student, now=now)
        return student

    def mark_attendance(
        self,
        student: Student,
        now: Optional[datetime] = None
    ) -> Optional[AttendanceRecord]:
        """
        Mark a student present for the selected subject.

        Returns:
            New record, or None if already marked today for the subject
            or the student is no longer registered
        """
        subject = self.selected_subject
        with self._roster_lock:
            if student.id not in self.students:
                logger.debug(f'{student.id} was deleted before marking, skipped')
                return None
            record = self.ledger.mark_attendance(
                student, subject, self._subject_text(subject), now=now
            )
        if record is None:
            return None

        self.status.confirm(record)
        self.status.update(
            f'✅ {student.name} marked present for {record.subject_text}', 'success'
        )
        return record

    def today_attendance(
        self,
        subject: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> List[AttendanceRecord]:
        subject = subject or self.selected_subject
        return self.ledger.records_for(day_key(now or datetime.now()), subject)

    def statistics(self, now: Optional[datetime] = None) -> Dict:
        return self.ledger.statistics(len(self.students), now=now)

    # ------------------------------------------------------------------
    # Recognition worker
    # ------------------------------------------------------------------

    def start_recognition(self) -> bool:
        """
        Start periodic recognition.

        Returns:
            False if it was already running

        Raises:
            RecognitionStateError: If no students are registered
        """
        if len(self.students) == 0:
            raise RecognitionStateError(
                'No students registered yet. Please register students first.'
            )

        with self._worker_lock:
            if self.is_recognizing:
                return False

            self._worker = RecognitionWorker(self)
            self._worker.start()

        self.status.update('🔄 Face recognition started. Looking for students...', 'loading')
        return True

    def stop_recognition(self) -> bool:
        """
        Stop periodic recognition.

        Returns:
            False if it was not running
        """
        with self._worker_lock:
            worker, self._worker = self._worker, None
            if worker is None:
                return False
            worker.stop()

        self.status.update('⏹️ Recognition stopped', 'info')
        return True

    def start_preview(self) -> None:
        """Start feeding webcam frames to the preview stream."""
        if self.webcam_active and self._preview_worker is None:
            self._preview_worker = PreviewWorker(self)
            self._preview_worker.start()

    def shutdown(self) -> None:
        """Stop workers and release the webcam."""
        self.stop_recognition()
        if self._preview_worker is not None:
            self._preview_worker.stop()
            self._preview_worker = None
        if self.webcam is not None:
            self.webcam.release()
