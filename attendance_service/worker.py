"""
Background workers.

RecognitionWorker re-scans the webcam on a fixed interval and marks
recognized students. PreviewWorker keeps the MJPEG preview fresh and
draws the latest recognition results over it.
"""

import threading
import time
from typing import List, Optional
from .errors import AttendanceError
from .face_app import DemoAnalyzer
from .imaging import draw_detections
from .logging_config import get_logger

logger = get_logger(__name__)

# Seconds a recognition overlay stays on the preview
OVERLAY_TTL = 2.0


class Overlay:
    """Boxes and labels from the latest recognition scan."""

    def __init__(self):
        self._lock = threading.Lock()
        self._bboxes: List = []
        self._labels: List[Optional[str]] = []
        self._expires_at = 0.0

    def publish(self, bboxes: List, labels: List[Optional[str]], ttl: float = OVERLAY_TTL) -> None:
        with self._lock:
            self._bboxes = list(bboxes)
            self._labels = list(labels)
            self._expires_at = time.time() + ttl

    def apply(self, frame):
        with self._lock:
            if time.time() > self._expires_at:
                return frame
            return draw_detections(frame, self._bboxes, self._labels)


class _Worker:
    """Thread with an interruptible fixed-interval loop."""

    name = 'worker'

    def __init__(self, interval: float):
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    def start(self) -> None:
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        self._thread = None

    def _run(self) -> None:
        logger.debug(f'{self.name} started')
        while not self._stop_event.is_set():
            try:
                self.tick()
            except AttendanceError as e:
                logger.warning(f'{self.name}: {e}')
            except Exception as e:
                logger.error(f'{self.name} error: {e}', exc_info=True)

            self._stop_event.wait(self.interval)
        logger.debug(f'{self.name} stopped')

    def tick(self) -> None:
        raise NotImplementedError


class RecognitionWorker(_Worker):
    """
    Periodic recognition scan.

    With face models: detect every face in a fresh frame and recognize
    each descriptor. In demo mode: pick a random registered student and
    mark them with the configured probability.
    """

    name = 'recognition'

    def __init__(self, system):
        """
        Args:
            system: AttendanceSystem to scan for
        """
        super().__init__(system.config.recognition_interval_seconds)
        self.system = system

    def tick(self) -> None:
        if isinstance(self.system.analyzer, DemoAnalyzer):
            self._demo_tick()
            return

        frame = self.system.webcam.read() if self.system.webcam_active else None
        if frame is None:
            logger.debug('No webcam frame for recognition')
            return

        detections = self.system.analyzer.detect_all(frame)
        labels: List[Optional[str]] = []

        for detection in detections:
            student = self.system.recognize_face(detection.descriptor)
            labels.append(student.name if student else None)

        self.system.overlay.publish([d.bbox for d in detections], labels)
        logger.debug(f'Scan: {len(detections)} faces, {sum(1 for l in labels if l)} recognized')

    def _demo_tick(self) -> None:
        students = self.system.students.all()
        if not students:
            return

        student = students[int(self.system.rng.integers(len(students)))]
        if self.system.rng.random() < self.system.config.demo_mark_probability:
            self.system.mark_attendance(student)


class PreviewWorker(_Worker):
    """Copies webcam frames into the preview buffer."""

    name = 'preview'

    def __init__(self, system, fps: float = 10.0):
        super().__init__(1.0 / fps)
        self.system = system

    def tick(self) -> None:
        if not self.system.webcam_active:
            return
        frame = self.system.webcam.read()
        self.system.preview.set_frame(self.system.overlay.apply(frame))
