"""
Webcam module.

Opens the local webcam with retries and serializes frame reads between
the HTTP threads and the recognition worker.
"""

import threading
import cv2
import numpy as np
from typing import Optional
from .config import Config
from .errors import CameraUnavailableError
from .logging_config import get_logger
from .utils.timing import retry_with_backoff

logger = get_logger(__name__)


def _open_capture(config: Config) -> cv2.VideoCapture:
    """
    Open and verify a capture.

    Raises:
        CameraUnavailableError: If the device cannot be opened or read
    """
    logger.info(f'Connecting to webcam (index {config.camera_index})...')
    video_capture = cv2.VideoCapture(config.camera_index)

    if video_capture is None or not video_capture.isOpened():
        raise CameraUnavailableError('Failed to open webcam')

    video_capture.set(cv2.CAP_PROP_FRAME_WIDTH, config.frame_width)
    video_capture.set(cv2.CAP_PROP_FRAME_HEIGHT, config.frame_height)

    ret, frame = video_capture.read()
    if not ret or frame is None:
        video_capture.release()
        raise CameraUnavailableError('Webcam opened but failed to read frame')

    logger.info(f'✅ Webcam connected, frame size: {frame.shape[1]}x{frame.shape[0]}')
    return video_capture


class Webcam:
    """Local webcam wrapper."""

    def __init__(self, video_capture: cv2.VideoCapture):
        self._capture = video_capture
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._capture is not None

    def read(self) -> np.ndarray:
        """
        Read the next frame.

        Returns:
            BGR frame

        Raises:
            CameraUnavailableError: If the webcam is closed or the read fails
        """
        with self._lock:
            if self._capture is None:
                raise CameraUnavailableError('Webcam not available')
            ret, frame = self._capture.read()

        if not ret or frame is None:
            raise CameraUnavailableError('Failed to read frame from webcam')
        return frame

    def release(self) -> None:
        with self._lock:
            if self._capture is not None:
                self._capture.release()
                self._capture = None
                logger.info('Webcam released')


def open_webcam(config: Config, max_attempts: int = 3) -> Optional[Webcam]:
    """
    Open the configured webcam with exponential backoff.

    Args:
        config: Service configuration
        max_attempts: Maximum connection attempts

    Returns:
        Webcam, or None when the station has to run in manual mode
    """
    try:
        capture = retry_with_backoff(lambda: _open_capture(config), max_attempts=max_attempts)
    except CameraUnavailableError as e:
        logger.error(f'❌ Webcam error: {e}')
        logger.warning('Webcam not available. Using manual mode.')
        return None

    return Webcam(capture)
