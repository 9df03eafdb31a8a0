"""
Video streaming module.

Holds the latest preview frame and generates the MJPEG stream for Flask.
Thread-safe frame access using locks.
"""

import threading
import time
from typing import Generator, Optional
import numpy as np
import cv2


class FrameBuffer:
    """Latest preview frame, shared between the worker and HTTP threads."""

    def __init__(self):
        self._frame: Optional[np.ndarray] = None
        self._lock = threading.Lock()

    def set_frame(self, frame: Optional[np.ndarray]) -> None:
        """
        Update current frame (thread-safe).

        Args:
            frame: New frame, or None to clear the preview
        """
        with self._lock:
            self._frame = frame.copy() if frame is not None else None

    def get_frame_copy(self) -> Optional[np.ndarray]:
        with self._lock:
            return self._frame.copy() if self._frame is not None else None

    def is_streaming(self) -> bool:
        with self._lock:
            return self._frame is not None


def encode_jpeg(frame: np.ndarray, quality: int = 85) -> Optional[bytes]:
    ret, buffer = cv2.imencode('.jpg', frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
    return buffer.tobytes() if ret else None


def generate_mjpeg_frames(
    frames: FrameBuffer,
    stop_event: Optional[threading.Event] = None
) -> Generator[bytes, None, None]:
    """
    Generate MJPEG parts from a frame buffer.

    Args:
        frames: Frame buffer to read from
        stop_event: Optional event ending the stream

    Yields:
        JPEG frame bytes with multipart headers
    """
    while stop_event is None or not stop_event.is_set():
        frame = frames.get_frame_copy()

        if frame is None:
            time.sleep(0.1)
            continue

        jpeg = encode_jpeg(frame)
        if jpeg is None:
            time.sleep(0.033)
            continue

        yield (b'--frame\r\n'
               b'Content-Type: image/jpeg\r\n\r\n' + jpeg + b'\r\n')

        # ~30 FPS
        time.sleep(0.033)
