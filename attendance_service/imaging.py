"""
Image helpers.

Face crop encoding for student photos and detection overlays for the
preview stream.
"""

import base64
import cv2
import numpy as np
from typing import Optional, Sequence

DATA_URL_PREFIX = 'data:image/jpeg;base64,'


def capture_face_image(frame: np.ndarray, size: int = 200, quality: int = 80) -> Optional[str]:
    """
    Crop the center of a frame and encode it as a JPEG data URL.

    Frames smaller than the crop are padded with black.

    Args:
        frame: BGR frame
        size: Side of the square crop in pixels
        quality: JPEG quality (0-100)

    Returns:
        Data URL string, or None if encoding failed
    """
    height, width = frame.shape[:2]
    crop = np.zeros((size, size, 3), dtype=np.uint8)

    x0 = width // 2 - size // 2
    y0 = height // 2 - size // 2

    # Clip the source window to the frame
    src_x1, src_y1 = max(x0, 0), max(y0, 0)
    src_x2, src_y2 = min(x0 + size, width), min(y0 + size, height)

    if src_x2 > src_x1 and src_y2 > src_y1:
        dst_x, dst_y = src_x1 - x0, src_y1 - y0
        region = frame[src_y1:src_y2, src_x1:src_x2]
        if region.ndim == 2:
            region = cv2.cvtColor(region, cv2.COLOR_GRAY2BGR)
        crop[dst_y:dst_y + region.shape[0], dst_x:dst_x + region.shape[1]] = region

    ret, buffer = cv2.imencode('.jpg', crop, [cv2.IMWRITE_JPEG_QUALITY, int(quality)])
    if not ret:
        return None

    return DATA_URL_PREFIX + base64.b64encode(buffer.tobytes()).decode('ascii')


def draw_detections(
    frame: np.ndarray,
    bboxes: Sequence[np.ndarray],
    labels: Sequence[Optional[str]]
) -> np.ndarray:
    """
    Draw detection boxes on a frame.

    Recognized faces (with a label) are green, unknown faces red.

    Args:
        frame: Frame to draw on (modified in place)
        bboxes: Boxes as [x1, y1, x2, y2]
        labels: Student name per box or None

    Returns:
        The same frame
    """
    for bbox, label in zip(bboxes, labels):
        x1, y1, x2, y2 = np.asarray(bbox).astype(int)
        color = (0, 255, 0) if label else (0, 0, 255)
        text = label or 'Unknown'

        cv2.rectangle(frame, (x1, y1), (x2, y2), color, 3)
        cv2.rectangle(frame, (x1, y2 - 30), (x2, y2), color, cv2.FILLED)
        cv2.putText(frame, text, (x1 + 6, y2 - 8),
                    cv2.FONT_HERSHEY_DUPLEX, 0.5, (255, 255, 255), 1)

    return frame
