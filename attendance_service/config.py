"""
Configuration module for Attendance Service.

Loads configuration from environment variables with sensible defaults.
All settings are immutable after initialization.
"""

import os
from dataclasses import dataclass
from typing import Tuple


DEFAULT_SUBJECTS = (
    'math:Mathematics,'
    'physics:Physics,'
    'chemistry:Chemistry,'
    'cs:Computer Science,'
    'english:English'
)


@dataclass(frozen=True)
class Config:
    """
    Immutable configuration for Attendance Service.

    Service Identity:
        station_id: Name of this attendance station (for logging)
        http_host: Host for Flask HTTP server
        http_port: Port for Flask HTTP server

    Camera Settings:
        camera_index: Local webcam index (0, 1, 2)
        frame_width: Requested capture width
        frame_height: Requested capture height

    Storage:
        store_file: Path to the local JSON store

    Recognition:
        match_threshold: Euclidean distance threshold (lower = stricter)
        recognition_interval_seconds: Delay between recognition scans
        insightface_model: InsightFace model pack name
        insightface_det_size: Detection size for InsightFace (width, height)

    Demo Mode:
        demo_mode: Skip face models and use random descriptors
        descriptor_size: Length of demo descriptors
        demo_mark_probability: Chance a demo scan marks a random student

    Face Image:
        face_image_size: Side of the square face crop in pixels
        face_image_quality: JPEG quality of the face crop (0-100)

    Subjects:
        subjects: Tuple of (code, label) pairs, first one selected on start

    System:
        debug_mode: Enable debug logging
    """

    # Service
    station_id: str
    http_host: str
    http_port: int

    # Camera
    camera_index: int
    frame_width: int
    frame_height: int

    # Storage
    store_file: str

    # Recognition
    match_threshold: float
    recognition_interval_seconds: float
    insightface_model: str
    insightface_det_size: Tuple[int, int]

    # Demo
    demo_mode: bool
    descriptor_size: int
    demo_mark_probability: float

    # Face image
    face_image_size: int
    face_image_quality: int

    # Subjects
    subjects: Tuple[Tuple[str, str], ...]

    # System
    debug_mode: bool


def parse_subjects(raw: str) -> Tuple[Tuple[str, str], ...]:
    """
    Parse a subject list of the form ``code:Label,code:Label``.

    Entries without a label use the code as label. Blank entries are ignored.

    Args:
        raw: Raw subject string

    Returns:
        Tuple of (code, label) pairs

    Raises:
        ValueError: If no subject is left after parsing
    """
    subjects = []
    for entry in raw.split(','):
        entry = entry.strip()
        if not entry:
            continue
        code, _, label = entry.partition(':')
        code = code.strip()
        subjects.append((code, label.strip() or code))

    if not subjects:
        raise ValueError('At least one subject must be configured')

    return tuple(subjects)


def load_config() -> Config:
    """
    Load configuration from environment variables.

    Returns:
        Config: Immutable configuration object
    """
    return Config(
        # Service
        station_id=os.getenv('STATION_ID', 'station'),
        http_host=os.getenv('HTTP_HOST', '127.0.0.1'),
        http_port=int(os.getenv('HTTP_PORT', '5001')),

        # Camera
        camera_index=int(os.getenv('CAMERA_INDEX', '0')),
        frame_width=int(os.getenv('FRAME_WIDTH', '640')),
        frame_height=int(os.getenv('FRAME_HEIGHT', '480')),

        # Storage
        store_file=os.getenv('STORE_FILE', 'attendance_store.json'),

        # Recognition
        match_threshold=float(os.getenv('MATCH_THRESHOLD', '0.6')),
        recognition_interval_seconds=float(os.getenv('RECOGNITION_INTERVAL', '3.0')),
        insightface_model=os.getenv('INSIGHTFACE_MODEL', 'buffalo_l'),
        insightface_det_size=(640, 640),

        # Demo
        demo_mode=os.getenv('DEMO_MODE', 'false').lower() == 'true',
        descriptor_size=int(os.getenv('DESCRIPTOR_SIZE', '128')),
        demo_mark_probability=float(os.getenv('DEMO_MARK_PROBABILITY', '0.7')),

        # Face image
        face_image_size=int(os.getenv('FACE_IMAGE_SIZE', '200')),
        face_image_quality=int(os.getenv('FACE_IMAGE_QUALITY', '80')),

        # Subjects
        subjects=parse_subjects(os.getenv('SUBJECTS', DEFAULT_SUBJECTS)),

        # System
        debug_mode=os.getenv('DEBUG', 'false').lower() == 'true',
    )
