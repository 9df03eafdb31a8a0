"""
Face analysis module.

Provides face detection and descriptors using InsightFace models, and a
demo analyzer with random descriptors for stations without models.
"""

from dataclasses import dataclass
from typing import Any, List, Optional
import numpy as np
from .config import Config
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class Detection:
    """A detected face with its descriptor."""

    bbox: np.ndarray
    score: float
    descriptor: np.ndarray


class FaceAnalyzer:
    """Face detection and descriptor extraction backed by InsightFace."""

    models_loaded = True

    def __init__(self, face_app: Any):
        """
        Args:
            face_app: Prepared InsightFace FaceAnalysis instance
        """
        self.face_app = face_app

    def detect_all(self, frame: np.ndarray) -> List[Detection]:
        """
        Detect every face in a BGR frame.

        Returns:
            Detections in detector order
        """
        faces = self.face_app.get(frame)
        return [
            Detection(
                bbox=np.asarray(face.bbox, dtype=np.float32),
                score=float(face.det_score),
                descriptor=np.asarray(face.normed_embedding, dtype=np.float32),
            )
            for face in faces
        ]

    def detect_single(self, frame: np.ndarray) -> Optional[Detection]:
        """
        Detect the most confident face in a BGR frame.

        Returns:
            Best detection or None if no face was found
        """
        detections = self.detect_all(frame)
        if not detections:
            return None
        return max(detections, key=lambda d: d.score)


class DemoAnalyzer:
    """
    Simplified mode used when face models are unavailable.

    Never detects faces. Captures get a random descriptor instead.
    """

    models_loaded = False

    def __init__(self, descriptor_size: int, rng: Optional[np.random.Generator] = None):
        self.descriptor_size = descriptor_size
        self.rng = rng or np.random.default_rng()

    def random_descriptor(self) -> np.ndarray:
        return self.rng.random(self.descriptor_size, dtype=np.float32)

    def detect_all(self, frame: np.ndarray) -> List[Detection]:
        return []

    def detect_single(self, frame: np.ndarray) -> Optional[Detection]:
        return None


def initialize_face_analyzer(config: Config):
    """
    Initialize InsightFace FaceAnalysis, or the demo analyzer.

    Model loading failures are logged and fall back to demo mode.

    Args:
        config: Service configuration

    Returns:
        FaceAnalyzer or DemoAnalyzer
    """
    if config.demo_mode:
        logger.info('Demo mode enabled, face models not loaded')
        return DemoAnalyzer(config.descriptor_size)

    logger.info('Loading face detection models...')

    try:
        from insightface.app import FaceAnalysis

        face_app = FaceAnalysis(
            name=config.insightface_model,
            providers=['CPUExecutionProvider']
        )
        face_app.prepare(ctx_id=0, det_size=config.insightface_det_size)
    except Exception as e:
        logger.error(f'❌ Error loading face models: {e}')
        logger.warning('Using simplified mode (face models not loaded)')
        return DemoAnalyzer(config.descriptor_size)

    logger.info(f'✅ InsightFace initialized (det_size={config.insightface_det_size})')
    return FaceAnalyzer(face_app)
