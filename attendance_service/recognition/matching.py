"""
Descriptor matching module.

Matches a live face descriptor against registered students using
Euclidean distance under a threshold.
"""

import numpy as np
from typing import Iterable, Optional, Sequence, Tuple
from ..logging_config import get_logger
from ..models import Student

logger = get_logger(__name__)


def euclidean_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Compute Euclidean distance between two descriptors.

    Args:
        a: First descriptor
        b: Second descriptor

    Returns:
        L2 distance

    Raises:
        ValueError: If descriptors differ in length
    """
    vec_a = np.asarray(a, dtype=np.float32).ravel()
    vec_b = np.asarray(b, dtype=np.float32).ravel()

    if vec_a.shape != vec_b.shape:
        raise ValueError(
            f'Descriptor length mismatch: {vec_a.shape[0]} vs {vec_b.shape[0]}'
        )

    return float(np.linalg.norm(vec_a - vec_b))


def find_best_match(
    descriptor: Sequence[float],
    students: Iterable[Student],
    threshold: float
) -> Tuple[Optional[Student], float]:
    """
    Find the registered student closest to a descriptor.

    Scans students in registration order. A student matches only when the
    distance is strictly below the threshold and below every earlier
    candidate, so ties go to the earlier-registered student.

    Args:
        descriptor: Live face descriptor
        students: Registered students
        threshold: Maximum (exclusive) distance for a match

    Returns:
        Tuple of (student, distance) or (None, threshold) if no match
    """
    probe = np.asarray(descriptor, dtype=np.float32).ravel()
    best_match: Optional[Student] = None
    min_distance = threshold

    for student in students:
        if not student.face_descriptor:
            continue

        if len(student.face_descriptor) != probe.shape[0]:
            logger.debug(
                f'Skipping {student.id}: descriptor length '
                f'{len(student.face_descriptor)} != {probe.shape[0]}'
            )
            continue

        distance = euclidean_distance(probe, student.face_descriptor)

        if distance < min_distance:
            min_distance = distance
            best_match = student

    return best_match, min_distance
