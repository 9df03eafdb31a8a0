"""
Recognition algorithms package.

Contains modules for:
- Descriptor distance
- Nearest-student matching
"""

from .matching import euclidean_distance, find_best_match

__all__ = [
    'euclidean_distance',
    'find_best_match',
]
