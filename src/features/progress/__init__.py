"""
Progress package for the assistant's status log.
"""

from .service import ProgressReporter, normalize_since
from .repo import ProgressRepo

__all__ = [
    'ProgressReporter',
    'ProgressRepo',
    'normalize_since',
]
