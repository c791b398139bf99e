"""
Platform import flows.

Each module pairs a normalizer (raw candidate array to canonical questions)
with an extractor (URL id parsing and the ordered fetch targets).
"""

from .kahoot import KahootExtractor, KahootNormalizer
from .blooket import BlooketExtractor, BlooketNormalizer
from .wayground import WaygroundExtractor, WaygroundNormalizer
from .gimkit import GimkitExtractor, GimkitNormalizer

PLATFORM_EXTRACTORS = {
    'kahoot': KahootExtractor,
    'blooket': BlooketExtractor,
    'wayground': WaygroundExtractor,
    'gimkit': GimkitExtractor
}

__all__ = [
    'PLATFORM_EXTRACTORS',
    'BlooketExtractor',
    'BlooketNormalizer',
    'GimkitExtractor',
    'GimkitNormalizer',
    'KahootExtractor',
    'KahootNormalizer',
    'WaygroundExtractor',
    'WaygroundNormalizer'
]
