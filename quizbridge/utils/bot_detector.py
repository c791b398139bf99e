"""
Bot/challenge page detection.

Classifies raw response text as blocked vs usable with fixed-string
heuristics over a bounded prefix. Advisory only: a miss simply lets the
ladder accept a bad page, and a downstream structure search will then fail.
"""

import logging
from typing import Iterable, Optional

from ..constants import BOT_DETECTION


class BotDetector:
    """Fixed-string heuristics for anti-automation challenge pages."""

    def __init__(self, prefix_chars: Optional[int] = None,
                 structural_markers: Optional[Iterable[str]] = None,
                 phrases: Optional[Iterable[str]] = None):
        self.logger = logging.getLogger(__name__)
        self.prefix_chars = prefix_chars or BOT_DETECTION['prefix_chars']
        self.structural_markers = [m.lower() for m in (structural_markers or BOT_DETECTION['structural_markers'])]
        self.phrases = [p.lower() for p in (phrases or BOT_DETECTION['phrases'])]

    def is_blocked(self, text: str) -> bool:
        """
        Check whether a response body is a challenge/denial page.

        Args:
            text: Raw response text

        Returns:
            bool: True if the prefix contains a known challenge marker
        """
        return self.matched_marker(text) is not None

    def matched_marker(self, text: str) -> Optional[str]:
        """Return the first challenge marker found in the text prefix, if any."""
        if not text:
            return None

        head = text[:self.prefix_chars].lower()

        for marker in self.structural_markers:
            if marker in head:
                self.logger.debug(f"Challenge marker found: {marker}")
                return marker

        # JSON payloads are API responses; a question may legitimately
        # mention "security check" or "access denied"
        if self._looks_like_json(head):
            return None

        for phrase in self.phrases:
            if phrase in head:
                self.logger.debug(f"Challenge phrase found: {phrase}")
                return phrase

        return None

    @staticmethod
    def _looks_like_json(head: str) -> bool:
        stripped = head.lstrip()
        return stripped.startswith('{') or stripped.startswith('[')


_default_detector = BotDetector()


def is_blocked(text: str) -> bool:
    """Check a response body with the default detector."""
    return _default_detector.is_blocked(text)
