"""
Text Processing Utilities

This module provides centralized text processing functions for cleaning,
normalizing, and looking up text fields in raw platform payloads.
"""

import html
import re
import warnings
from typing import Any, Iterable, Optional

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning


class TextProcessor:
    """
    Handles text processing operations for imported content.

    Provides methods for stripping rich text, decoding entities, resolving
    dotted field aliases and preparing text for equality matching.
    """

    @staticmethod
    def get_path(obj: Any, path: str) -> Any:
        """
        Resolve a dotted path (e.g. ``structure.query.text``) inside nested dicts.

        Args:
            obj: Raw object
            path: Dotted key path

        Returns:
            The value at the path or None when any step is missing
        """
        current = obj
        for key in path.split('.'):
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
        return current

    @staticmethod
    def first_non_empty(obj: Any, aliases: Iterable[str]) -> Optional[str]:
        """
        Return the first alias whose value is a non-empty string.

        Args:
            obj: Raw object
            aliases: Ordered dotted paths to try

        Returns:
            str or None
        """
        for alias in aliases:
            value = TextProcessor.get_path(obj, alias)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                value = str(value)
            if isinstance(value, str) and value.strip():
                return value
        return None

    @staticmethod
    def strip_html(text: str) -> str:
        """
        Strip HTML tags and decode entities from rich text.

        Args:
            text: Text that may contain markup

        Returns:
            str: Plain text with collapsed whitespace
        """
        if not text:
            return ""

        if '<' not in text:
            return TextProcessor.normalize_whitespace(TextProcessor.remove_html_entities(text))

        with warnings.catch_warnings():
            warnings.simplefilter('ignore', MarkupResemblesLocatorWarning)
            soup = BeautifulSoup(text, 'html.parser')

        return TextProcessor.normalize_whitespace(soup.get_text(' '))

    @staticmethod
    def remove_html_entities(text: str) -> str:
        """Decode named and numeric HTML entities."""
        if not text:
            return ""
        return html.unescape(text)

    @staticmethod
    def normalize_whitespace(text: str) -> str:
        if not text:
            return ""
        # Non-breaking spaces come from rich text editors
        text = text.replace('\xa0', ' ')
        return re.sub(r'\s+', ' ', text).strip()

    @staticmethod
    def clean_text(value: Any, strip_html: bool = False) -> str:
        """
        Coerce a raw value to clean display text.

        Args:
            value: Raw value (string, number or None)
            strip_html: Remove markup as well as entities

        Returns:
            str: Cleaned text, empty when the value is missing
        """
        if value is None or isinstance(value, (dict, list)):
            return ""
        text = str(value)
        if strip_html:
            return TextProcessor.strip_html(text)
        return TextProcessor.normalize_whitespace(TextProcessor.remove_html_entities(text))

    @staticmethod
    def match_key(text: Any) -> str:
        """Key used for text-equality correctness matching."""
        if text is None:
            return ""
        return TextProcessor.normalize_whitespace(str(text)).casefold()

    @staticmethod
    def search_query(text: str, max_words: int = 3) -> str:
        """
        Build a short stock-photo search query from question text.

        Long sentences confuse photo search engines, so only the first few
        words are kept.
        """
        if not text:
            return "education"
        cleaned = re.sub(r'[^\w\s]', '', text).strip()
        words = cleaned.split()
        if not words:
            return "education"
        return " ".join(words[:max_words])


# Convenience functions
def strip_html(text: str) -> str:
    """Strip HTML markup."""
    return TextProcessor.strip_html(text)


def clean_text(value: Any, strip_html: bool = False) -> str:
    """Clean a raw text value."""
    return TextProcessor.clean_text(value, strip_html=strip_html)


def first_non_empty(obj: Any, aliases: Iterable[str]) -> Optional[str]:
    """Return the first non-empty alias value."""
    return TextProcessor.first_non_empty(obj, aliases)
