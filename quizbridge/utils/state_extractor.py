"""
Embedded State Extraction

Pulls parseable JSON documents out of whatever a fetch agent returned: a bare
API response, a server-rendered page carrying hydration state in script tags,
or the readable-text rendition produced by a reader service.
"""

import json
import logging
import re
import warnings
from typing import Any, List, Optional, Tuple

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

# Global assignments used by client-side frameworks for hydration state
STATE_ASSIGNMENTS = [
    '__NEXT_DATA__',
    '__APOLLO_STATE__',
    '__INITIAL_STATE__',
    '__PRELOADED_STATE__',
    '__NUXT__',
    '__NUXT_DATA__'
]

QUESTION_HINTS = ('"questions"', '"question"', '"choices"', '"answers"')


class StateExtractor:
    """
    Extracts JSON documents from raw response content.

    Parse failures never raise; each one is recorded in ``notes`` and the
    remaining sources are still tried.
    """

    def __init__(self, large_script_chars: int = 1000):
        self.logger = logging.getLogger(__name__)
        self.large_script_chars = large_script_chars
        self.notes: List[str] = []

    def extract(self, content: str) -> List[Tuple[str, Any]]:
        """
        Extract every JSON document found in the content.

        Args:
            content: Raw response body

        Returns:
            List of (label, parsed document) pairs in discovery order
        """
        self.notes = []
        if not content or not content.strip():
            return []

        direct = self._parse_direct(content)
        if direct is not None:
            return [('direct_json', direct)]

        documents: List[Tuple[str, Any]] = []

        if '<' in content:
            documents.extend(self._from_scripts(content))

        if not documents:
            # Reader services flatten the page to text; assignments survive as-is
            for name in STATE_ASSIGNMENTS:
                doc = self._parse_assignment(content, name)
                if doc is not None:
                    documents.append((f"assignment:{name}", doc))

        if not documents:
            embedded = self._parse_embedded_object(content, 'page_body')
            if embedded is not None:
                documents.append(('embedded_object', embedded))

        self.logger.debug(f"State extraction found {len(documents)} document(s)")
        return documents

    def _parse_direct(self, content: str) -> Optional[Any]:
        stripped = content.strip()
        if not stripped or stripped[0] not in '{[':
            return None
        try:
            return json.loads(stripped)
        except ValueError as e:
            self.notes.append(f"direct_json_parse_failed: {e}")
            return None

    def _from_scripts(self, content: str) -> List[Tuple[str, Any]]:
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', MarkupResemblesLocatorWarning)
            soup = BeautifulSoup(content, 'html.parser')

        documents: List[Tuple[str, Any]] = []

        for script in soup.find_all('script'):
            body = script.string or script.get_text() or ''
            if not body.strip():
                continue

            script_id = script.get('id') or ''
            script_type = (script.get('type') or '').lower()

            if script_id == '__NEXT_DATA__' or script_type in ('application/json', 'application/ld+json'):
                label = script_id or script_type
                try:
                    documents.append((f"script:{label}", json.loads(body)))
                except ValueError as e:
                    self.notes.append(f"script_parse_failed:{label}: {e}")
                continue

            matched = False
            for name in STATE_ASSIGNMENTS:
                if name in body:
                    doc = self._parse_assignment(body, name)
                    if doc is not None:
                        documents.append((f"assignment:{name}", doc))
                        matched = True
                        break
            if matched:
                continue

            if len(body) >= self.large_script_chars and any(hint in body for hint in QUESTION_HINTS):
                doc = self._parse_embedded_object(body, 'large_script')
                if doc is not None:
                    documents.append(('large_script', doc))

        return documents

    def _parse_assignment(self, text: str, name: str) -> Optional[Any]:
        match = re.search(rf'{re.escape(name)}\s*=\s*', text)
        if not match:
            return None
        start = match.end()
        if start >= len(text) or text[start] not in '{[':
            return None
        end = self._matching_bracket(text, start)
        if end is None:
            self.notes.append(f"assignment_unterminated:{name}")
            return None
        try:
            return json.loads(text[start:end + 1])
        except ValueError as e:
            self.notes.append(f"assignment_parse_failed:{name}: {e}")
            return None

    def _parse_embedded_object(self, text: str, label: str) -> Optional[Any]:
        """Outermost-brace slice of a blob that mentions questions."""
        if not any(hint in text for hint in QUESTION_HINTS):
            return None
        start = text.find('{')
        end = text.rfind('}')
        if start == -1 or end <= start:
            return None
        try:
            return json.loads(text[start:end + 1])
        except ValueError as e:
            self.notes.append(f"{label}_parse_failed: {e}")
            return None

    @staticmethod
    def _matching_bracket(text: str, start: int) -> Optional[int]:
        """Index of the bracket closing the one at ``start``, skipping string contents."""
        opening = text[start]
        closing = '}' if opening == '{' else ']'
        depth = 0
        in_string = False
        escaped = False

        for idx in range(start, len(text)):
            char = text[idx]
            if in_string:
                if escaped:
                    escaped = False
                elif char == '\\':
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == opening:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    return idx
        return None


def extract_documents(content: str) -> List[Tuple[str, Any]]:
    """Extract JSON documents with a throwaway extractor."""
    return StateExtractor().extract(content)
