"""
Deep Structural Finder

Scans a parsed JSON document of unknown shape for the array that most likely
holds the quiz questions. No schema contract is assumed: platforms change
their internal layout between releases without notice, so arrays are scored
on how question-like their elements look and the best-scoring one wins.

The returned path is a diagnostic descriptor only and must never be used as a
lookup key.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..constants import (
    ANSWER_INDEX_KEYS, CHOICE_ALIASES, CORRECT_TEXT_KEYS, FINDER_DEFAULTS,
    OPTION_CORRECT_FLAGS, TEXT_ALIASES, TIME_KEYS
)


@dataclass
class Candidate:
    array: List[Any]
    score: int
    path: str
    valid_items: int = 0
    sample_keys: List[str] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            'score': self.score,
            'path': self.path,
            'length': len(self.array),
            'validItems': self.valid_items,
            'sampleKeys': list(self.sample_keys)
        }


def _non_empty_string(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def has_text(item: Dict[str, Any]) -> bool:
    """Check whether an element exposes a text-like field."""
    for alias in TEXT_ALIASES:
        if _non_empty_string(item.get(alias)):
            return True
    structure = item.get('structure')
    if isinstance(structure, dict):
        query = structure.get('query')
        if isinstance(query, dict) and _non_empty_string(query.get('text')):
            return True
    return False


def choices_of(item: Dict[str, Any]) -> Optional[List[Any]]:
    """Return the first choices-like list an element exposes."""
    for alias in CHOICE_ALIASES:
        value = item.get(alias)
        if isinstance(value, list):
            return value
    structure = item.get('structure')
    if isinstance(structure, dict) and isinstance(structure.get('options'), list):
        return structure['options']
    return None


def is_question_like(item: Any) -> bool:
    """An element is question-like when it exposes text or choices."""
    if not isinstance(item, dict):
        return False
    return has_text(item) or choices_of(item) is not None


def _is_index(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, list) and bool(value) and all(
        isinstance(v, int) and not isinstance(v, bool) for v in value
    )


def has_correct_marker(item: Any) -> bool:
    """
    Check whether an element exposes an explicit correctness marker.

    Markers are a boolean flag on a sub-option, an answer index, a
    correct-answer id or a correct-answer text.
    """
    if not isinstance(item, dict):
        return False

    for key in CORRECT_TEXT_KEYS:
        value = item.get(key)
        if _non_empty_string(value):
            return True
        if isinstance(value, list) and any(_non_empty_string(v) or isinstance(v, (int, float)) for v in value):
            return True

    for key in ANSWER_INDEX_KEYS:
        if _is_index(item.get(key)):
            return True
    if _is_index(item.get('answer')):
        return True
    if _non_empty_string(item.get('correctAnswerId')):
        return True

    structure = item.get('structure')
    if isinstance(structure, dict):
        if structure.get('answer') is not None and structure.get('answer') != []:
            return True

    choices = choices_of(item)
    if choices:
        for choice in choices:
            if isinstance(choice, dict) and any(choice.get(flag) is True for flag in OPTION_CORRECT_FLAGS):
                return True

    return False


def has_image(item: Any) -> bool:
    if not isinstance(item, dict):
        return False
    image = item.get('image')
    if _non_empty_string(image):
        return True
    if isinstance(image, dict) and (image.get('url') or image.get('id')):
        return True
    if item.get('imageUrl') or item.get('media') or item.get('imageMetadata'):
        return True
    structure = item.get('structure')
    if isinstance(structure, dict):
        query = structure.get('query')
        if isinstance(query, dict) and query.get('media'):
            return True
    return False


class DeepStructuralFinder:
    """
    Recursive heuristic scanner over arbitrary parsed JSON.

    Every array in the tree is scored for question-likeness; arrays where at
    least ``min_valid_ratio`` of the elements look like questions become
    candidates. Candidates are returned sorted by descending score, ties kept
    in discovery order.
    """

    def __init__(self, max_depth: Optional[int] = None, min_valid_ratio: Optional[float] = None,
                 weights: Optional[Dict[str, int]] = None, skip_keys: Optional[List[str]] = None):
        self.logger = logging.getLogger(__name__)
        self.max_depth = max_depth if max_depth is not None else FINDER_DEFAULTS['max_depth']
        self.min_valid_ratio = (
            min_valid_ratio if min_valid_ratio is not None else FINDER_DEFAULTS['min_valid_ratio']
        )
        self.weights = dict(FINDER_DEFAULTS['weights'])
        if weights:
            self.weights.update(weights)
        self.skip_keys = set(skip_keys if skip_keys is not None else FINDER_DEFAULTS['skip_keys'])

    @classmethod
    def from_config(cls, finder_config: Dict[str, Any]) -> 'DeepStructuralFinder':
        return cls(
            max_depth=finder_config.get('max_depth'),
            min_valid_ratio=finder_config.get('min_valid_ratio'),
            weights=finder_config.get('weights'),
            skip_keys=finder_config.get('skip_keys')
        )

    def find(self, root: Any, path: str = '$') -> List[Candidate]:
        """
        Find ranked candidate question arrays in a parsed document.

        Args:
            root: Parsed JSON value
            path: Path descriptor prefix for diagnostics

        Returns:
            List[Candidate]: Candidates sorted by descending score
        """
        candidates: List[Candidate] = []
        self._walk(root, path, 0, candidates)
        # sorted() is stable, so equal scores keep discovery order
        ranked = sorted(candidates, key=lambda c: c.score, reverse=True)

        if ranked:
            self.logger.debug(f"Deep finder: {len(ranked)} candidate(s), best {ranked[0].path} "
                              f"score={ranked[0].score}")
        else:
            self.logger.debug("Deep finder: no candidate arrays")
        return ranked

    def score_array(self, array: List[Any]) -> Tuple[int, int]:
        """
        Score an array for question-likeness.

        Returns:
            Tuple of (score, number of question-like elements)
        """
        score = 0
        valid_items = 0
        w = self.weights

        for item in array:
            if not is_question_like(item):
                continue
            valid_items += 1
            score += w['question_like']

            if has_text(item) and choices_of(item) is not None:
                score += w['text_and_choices']
            if has_correct_marker(item):
                score += w['correct_marker']
            if has_image(item):
                score += w['image']
            if isinstance(item.get('typingAnswers'), list) and item['typingAnswers']:
                score += w['typing_answers']
            if any(item.get(key) for key in TIME_KEYS):
                score += w['time_limit']

        return score, valid_items

    def _walk(self, node: Any, path: str, depth: int, candidates: List[Candidate]) -> None:
        if depth > self.max_depth:
            return

        if isinstance(node, list):
            if node:
                score, valid_items = self.score_array(node)
                if valid_items > 0 and valid_items / len(node) >= self.min_valid_ratio:
                    first = next((item for item in node if is_question_like(item)), {})
                    candidates.append(Candidate(
                        array=node,
                        score=score,
                        path=path,
                        valid_items=valid_items,
                        sample_keys=list(first.keys())[:12]
                    ))
            # Some platforms wrap the real list in a single-element envelope
            for idx, item in enumerate(node):
                if isinstance(item, (dict, list)):
                    self._walk(item, f"{path}[{idx}]", depth + 1, candidates)

        elif isinstance(node, dict):
            for key, value in node.items():
                if key in self.skip_keys:
                    continue
                if isinstance(value, (dict, list)):
                    self._walk(value, f"{path}.{key}", depth + 1, candidates)


_IMAGE_VALUE = re.compile(r'\.(png|jpe?g|gif|webp|svg)(\?|$)', re.IGNORECASE)
_IMAGE_KEY = re.compile(r'image|img|photo|media|src|url|thumbnail|asset|cover', re.IGNORECASE)
_IMAGE_HOSTS = ('media.blooket.com', 'cloudinary', 'images-cdn.kahoot.it', 'media.quizizz.com',
                'images.unsplash.com', 'cdn.gimkit.com')


def _looks_like_image(value: str) -> bool:
    return (
        value.startswith('data:image/')
        or bool(_IMAGE_VALUE.search(value))
        or any(host in value for host in _IMAGE_HOSTS)
    )


def find_image_refs(root: Any, max_hits: int = 50, max_depth: int = 12) -> List[Tuple[str, str]]:
    """
    Forensic scan for image-looking strings anywhere in a document.

    Strings under image-like keys are accepted loosely (bare ids count);
    elsewhere only URL-shaped values are reported.

    Returns:
        List of (path, value) pairs, values truncated to 180 chars
    """
    hits: List[Tuple[str, str]] = []

    def walk(node: Any, path: str, key: str, depth: int) -> None:
        if len(hits) >= max_hits or depth > max_depth or node is None:
            return
        if isinstance(node, str):
            loose_id = (_IMAGE_KEY.search(key or '') and 5 < len(node) < 100 and ' ' not in node)
            if _looks_like_image(node) or loose_id:
                hits.append((path, node[:180]))
            return
        if isinstance(node, list):
            for idx, item in enumerate(node):
                walk(item, f"{path}[{idx}]", key, depth + 1)
                if len(hits) >= max_hits:
                    return
        elif isinstance(node, dict):
            for child_key, value in node.items():
                walk(value, f"{path}.{child_key}", str(child_key), depth + 1)
                if len(hits) >= max_hits:
                    return

    walk(root, '$', '', 0)
    return hits
