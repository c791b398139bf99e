"""
Platform normalizer base.

Every platform normalizer turns the raw candidate array picked by the deep
finder into canonical Questions. The shared ``build_question`` enforces the
record invariants (correct ids are a subset of option ids, kept in option
order, de-duplicated; the singular correct id mirrors the first one), converts
and clamps time limits and sets the quality flags.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional, Set

from ..constants import ENHANCE_REASONS, TIME_LIMITS
from ..models import Option, Question, new_id
from ..utils.question_classifier import QuestionClassifier
from ..utils.text_processor import TextProcessor


def to_seconds(value: Any, unit: str = 's') -> Optional[float]:
    """
    Convert a raw time value to seconds.

    Args:
        value: Raw number or numeric string
        unit: 'ms' or 's'

    Returns:
        Seconds, or None when the value is missing, not finite or not positive
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number <= 0:
        return None
    return number / 1000.0 if unit == 'ms' else number


class PlatformNormalizer(ABC):
    """
    Base class for platform normalizers.

    ``notes`` collects observations made during the last ``normalize`` call
    (skipped slides, truncated option lists, repurposed answers) and is
    reset at the start of every call.
    """

    platform = ""
    time_unit = 's'
    default_time = 20

    def __init__(self, min_time: int = TIME_LIMITS['min_seconds'], max_time: int = TIME_LIMITS['max_seconds']):
        self.logger = logging.getLogger(self.__class__.__module__)
        self.min_time = min_time
        self.max_time = max_time
        self.classifier = QuestionClassifier()
        self.notes: List[str] = []
        self._seen_ids: Set[str] = set()

    def normalize(self, raw_root: Any, raw_array: List[Any]) -> List[Question]:
        """
        Normalize a raw candidate array.

        Args:
            raw_root: The whole parsed document the array was found in
            raw_array: The candidate array

        Returns:
            List[Question]: Canonical questions in source order
        """
        self.notes = []
        self._seen_ids = set()
        questions: List[Question] = []

        for index, raw in enumerate(raw_array):
            if not isinstance(raw, dict):
                continue
            try:
                question = self.normalize_item(raw, index, raw_root)
            except (TypeError, ValueError, AttributeError, KeyError, IndexError, OverflowError) as e:
                self.logger.warning(f"{self.platform}: skipping item {index}: {type(e).__name__}: {e}")
                self.note(f"item {index} skipped: {type(e).__name__}: {e}")
                continue
            if question is not None:
                questions.append(question)

        flagged = sum(1 for q in questions if q.needs_enhance_ai)
        self.logger.info(f"{self.platform}: normalized {len(questions)} question(s), {flagged} flagged")
        return questions

    @abstractmethod
    def normalize_item(self, raw: dict, index: int, raw_root: Any) -> Optional[Question]:
        """Normalize one raw element, or return None to skip it."""
        pass

    def note(self, message: str) -> None:
        if message not in self.notes:
            self.notes.append(message)

    def question_id(self, raw: dict) -> str:
        """Use the source id when present, otherwise a fresh opaque id."""
        raw_id = raw.get('id') or raw.get('_id')
        candidate = str(raw_id) if isinstance(raw_id, (str, int)) and not isinstance(raw_id, bool) else ""
        if not candidate or candidate in self._seen_ids:
            candidate = new_id()
        self._seen_ids.add(candidate)
        return candidate

    def clamp_time(self, raw_time: Any, unit: Optional[str] = None, default: Optional[int] = None) -> int:
        seconds = to_seconds(raw_time, unit or self.time_unit)
        if seconds is None:
            seconds = default if default is not None else self.default_time
        return int(min(max(round(seconds), self.min_time), self.max_time))

    def build_question(self, raw: dict, text: str, option_texts: List[str],
                       correct_indices: Iterable[int] = (),
                       option_images: Optional[List[str]] = None,
                       image_url: str = "", raw_time: Any = None,
                       raw_type: Optional[str] = None, question_type: Optional[str] = None,
                       explanation: str = "", reconstructed: bool = False,
                       evidence: str = "") -> Question:
        """
        Assemble one canonical Question.

        Args:
            raw: Raw element (used for the id)
            text: Cleaned question text
            option_texts: Cleaned option texts in source order
            correct_indices: Indices of correct options; out-of-range entries are dropped
            option_images: Per-option image URLs aligned with option_texts
            image_url: Resolved question image URL
            raw_time: Raw time limit in the platform's unit
            raw_type: Platform type label for classification
            question_type: Canonical type, overriding classification
            explanation: Answer explanation text
            reconstructed: Whether answers were derived rather than read
            evidence: Short description of where correctness came from

        Returns:
            Question
        """
        option_images = option_images or []
        options = [
            Option(
                id=f"o{idx + 1}",
                text=option_text,
                image_url=option_images[idx] if idx < len(option_images) and option_images[idx] else ""
            )
            for idx, option_text in enumerate(option_texts)
        ]

        valid = sorted({idx for idx in correct_indices if isinstance(idx, int) and 0 <= idx < len(options)})
        correct_ids = [options[idx].id for idx in valid]

        if question_type is None:
            question_type = self.classifier.classify(
                option_texts, len(correct_ids), platform=self.platform, raw_type=raw_type
            )

        question = Question(
            id=self.question_id(raw),
            text=text,
            options=options,
            correct_option_id=correct_ids[0] if correct_ids else "",
            correct_option_ids=correct_ids,
            image_url=image_url or "",
            time_limit=self.clamp_time(raw_time),
            question_type=question_type,
            explanation=explanation,
            reconstructed=reconstructed,
            source_evidence=evidence
        )
        apply_quality_flags(question)
        return question

    def correct_by_text(self, option_texts: List[str], accepted: Iterable[Any]) -> List[int]:
        """Indices of options whose text matches an accepted answer."""
        accepted_keys = {TextProcessor.match_key(value) for value in accepted if value is not None}
        accepted_keys.discard("")
        return [idx for idx, option in enumerate(option_texts) if TextProcessor.match_key(option) in accepted_keys]


def apply_quality_flags(question: Question) -> Question:
    """
    Flag questions that need repair before use.

    A question without a determinable correct answer is flagged
    ``no_correct_exposed``; otherwise one with fewer than two options is
    flagged ``less_than_2_options``.
    """
    if not question.correct_option_ids:
        question.needs_enhance_ai = True
        question.enhance_reason = ENHANCE_REASONS['no_correct']
    elif len(question.options) < 2:
        question.needs_enhance_ai = True
        question.enhance_reason = ENHANCE_REASONS['few_options']
    else:
        question.needs_enhance_ai = False
        question.enhance_reason = None
    return question
