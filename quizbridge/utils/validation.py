import logging
from typing import Any, Dict, List, Tuple

from ..constants import ENHANCE_REASONS, QUESTION_TYPES, TIME_LIMITS
from ..models import Question, Quiz


class DataValidator:
    """Checks normalized quizzes against the canonical record invariants."""

    def __init__(self, min_time: int = TIME_LIMITS['min_seconds'], max_time: int = TIME_LIMITS['max_seconds']):
        self.logger = logging.getLogger(__name__)
        self.min_time = min_time
        self.max_time = max_time
        self.validation_errors: List[str] = []
        self.validation_warnings: List[str] = []

    def validate_question(self, question: Question) -> Tuple[bool, List[str], List[str]]:
        """Validate a single question's structure and flags."""
        errors = []
        warnings = []

        if not question.text or not question.text.strip():
            errors.append("Question text is empty")

        option_ids = question.option_ids
        if len(set(option_ids)) != len(option_ids):
            errors.append("Duplicate option ids")

        unknown = [cid for cid in question.correct_option_ids if cid not in option_ids]
        if unknown:
            errors.append(f"Correct option ids not among options: {unknown}")

        if len(set(question.correct_option_ids)) != len(question.correct_option_ids):
            errors.append("Duplicate correct option ids")

        expected_order = [oid for oid in option_ids if oid in question.correct_option_ids]
        if not unknown and expected_order != list(question.correct_option_ids):
            errors.append("Correct option ids are not in option order")

        expected_single = question.correct_option_ids[0] if question.correct_option_ids else ""
        if question.correct_option_id != expected_single:
            errors.append(
                f"correctOptionId '{question.correct_option_id}' disagrees with correctOptionIds"
            )

        if not self.min_time <= question.time_limit <= self.max_time:
            errors.append(f"Time limit {question.time_limit} outside [{self.min_time}, {self.max_time}]")

        if question.question_type not in QUESTION_TYPES.values():
            errors.append(f"Invalid question type: {question.question_type}")

        should_flag = len(question.options) < 2 or not question.correct_option_ids
        if should_flag != question.needs_enhance_ai:
            errors.append("needsEnhanceAI does not match options/correct coverage")
        if question.needs_enhance_ai and question.enhance_reason not in ENHANCE_REASONS.values():
            errors.append(f"Unknown enhance reason: {question.enhance_reason}")
        if not question.needs_enhance_ai and question.enhance_reason is not None:
            errors.append("enhanceReason set on an unflagged question")

        if '<' in question.text and '>' in question.text:
            warnings.append("Question text may contain HTML tags")
        if '&quot;' in question.text or '&amp;' in question.text or '&#' in question.text:
            warnings.append("Question text may contain HTML entities")
        if any(not option.text.strip() for option in question.options):
            warnings.append("Option with empty text")

        return len(errors) == 0, errors, warnings

    def validate_quiz(self, quiz: Quiz) -> Dict[str, Any]:
        """
        Validate every question in a quiz.

        Returns:
            Dict with total/valid/invalid counts and per-question errors
        """
        self.validation_errors = []
        self.validation_warnings = []
        results = {
            'total_questions': len(quiz.questions),
            'valid_questions': 0,
            'invalid_questions': 0,
            'errors': {},
            'warnings': {}
        }

        seen_ids = set()
        for question in quiz.questions:
            is_valid, errors, warnings = self.validate_question(question)
            if question.id in seen_ids:
                is_valid = False
                errors.append(f"Duplicate question id: {question.id}")
            seen_ids.add(question.id)

            if is_valid:
                results['valid_questions'] += 1
            else:
                results['invalid_questions'] += 1
                results['errors'][question.id] = errors
                self.validation_errors.extend(errors)
            if warnings:
                results['warnings'][question.id] = warnings
                self.validation_warnings.extend(warnings)

        if results['invalid_questions']:
            self.logger.warning(
                f"Validation: {results['invalid_questions']}/{results['total_questions']} invalid questions"
            )
        return results
