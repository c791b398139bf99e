"""
Question Type Classification Module

Maps the type labels each platform uses onto the canonical vocabulary:
- multiple-choice / multi-select: option questions with one or many answers
- true-false: binary True/False, Yes/No questions
- fill-in-blank / open-ended / poll / draw: the rest

When a platform label is missing or unknown, the type is inferred from the
options and the number of correct answers.
"""

import logging
from typing import Dict, List, Optional

from ..constants import QUESTION_TYPES, TRUE_FALSE_SYNONYMS

# Platform label -> canonical key
PLATFORM_TYPE_LABELS: Dict[str, Dict[str, str]] = {
    'kahoot': {
        'quiz': 'multiple_choice',
        'true_false': 'true_false',
        'multiple_select_quiz': 'multi_select',
        'multiple_select_poll': 'poll',
        'open_ended': 'open_ended',
        'survey': 'poll',
        'poll': 'poll',
        'word_cloud': 'open_ended',
        'brainstorming': 'open_ended',
        'slider': 'open_ended',
        'jumble': 'multiple_choice',
        'drop_pin': 'draw'
    },
    'wayground': {
        'mcq': 'multiple_choice',
        'msq': 'multi_select',
        'blank': 'fill_in_blank',
        'blanks': 'fill_in_blank',
        'open': 'open_ended',
        'poll': 'poll',
        'draw': 'draw'
    },
    'blooket': {
        'mc': 'multiple_choice',
        'typing': 'fill_in_blank'
    },
    'gimkit': {
        'mc': 'multiple_choice',
        'text': 'fill_in_blank'
    }
}


class QuestionClassifier:
    """
    Classifies questions into the canonical question types.

    Platform labels take priority; otherwise binary True/False option pairs
    are detected by synonym matching and the rest fall back to
    multiple-choice or multi-select depending on the answer count.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._all_tf_synonyms = self._flatten_synonyms()

    def _flatten_synonyms(self) -> List[str]:
        """Flatten True/False synonyms into a single list for quick checking."""
        synonyms = []
        for category in TRUE_FALSE_SYNONYMS.values():
            synonyms.extend(category)
        return synonyms

    def classify(self, options: List[str], correct_count: int = 0,
                 platform: str = "", raw_type: Optional[str] = None) -> str:
        """
        Classify a question into its canonical type.

        Args:
            options: Option texts
            correct_count: Number of correct options determined
            platform: Platform id used to interpret ``raw_type``
            raw_type: The platform's own type label, if any

        Returns:
            str: One of the QUESTION_TYPES values
        """
        if raw_type:
            key = PLATFORM_TYPE_LABELS.get(platform, {}).get(str(raw_type).strip().lower())
            if key:
                # Platforms label binary quizzes as plain quiz questions
                if key == 'multiple_choice' and self.is_true_false(options):
                    key = 'true_false'
                return QUESTION_TYPES[key]
            self.logger.debug(f"Unknown {platform} question type '{raw_type}', inferring from options")

        if self.is_true_false(options):
            return QUESTION_TYPES['true_false']
        if correct_count > 1:
            return QUESTION_TYPES['multi_select']
        return QUESTION_TYPES['multiple_choice']

    def is_true_false(self, options: List[str]) -> bool:
        """Check for a True/False pair of option texts."""
        clean_options = [opt.strip().lower() for opt in options if opt and opt.strip()]
        if len(clean_options) != 2:
            return False

        option1, option2 = clean_options
        if option1 in self._all_tf_synonyms and option2 in self._all_tf_synonyms:
            return (
                (option1 in TRUE_FALSE_SYNONYMS['true'] and option2 in TRUE_FALSE_SYNONYMS['false']) or
                (option1 in TRUE_FALSE_SYNONYMS['false'] and option2 in TRUE_FALSE_SYNONYMS['true'])
            )
        return False


def detect_question_type(options: List[str], correct_count: int = 0,
                         platform: str = "", raw_type: Optional[str] = None) -> str:
    """
    Convenience function to classify a question type.

    Args:
        options: Option texts
        correct_count: Number of correct options
        platform: Platform id
        raw_type: Platform type label

    Returns:
        str: Canonical question type
    """
    classifier = QuestionClassifier()
    return classifier.classify(options, correct_count, platform, raw_type)
