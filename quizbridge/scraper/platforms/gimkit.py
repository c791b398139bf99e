"""
Gimkit import flow.

Kits are read from the games fetch API, falling back to the public view page.
Answers carry their own ``_id`` and correctness is either a flag on the answer
or a ``correctAnswerId`` on the question.
"""

import re
from typing import Any, List, Optional, Tuple

from ...constants import QUESTION_TYPES
from ...models import Question
from ...utils.deep_finder import find_image_refs
from ...utils.text_processor import clean_text, first_non_empty
from ..base import BasePlatformExtractor
from ..media import resolve_gimkit_image
from ..normalize import PlatformNormalizer

GIMKIT_ID = re.compile(r'/(view|play)/([a-zA-Z0-9]+)')

GIMKIT_TARGETS = [
    ('games_fetch_api', 'https://www.gimkit.com/api/games/fetch/{id}'),
    ('view_page', 'https://www.gimkit.com/view/{id}')
]

TEXT_FIELDS = ['text', 'questionText', 'question']
ANSWER_FIELDS = ['answers', 'choices']


class GimkitNormalizer(PlatformNormalizer):
    platform = 'gimkit'
    time_unit = 's'
    default_time = 30

    def normalize_item(self, raw: dict, index: int, raw_root: Any) -> Optional[Question]:
        text = clean_text(first_non_empty(raw, TEXT_FIELDS))

        answers: List[Any] = []
        for field in ANSWER_FIELDS:
            if isinstance(raw.get(field), list):
                answers = raw[field]
                break

        correct_answer_id = raw.get('correctAnswerId')
        option_texts: List[str] = []
        correct: List[int] = []
        for idx, answer in enumerate(answers):
            if isinstance(answer, dict):
                option_texts.append(clean_text(first_non_empty(answer, ['text', 'answer'])) or f"Option {idx + 1}")
                if answer.get('correct') is True:
                    correct.append(idx)
                elif correct_answer_id and answer.get('_id') == correct_answer_id:
                    correct.append(idx)
            else:
                option_texts.append(clean_text(answer) or f"Option {idx + 1}")

        raw_type = str(raw.get('type') or '').lower() or None
        question_type = None
        evidence = "gimkit answers[].correct / correctAnswerId"
        if raw_type == 'text':
            # Free-text kits list every accepted answer
            correct = list(range(len(option_texts)))
            question_type = QUESTION_TYPES['fill_in_blank']
            evidence = "gimkit text question accepted answers"

        return self.build_question(
            raw,
            text=text,
            option_texts=option_texts,
            correct_indices=correct,
            image_url=resolve_gimkit_image(raw.get('image')) or resolve_gimkit_image(raw.get('media')),
            raw_type=raw_type,
            question_type=question_type,
            evidence=evidence
        )


class GimkitExtractor(BasePlatformExtractor):
    platform = 'gimkit'
    display_name = 'Gimkit'
    normalizer_cls = GimkitNormalizer
    title_paths = ['name', 'title', 'kit.name', 'game.name']

    def parse_id(self, url: str) -> Optional[str]:
        match = GIMKIT_ID.search(url)
        return match.group(2) if match else None

    def targets(self, platform_id: str, url: str) -> List[Tuple[str, str]]:
        return [(label, template.format(id=platform_id)) for label, template in GIMKIT_TARGETS]

    def inspect(self, root: Any, questions: List[Question]) -> List[str]:
        """Note documents that carry images none of which attach to a question."""
        if any(question.image_url for question in questions):
            return []
        refs = find_image_refs(root)
        if not refs:
            return []
        self.logger.info(f"Gimkit: {len(refs)} image reference(s) found but none attached to questions")
        return [f"image_unresolved_scope: {len(refs)} image reference(s), first at {refs[0][0]}"]
