"""
Blooket import flow.

Blooket stores answers as plain strings and marks correctness by repeating
the correct texts in ``correctAnswers``; typing questions carry only the
accepted answers.
"""

import re
from typing import Any, List, Optional, Tuple
from urllib.parse import parse_qs, urlparse

from ...constants import QUESTION_TYPES
from ...models import Question
from ...utils.text_processor import clean_text, first_non_empty
from ..base import BasePlatformExtractor
from ..media import resolve_blooket_image
from ..normalize import PlatformNormalizer

BLOOKET_SET_ID = re.compile(r'/set/([a-zA-Z0-9]+)')

BLOOKET_TARGETS = [
    ('dashboard_api', 'https://dashboard.blooket.com/api/games?gameId={id}'),
    ('play_api', 'https://play.blooket.com/api/gamequestionsets?gameId={id}'),
    ('legacy_api', 'https://api.blooket.com/api/games?gameId={id}'),
    ('set_page', 'https://dashboard.blooket.com/set/{id}')
]

TEXT_FIELDS = ['question', 'text']
OPTION_FIELDS = ['answers', 'choices', 'options']
ACCEPTED_FIELDS = ['correctAnswers', 'typingAnswers']
DEFAULT_MAX_OPTIONS = 4


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if value is None or value == "":
        return []
    return [value]


class BlooketNormalizer(PlatformNormalizer):
    platform = 'blooket'
    time_unit = 's'
    default_time = 20

    def __init__(self, max_options: int = DEFAULT_MAX_OPTIONS, **kwargs):
        super().__init__(**kwargs)
        self.max_options = max_options

    def normalize_item(self, raw: dict, index: int, raw_root: Any) -> Optional[Question]:
        text = clean_text(first_non_empty(raw, TEXT_FIELDS), strip_html=True)

        accepted: List[Any] = []
        for field in ACCEPTED_FIELDS:
            accepted.extend(_as_list(raw.get(field)))
        accepted.extend(_as_list(raw.get('correctAnswer')))

        option_texts = self._option_texts(raw)
        question_type = None
        raw_type = str(raw.get('qType') or raw.get('type') or '').lower() or None

        if not option_texts and accepted:
            # Typing questions list only the accepted answers
            option_texts = [clean_text(value) for value in accepted if clean_text(value)]
            self.note("typing answers repurposed as options")
            question_type = QUESTION_TYPES['fill_in_blank']
        elif raw_type == 'typing':
            question_type = QUESTION_TYPES['fill_in_blank']

        if len(option_texts) > self.max_options:
            self.note(f"option list truncated from {len(option_texts)} to {self.max_options}")
            option_texts = option_texts[:self.max_options]

        correct = self.correct_by_text(option_texts, accepted)

        return self.build_question(
            raw,
            text=text,
            option_texts=option_texts,
            correct_indices=correct,
            image_url=self._image(raw),
            raw_time=raw.get('timeLimit'),
            raw_type=raw_type,
            question_type=question_type,
            evidence="blooket correctAnswers text match"
        )

    def _option_texts(self, raw: dict) -> List[str]:
        for field in OPTION_FIELDS:
            values = raw.get(field)
            if not isinstance(values, list):
                continue
            texts = []
            for value in values:
                if isinstance(value, dict):
                    value = first_non_empty(value, ['text', 'answer', 'title'])
                cleaned = clean_text(value)
                if cleaned:
                    texts.append(cleaned)
            if texts:
                return texts
        return []

    def _image(self, raw: dict) -> str:
        url = resolve_blooket_image(raw.get('image'))
        if url:
            return url
        media = raw.get('media')
        if isinstance(media, dict):
            return resolve_blooket_image(media.get('url'))
        return ""


class BlooketExtractor(BasePlatformExtractor):
    platform = 'blooket'
    display_name = 'Blooket'
    normalizer_cls = BlooketNormalizer
    title_paths = ['title', 'name', 'game.title', 'set.title']

    def parse_id(self, url: str) -> Optional[str]:
        match = BLOOKET_SET_ID.search(url)
        if match:
            return match.group(1)
        ids = parse_qs(urlparse(url).query).get('id')
        if ids and re.fullmatch(r'[a-zA-Z0-9]+', ids[0]):
            return ids[0]
        return None

    def targets(self, platform_id: str, url: str) -> List[Tuple[str, str]]:
        return [(label, template.format(id=platform_id)) for label, template in BLOOKET_TARGETS]

    def create_normalizer(self) -> BlooketNormalizer:
        min_time, max_time = self.config.time_bounds
        max_options = int(self.config.section('normalizer').get('blooket_max_options', DEFAULT_MAX_OPTIONS))
        return BlooketNormalizer(max_options=max_options, min_time=min_time, max_time=max_time)
