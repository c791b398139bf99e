"""
Kahoot! import flow.

Kahoot quizzes are read from the public card API, then the REST API, then the
details page. Time limits are stored in milliseconds and images as bare CDN
ids.
"""

import re
from typing import Any, List, Optional, Tuple

from ...models import Question
from ...utils.text_processor import clean_text, first_non_empty
from ..base import BasePlatformExtractor
from ..media import resolve_kahoot_image
from ..normalize import PlatformNormalizer

KAHOOT_ID = re.compile(r'([0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12})', re.IGNORECASE)

KAHOOT_TARGETS = [
    ('card_api', 'https://create.kahoot.it/rest/kahoots/{id}/card/?includeKahoot=true'),
    ('rest_api', 'https://create.kahoot.it/rest/kahoots/{id}'),
    ('details_page', 'https://create.kahoot.it/details/{id}')
]

TEXT_FIELDS = ['question', 'title', 'query', 'text']
CHOICE_TEXT_FIELDS = ['answer', 'text', 'title']
# Slides carry no question to answer
SKIPPED_TYPES = {'content'}


class KahootNormalizer(PlatformNormalizer):
    platform = 'kahoot'
    time_unit = 'ms'
    default_time = 20

    def normalize_item(self, raw: dict, index: int, raw_root: Any) -> Optional[Question]:
        raw_type = str(raw.get('type') or raw.get('questionType') or '').lower()
        if raw_type in SKIPPED_TYPES:
            self.note(f"skipped content slide at index {index}")
            return None

        text = clean_text(first_non_empty(raw, TEXT_FIELDS), strip_html=True)

        option_texts: List[str] = []
        option_images: List[str] = []
        correct: List[int] = []
        choices = raw.get('choices') if isinstance(raw.get('choices'), list) else []
        for idx, choice in enumerate(choices):
            if isinstance(choice, dict):
                option_text = clean_text(first_non_empty(choice, CHOICE_TEXT_FIELDS), strip_html=True)
                option_images.append(resolve_kahoot_image(choice.get('image')))
                if choice.get('correct') is True:
                    correct.append(idx)
            else:
                option_text = clean_text(choice, strip_html=True)
                option_images.append("")
            option_texts.append(option_text or f"Option {idx + 1}")

        return self.build_question(
            raw,
            text=text,
            option_texts=option_texts,
            correct_indices=correct,
            option_images=option_images,
            image_url=self._image(raw),
            raw_time=raw.get('time'),
            raw_type=raw_type or None,
            evidence="kahoot choices[].correct"
        )

    def _image(self, raw: dict) -> str:
        for value in (raw.get('image'), raw.get('imageUrl')):
            url = resolve_kahoot_image(value)
            if url:
                return url

        metadata = raw.get('imageMetadata')
        if isinstance(metadata, dict):
            url = resolve_kahoot_image(metadata.get('id'))
            if url:
                return url

        layout = raw.get('layout')
        if isinstance(layout, dict):
            url = resolve_kahoot_image(layout.get('image'))
            if url:
                return url

        media = raw.get('media')
        if isinstance(media, list):
            for item in media:
                if isinstance(item, dict) and item.get('type') == 'image':
                    url = resolve_kahoot_image(item.get('url') or item.get('id'))
                    if url:
                        return url
        return ""


class KahootExtractor(BasePlatformExtractor):
    platform = 'kahoot'
    display_name = 'Kahoot'
    normalizer_cls = KahootNormalizer
    title_paths = ['kahoot.title', 'card.title', 'title']
    description_paths = ['kahoot.description', 'card.description', 'description']

    def parse_id(self, url: str) -> Optional[str]:
        match = KAHOOT_ID.search(url)
        return match.group(1).lower() if match else None

    def targets(self, platform_id: str, url: str) -> List[Tuple[str, str]]:
        return [(label, template.format(id=platform_id)) for label, template in KAHOOT_TARGETS]
