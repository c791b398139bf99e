"""
Wayground (formerly Quizizz) import flow.

Questions live in the page's hydration state. Rich text is HTML, media URLs
are often protocol- or root-relative, and correctness is an index (or list
of indices) under ``structure.answer``.
"""

import re
from typing import Any, List, Optional, Tuple

from ...models import Question
from ...utils.text_processor import TextProcessor, clean_text
from ..base import BasePlatformExtractor
from ..media import resolve_wayground_image
from ..normalize import PlatformNormalizer

WAYGROUND_ID = re.compile(r'(?<![0-9a-f])([0-9a-f]{24})(?![0-9a-f])', re.IGNORECASE)

TEXT_FIELDS = ['structure.query.text', 'text', 'question']
OPTION_FIELDS = ['structure.options', 'options', 'choices']
OPTION_FLAGS = ['correct', 'isCorrect']
IMAGE_OPTION_TEXT = "[Image Option]"


def _media_of(obj: Any, media_type: str) -> Optional[dict]:
    if not isinstance(obj, dict) or not isinstance(obj.get('media'), list):
        return None
    for item in obj['media']:
        if isinstance(item, dict) and item.get('type') == media_type:
            return item
    return None


def _answer_indices(answer: Any) -> List[int]:
    if isinstance(answer, bool):
        return []
    if isinstance(answer, int):
        return [answer]
    if isinstance(answer, list):
        return [value for value in answer if isinstance(value, int) and not isinstance(value, bool)]
    return []


class WaygroundNormalizer(PlatformNormalizer):
    platform = 'wayground'
    time_unit = 'ms'
    default_time = 30

    def normalize_item(self, raw: dict, index: int, raw_root: Any) -> Optional[Question]:
        structure = raw.get('structure') if isinstance(raw.get('structure'), dict) else {}
        query = structure.get('query') if isinstance(structure.get('query'), dict) else {}

        text_media = _media_of(query, 'text')
        sources = [
            TextProcessor.get_path(raw, TEXT_FIELDS[0]),
            text_media.get('text') if text_media else None
        ] + [raw.get(field) for field in TEXT_FIELDS[1:]]
        # Markup-only rich text such as "<p></p>" cleans to empty and falls through
        text = next(
            (cleaned for cleaned in (clean_text(value, strip_html=True) for value in sources) if cleaned), ""
        )

        raw_options = []
        for field in OPTION_FIELDS:
            value = TextProcessor.get_path(raw, field)
            if isinstance(value, list):
                raw_options = value
                break

        option_texts: List[str] = []
        option_images: List[str] = []
        correct = set(_answer_indices(structure.get('answer')))
        for idx, option in enumerate(raw_options):
            option_text, option_image = self._option(option)
            if not option_text:
                option_text = IMAGE_OPTION_TEXT if option_image else f"Option {idx + 1}"
            option_texts.append(option_text)
            option_images.append(option_image)
            if isinstance(option, dict) and any(option.get(flag) is True for flag in OPTION_FLAGS):
                correct.add(idx)

        if not correct and structure.get('answer') not in (None, [], ""):
            self.note(f"unrecognized answer format at index {index}")

        return self.build_question(
            raw,
            text=text,
            option_texts=option_texts,
            correct_indices=correct,
            option_images=option_images,
            image_url=self._image(raw, query),
            raw_time=raw.get('time') or structure.get('time'),
            raw_type=structure.get('kind') or raw.get('type'),
            explanation=self._explanation(raw, structure),
            evidence="wayground structure.answer"
        )

    @staticmethod
    def _option(option: Any) -> Tuple[str, str]:
        if not isinstance(option, dict):
            return clean_text(option, strip_html=True), ""

        text = clean_text(option.get('text'), strip_html=True)
        if not text:
            text_media = _media_of(option, 'text')
            if text_media:
                text = clean_text(text_media.get('text'), strip_html=True)

        image_media = _media_of(option, 'image')
        image = resolve_wayground_image(image_media.get('url')) if image_media else ""
        if not image:
            image = resolve_wayground_image(option.get('image'))
        return text, image

    @staticmethod
    def _image(raw: dict, query: dict) -> str:
        image_media = _media_of(query, 'image')
        if image_media:
            url = resolve_wayground_image(image_media.get('url'))
            if url:
                return url
        return resolve_wayground_image(raw.get('image'))

    @staticmethod
    def _explanation(raw: dict, structure: dict) -> str:
        for value in (structure.get('explain'), structure.get('explanation'), raw.get('explanation')):
            if isinstance(value, dict):
                value = value.get('text')
            cleaned = clean_text(value, strip_html=True)
            if cleaned:
                return cleaned
        return ""


class WaygroundExtractor(BasePlatformExtractor):
    platform = 'wayground'
    display_name = 'Wayground'
    normalizer_cls = WaygroundNormalizer
    title_paths = ['quiz.info.name', 'info.name', 'name', 'title']
    description_paths = ['quiz.info.description', 'info.description', 'description']

    def parse_id(self, url: str) -> Optional[str]:
        match = WAYGROUND_ID.search(url)
        return match.group(1).lower() if match else None

    def targets(self, platform_id: str, url: str) -> List[Tuple[str, str]]:
        return [('quiz_page', url)]
