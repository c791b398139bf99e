"""
Image reference resolution and optional image enrichment.

Platforms store question images as bare CDN ids, relative paths or small
descriptor objects; the resolvers here turn each of those into an absolute
URL. ``ImageLookupService`` fills images that are still missing from stock
photo APIs, one request at a time.
"""

import asyncio
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urljoin

import aiohttp  # type: ignore
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential  # type: ignore

from ..constants import ENRICHMENT_DEFAULTS, MEDIA_TEMPLATES
from ..models import Question
from ..utils.rate_limiter import RateLimiter
from ..utils.text_processor import TextProcessor

PEXELS_SEARCH_URL = 'https://api.pexels.com/v1/search'
PIXABAY_SEARCH_URL = 'https://pixabay.com/api/'

_UUID = re.compile(r'^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$', re.IGNORECASE)


def is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and (
        value.startswith('http://') or value.startswith('https://') or value.startswith('data:image/')
    )


def _descriptor_value(value: Any, keys: List[str]) -> str:
    if isinstance(value, dict):
        for key in keys:
            found = value.get(key)
            if isinstance(found, str) and found.strip():
                return found.strip()
    return ""


def resolve_kahoot_image(value: Any) -> str:
    """Kahoot images are absolute URLs or bare CDN ids (usually UUIDs)."""
    if isinstance(value, dict):
        value = _descriptor_value(value, ['url', 'image', 'id'])
    if not isinstance(value, str) or not value.strip():
        return ""
    value = value.strip()
    if is_absolute_url(value):
        return value
    if _UUID.match(value) or '/' not in value:
        return MEDIA_TEMPLATES['kahoot'].format(id=value)
    return ""


def resolve_blooket_image(value: Any) -> str:
    """Blooket images are absolute URLs, Cloudinary ids or ``{url}`` descriptors."""
    if isinstance(value, dict):
        value = _descriptor_value(value, ['url', 'id'])
    if not isinstance(value, str) or not value.strip():
        return ""
    value = value.strip()
    if is_absolute_url(value):
        return value
    return MEDIA_TEMPLATES['blooket'].format(id=value.lstrip('/'))


def resolve_wayground_image(value: Any) -> str:
    """Wayground media URLs may be protocol-relative or root-relative."""
    if isinstance(value, dict):
        value = _descriptor_value(value, ['url', 'src'])
    if not isinstance(value, str) or not value.strip():
        return ""
    value = value.strip()
    if is_absolute_url(value):
        return value
    if value.startswith('//'):
        return f"https:{value}"
    if value.startswith('/'):
        return MEDIA_TEMPLATES['wayground'].format(path=value)
    return urljoin(MEDIA_TEMPLATES['wayground'].format(path='/'), value)


def resolve_gimkit_image(value: Any) -> str:
    """Gimkit images are absolute URLs or ``{url}``, ``{image}``, ``{id}`` descriptors."""
    if isinstance(value, dict):
        nested = _descriptor_value(value, ['url', 'image'])
        if nested:
            value = nested
        else:
            image_id = _descriptor_value(value, ['id'])
            return MEDIA_TEMPLATES['gimkit'].format(id=image_id) if image_id else ""
    if not isinstance(value, str) or not value.strip():
        return ""
    value = value.strip()
    if is_absolute_url(value):
        return value
    return MEDIA_TEMPLATES['gimkit'].format(id=value)


def _first_url(data: Any, list_key: str, path: List[str]) -> str:
    """URL at ``path`` inside the first entry of ``data[list_key]``; empty for any other shape."""
    entries = data.get(list_key) if isinstance(data, dict) else None
    if not isinstance(entries, list) or not entries:
        return ""
    value: Any = entries[0]
    for key in path:
        if not isinstance(value, dict):
            return ""
        value = value.get(key)
    return value if isinstance(value, str) else ""


class ImageLookupService:
    """
    Fills missing question images from stock photo APIs.

    Providers are tried in order (Pexels, then Pixabay); a provider is skipped
    when it has no API key. Calls are sequential and spaced by the rate
    limiter. Lookup failures leave the image empty.
    """

    def __init__(self, pexels_api_key: str = "", pixabay_api_key: str = "",
                 requests_per_minute: int = ENRICHMENT_DEFAULTS['requests_per_minute'],
                 query_words: int = ENRICHMENT_DEFAULTS['query_words'],
                 timeout_seconds: float = 10):
        self.logger = logging.getLogger(__name__)
        self.pexels_api_key = pexels_api_key
        self.pixabay_api_key = pixabay_api_key
        self.query_words = query_words
        self.timeout_seconds = timeout_seconds
        self.rate_limiter = RateLimiter(requests_per_minute)

    @property
    def enabled(self) -> bool:
        return bool(self.pexels_api_key or self.pixabay_api_key)

    async def enrich(self, questions: List[Question], session: Optional[aiohttp.ClientSession] = None) -> int:
        """
        Fill ``image_url`` on questions that have none.

        Args:
            questions: Normalized questions, updated in place
            session: Shared HTTP session, created when omitted

        Returns:
            int: Number of questions that received an image
        """
        if not self.enabled:
            self.logger.warning("Image enrichment requested but no stock photo API key is configured")
            return 0

        if session is None:
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            async with aiohttp.ClientSession(timeout=timeout) as own_session:
                return await self._enrich(questions, own_session)
        return await self._enrich(questions, session)

    async def _enrich(self, questions: List[Question], session: aiohttp.ClientSession) -> int:
        filled = 0
        for question in questions:
            if question.image_url:
                continue
            query = TextProcessor.search_query(question.text, self.query_words)
            url = await self.search_image(query, session)
            if url:
                question.image_url = url
                filled += 1

        self.logger.info(f"Image enrichment filled {filled} of {len(questions)} question(s)")
        return filled

    async def search_image(self, query: str, session: aiohttp.ClientSession) -> str:
        """Search providers in order and return the first image URL found."""
        if self.pexels_api_key:
            try:
                data = await self._get_json(
                    session, PEXELS_SEARCH_URL,
                    params={'query': query, 'per_page': 1, 'orientation': 'landscape', 'size': 'medium'},
                    headers={'Authorization': self.pexels_api_key}
                )
                url = _first_url(data, 'photos', ['src', 'medium'])
                if url:
                    self.logger.debug(f"Pexels image found for '{query}'")
                    return url
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                self.logger.warning(f"Pexels lookup failed for '{query}': {type(e).__name__}: {e}")

        if self.pixabay_api_key:
            try:
                data = await self._get_json(
                    session, PIXABAY_SEARCH_URL,
                    params={'key': self.pixabay_api_key, 'q': query, 'image_type': 'photo',
                            'safesearch': 'true', 'orientation': 'horizontal'}
                )
                url = _first_url(data, 'hits', ['webformatURL'])
                if url:
                    self.logger.debug(f"Pixabay image found for '{query}'")
                    return url
            except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
                self.logger.warning(f"Pixabay lookup failed for '{query}': {type(e).__name__}: {e}")

        self.logger.debug(f"No image found for '{query}'")
        return ""

    @retry(
        retry=retry_if_exception_type(aiohttp.ClientConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True
    )
    async def _get_json(self, session: aiohttp.ClientSession, url: str,
                        params: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        await self.rate_limiter.acquire()
        async with session.get(url, params=params, headers=headers or {}) as response:
            response.raise_for_status()
            return await response.json(content_type=None)
