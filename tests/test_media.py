"""
Tests for image reference resolution and image enrichment.
"""

import asyncio

import aiohttp
import pytest

from quizbridge.models import Question
from quizbridge.scraper.media import (
    PEXELS_SEARCH_URL, ImageLookupService, is_absolute_url, resolve_blooket_image,
    resolve_gimkit_image, resolve_kahoot_image, resolve_wayground_image
)


def test_is_absolute_url():
    assert is_absolute_url('https://a.test/x.png')
    assert is_absolute_url('data:image/png;base64,AAAA')
    assert not is_absolute_url('//a.test/x.png')
    assert not is_absolute_url(None)


@pytest.mark.parametrize('value, expected', [
    ('3f1c2a4e-1111-2222-3333-444455556666', 'https://images-cdn.kahoot.it/3f1c2a4e-1111-2222-3333-444455556666'),
    ('https://cdn.test/a.png', 'https://cdn.test/a.png'),
    ({'id': 'abc'}, 'https://images-cdn.kahoot.it/abc'),
    ('some/relative/path', ''),
    ('', ''),
    (None, '')
])
def test_resolve_kahoot_image(value, expected):
    assert resolve_kahoot_image(value) == expected


def test_resolve_blooket_image():
    assert resolve_blooket_image('abc123') == 'https://media.blooket.com/image/upload/abc123'
    assert resolve_blooket_image({'url': 'https://x.test/b.png'}) == 'https://x.test/b.png'
    assert resolve_blooket_image({}) == ''


def test_resolve_wayground_image():
    assert resolve_wayground_image('//media.quizizz.com/a.png') == 'https://media.quizizz.com/a.png'
    assert resolve_wayground_image('/resource/a.png') == 'https://media.quizizz.com/resource/a.png'
    assert resolve_wayground_image('resource/a.png') == 'https://media.quizizz.com/resource/a.png'
    assert resolve_wayground_image({'url': 'https://q.test/a.png'}) == 'https://q.test/a.png'


def test_resolve_gimkit_image():
    assert resolve_gimkit_image({'url': 'https://g.test/a.png'}) == 'https://g.test/a.png'
    assert resolve_gimkit_image({'id': 'kitimg'}) == 'https://res.cloudinary.com/gimkit/image/upload/kitimg'
    assert resolve_gimkit_image('kitimg') == 'https://res.cloudinary.com/gimkit/image/upload/kitimg'
    assert resolve_gimkit_image({'alt': 'none'}) == ''


def test_disabled_service_leaves_questions_alone():
    service = ImageLookupService()
    questions = [Question(id='q1', text='Capital of France')]

    assert not service.enabled
    assert asyncio.run(service.enrich(questions)) == 0
    assert questions[0].image_url == ''


def test_enrich_fills_only_missing_images(monkeypatch):
    service = ImageLookupService(pexels_api_key='key')
    queries = []

    async def fake_get_json(session, url, params, headers=None):
        queries.append(params['query'])
        return {'photos': [{'src': {'medium': 'https://images.pexels.test/1.jpg'}}]}

    monkeypatch.setattr(service, '_get_json', fake_get_json)
    questions = [
        Question(id='q1', text='What is the capital of France?'),
        Question(id='q2', text='Has image', image_url='https://cdn.test/keep.png')
    ]

    filled = asyncio.run(service.enrich(questions, session=object()))

    assert filled == 1
    assert questions[0].image_url == 'https://images.pexels.test/1.jpg'
    assert questions[1].image_url == 'https://cdn.test/keep.png'
    assert queries == ['What is the']


def test_failed_provider_falls_through_to_next(monkeypatch):
    service = ImageLookupService(pexels_api_key='key', pixabay_api_key='other')

    async def fake_get_json(session, url, params, headers=None):
        if url == PEXELS_SEARCH_URL:
            raise aiohttp.ClientConnectionError('down')
        return {'hits': [{'webformatURL': 'https://pixabay.test/2.jpg'}]}

    monkeypatch.setattr(service, '_get_json', fake_get_json)
    assert asyncio.run(service.search_image('volcano', session=object())) == 'https://pixabay.test/2.jpg'


def test_no_results_leaves_image_empty(monkeypatch):
    service = ImageLookupService(pixabay_api_key='other')

    async def fake_get_json(session, url, params, headers=None):
        return {'hits': []}

    monkeypatch.setattr(service, '_get_json', fake_get_json)
    questions = [Question(id='q1', text='Obscure')]
    assert asyncio.run(service.enrich(questions, session=object())) == 0
    assert questions[0].image_url == ''


def test_provider_timeout_returns_empty(monkeypatch):
    service = ImageLookupService(pexels_api_key='key', pixabay_api_key='other')

    async def timed_out(session, url, params, headers=None):
        raise asyncio.TimeoutError()

    monkeypatch.setattr(service, '_get_json', timed_out)
    assert asyncio.run(service.search_image('volcano', session=object())) == ''


@pytest.mark.parametrize('reply', [
    [],
    'not json',
    {'photos': 'none'},
    {'photos': [None]},
    {'photos': [{'src': None}]},
    {'photos': [{'src': ['https://x.test/a.jpg']}]},
    {'photos': [{'src': {'medium': 42}}]}
])
def test_malformed_pexels_reply_returns_empty(monkeypatch, reply):
    service = ImageLookupService(pexels_api_key='key')

    async def fake_get_json(session, url, params, headers=None):
        return reply

    monkeypatch.setattr(service, '_get_json', fake_get_json)
    assert asyncio.run(service.search_image('volcano', session=object())) == ''


def test_malformed_pexels_reply_falls_through_to_pixabay(monkeypatch):
    service = ImageLookupService(pexels_api_key='key', pixabay_api_key='other')

    async def fake_get_json(session, url, params, headers=None):
        if url == PEXELS_SEARCH_URL:
            return {'photos': [{'src': None}]}
        return {'hits': [{'webformatURL': 'https://pixabay.test/3.jpg'}]}

    monkeypatch.setattr(service, '_get_json', fake_get_json)
    assert asyncio.run(service.search_image('volcano', session=object())) == 'https://pixabay.test/3.jpg'
