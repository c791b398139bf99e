"""
Tests for challenge page detection.
"""

import json

from quizbridge.utils.bot_detector import BotDetector, is_blocked
from tests.fakes import CHALLENGE_PAGE


def test_challenge_page_is_blocked():
    assert is_blocked(CHALLENGE_PAGE) is True


def test_phrase_only_page_is_blocked():
    html = "<html><body><h1>Access Denied</h1><p>You don't have permission.</p></body></html>"
    assert is_blocked(html) is True


def test_normal_page_is_not_blocked():
    html = "<html><body><h1>Photosynthesis quiz</h1><p>10 questions</p></body></html>"
    assert is_blocked(html) is False


def test_empty_text_is_not_blocked():
    assert is_blocked("") is False


def test_json_mentioning_phrase_is_not_blocked():
    payload = json.dumps({
        'questions': [{'question': 'What does a security check at the airport look for?',
                       'answers': ['Liquids', 'Books']}]
    })
    assert is_blocked(payload) is False


def test_structural_marker_in_json_is_blocked():
    payload = '{"html": "<form id=\\"challenge-form\\">"}'
    assert is_blocked(payload) is True


def test_marker_beyond_prefix_is_ignored():
    detector = BotDetector(prefix_chars=100)
    text = "x" * 200 + "verify you are human"
    assert detector.is_blocked(text) is False
    assert BotDetector(prefix_chars=1000).is_blocked(text) is True


def test_matched_marker_reports_phrase():
    detector = BotDetector()
    assert detector.matched_marker("<p>Checking your browser before accessing</p>") == 'checking your browser'
