"""
Tests for text cleaning and field lookup.
"""

from quizbridge.utils.text_processor import TextProcessor


def test_strip_html():
    assert TextProcessor.strip_html('<p>What is <strong>H2O</strong>?</p>') == 'What is H2O ?'
    assert TextProcessor.strip_html('Fish &amp; chips') == 'Fish & chips'
    assert TextProcessor.strip_html('') == ''


def test_clean_text():
    assert TextProcessor.clean_text('  a\xa0 b  ') == 'a b'
    assert TextProcessor.clean_text(42) == '42'
    assert TextProcessor.clean_text(None) == ''
    assert TextProcessor.clean_text({'text': 'x'}) == ''


def test_get_path_and_first_non_empty():
    raw = {'structure': {'query': {'text': ''}}, 'title': 'Fallback', 'points': 0}
    assert TextProcessor.get_path(raw, 'structure.query.text') == ''
    assert TextProcessor.get_path(raw, 'structure.missing.text') is None
    assert TextProcessor.first_non_empty(raw, ['structure.query.text', 'title']) == 'Fallback'
    assert TextProcessor.first_non_empty(raw, ['points']) == '0'
    assert TextProcessor.first_non_empty(raw, ['nothing']) is None


def test_search_query():
    assert TextProcessor.search_query('What is the capital of France?') == 'What is the'
    assert TextProcessor.search_query('???') == 'education'


def test_match_key():
    assert TextProcessor.match_key('  New   York ') == 'new york'
    assert TextProcessor.match_key(None) == ''
