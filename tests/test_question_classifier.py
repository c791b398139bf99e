"""
Tests for question type classification.
"""

import pytest

from quizbridge.utils.question_classifier import QuestionClassifier, detect_question_type


@pytest.fixture
def classifier():
    return QuestionClassifier()


@pytest.mark.parametrize('platform, raw_type, expected', [
    ('kahoot', 'quiz', 'multiple-choice'),
    ('kahoot', 'multiple_select_quiz', 'multi-select'),
    ('kahoot', 'survey', 'poll'),
    ('kahoot', 'open_ended', 'open-ended'),
    ('kahoot', 'drop_pin', 'draw'),
    ('wayground', 'MCQ', 'multiple-choice'),
    ('wayground', 'MSQ', 'multi-select'),
    ('wayground', 'BLANK', 'fill-in-blank'),
    ('blooket', 'typing', 'fill-in-blank'),
    ('gimkit', 'text', 'fill-in-blank')
])
def test_platform_labels(classifier, platform, raw_type, expected):
    assert classifier.classify(['a', 'b', 'c'], 1, platform, raw_type) == expected


def test_quiz_label_with_true_false_options(classifier):
    assert classifier.classify(['True', 'False'], 1, 'kahoot', 'quiz') == 'true-false'


def test_unknown_label_falls_back_to_inference(classifier):
    assert classifier.classify(['a', 'b'], 2, 'kahoot', 'hologram') == 'multi-select'
    assert classifier.classify(['a', 'b'], 1, 'gimkit', 'hologram') == 'multiple-choice'


@pytest.mark.parametrize('options, expected', [
    (['True', 'False'], True),
    (['no', 'YES'], True),
    (['Vrai', 'Faux'], True),
    (['True', 'True'], False),
    (['True', 'False', 'Maybe'], False),
    (['Paris', 'Rome'], False),
    (['True', ''], False)
])
def test_is_true_false(classifier, options, expected):
    assert classifier.is_true_false(options) is expected


def test_detect_question_type_helper():
    assert detect_question_type(['Yes', 'No']) == 'true-false'
    assert detect_question_type(['a', 'b', 'c'], correct_count=2) == 'multi-select'
    assert detect_question_type(['a', 'b', 'c'], correct_count=0) == 'multiple-choice'
