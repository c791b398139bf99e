"""
Tests for the canonical record validator.
"""

from quizbridge.models import Option, Question, Quiz
from quizbridge.utils.validation import DataValidator


def good_question(question_id='q1'):
    return Question(
        id=question_id, text='Capital of France?',
        options=[Option(id='o1', text='Paris'), Option(id='o2', text='Rome')],
        correct_option_id='o1', correct_option_ids=['o1'], time_limit=20
    )


def test_valid_question():
    valid, errors, warnings = DataValidator().validate_question(good_question())
    assert valid
    assert errors == []
    assert warnings == []


def test_correct_ids_must_be_options():
    question = good_question()
    question.correct_option_ids = ['o9']
    question.correct_option_id = 'o9'
    valid, errors, _ = DataValidator().validate_question(question)
    assert not valid
    assert any('not among options' in e for e in errors)


def test_correct_ids_must_follow_option_order():
    question = good_question()
    question.correct_option_ids = ['o2', 'o1']
    question.correct_option_id = 'o2'
    _, errors, _ = DataValidator().validate_question(question)
    assert 'Correct option ids are not in option order' in errors


def test_single_correct_must_mirror_first():
    question = good_question()
    question.correct_option_id = 'o2'
    _, errors, _ = DataValidator().validate_question(question)
    assert any('disagrees' in e for e in errors)


def test_time_limit_bounds():
    question = good_question()
    question.time_limit = 301
    valid, errors, _ = DataValidator().validate_question(question)
    assert not valid
    assert any('Time limit' in e for e in errors)


def test_flag_must_match_coverage():
    question = good_question()
    question.correct_option_ids = []
    question.correct_option_id = ''
    _, errors, _ = DataValidator().validate_question(question)
    assert 'needsEnhanceAI does not match options/correct coverage' in errors

    question.needs_enhance_ai = True
    question.enhance_reason = 'no_correct_exposed'
    valid, _, _ = DataValidator().validate_question(question)
    assert valid


def test_html_leftovers_are_warnings():
    question = good_question()
    question.text = 'Fish &amp; <b>chips</b>'
    valid, _, warnings = DataValidator().validate_question(question)
    assert valid
    assert len(warnings) == 2


def test_validate_quiz_counts_duplicates():
    quiz = Quiz(title='T', questions=[good_question('a'), good_question('a'), good_question('b')])
    results = DataValidator().validate_quiz(quiz)

    assert results['total_questions'] == 3
    assert results['valid_questions'] == 2
    assert results['invalid_questions'] == 1
    assert 'Duplicate question id: a' in results['errors']['a']
