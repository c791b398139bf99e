"""
Tests for discovery report status and coverage.
"""

from quizbridge.models import FetchAttempt, Option, Question
from quizbridge.scraper.normalize import apply_quality_flags
from quizbridge.utils.deep_finder import Candidate
from quizbridge.utils.report import DiscoveryReportBuilder


def question(n, correct=True, options=2, image=''):
    q = Question(
        id=f'q{n}', text=f'Q{n}', image_url=image,
        options=[Option(id=f'o{i + 1}', text=f'opt {i}') for i in range(options)]
    )
    if correct and options:
        q.correct_option_ids = ['o1']
        q.correct_option_id = 'o1'
    apply_quality_flags(q)
    return q


def test_success():
    builder = DiscoveryReportBuilder('kahoot', 'https://kahoot.it/x')
    builder.set_winner('Proxy', 'card_api')
    report = builder.build([question(1), question(2, image='https://i.test/a.png')])

    assert report.status == 'success'
    assert report.questions_found == 2
    assert report.has_images
    assert report.missing == {'options': False, 'correct': False, 'image': False, 'reasons': []}


def test_partial_with_reason_counts():
    builder = DiscoveryReportBuilder('wayground', 'https://wayground.com/x')
    builder.set_winner('Reader', 'quiz_page')
    report = builder.build([question(n, correct=False) for n in range(5)])

    assert report.status == 'partial_data'
    assert report.flagged_questions == 5
    assert report.missing['correct'] is True
    assert report.missing['options'] is False
    assert report.missing['reasons'] == ['no_correct_exposed: 5/5 questions']


def test_mixed_reasons():
    questions = [question(1), question(2, options=1), question(3, correct=False)]
    report = DiscoveryReportBuilder('blooket', 'u').build(questions)

    assert report.status == 'partial_data'
    assert 'less_than_2_options: 1/3 questions' in report.missing['reasons']
    assert 'no_correct_exposed: 1/3 questions' in report.missing['reasons']


def test_blocked_wins_over_everything():
    builder = DiscoveryReportBuilder('kahoot', 'u')
    builder.add_attempts([FetchAttempt(agent='A', target='card_api', url='u', outcome='blocked')])
    builder.mark_blocked()
    report = builder.build(None)

    assert report.status == 'transport_blocked'
    assert report.blocked
    assert report.missing['reasons'] == ['transport_blocked']
    assert report.missing['options'] and report.missing['correct'] and report.missing['image']


def test_no_structure_with_reason():
    report = DiscoveryReportBuilder('gimkit', 'u').mark_no_structure('no_candidate_arrays').build()
    assert report.status == 'no_structure_found'
    assert report.missing['reasons'] == ['no_structure_found', 'no_candidate_arrays']


def test_parsed_empty():
    builder = DiscoveryReportBuilder('kahoot', 'u')
    builder.set_winner('Proxy', 'card_api')
    report = builder.build([])
    assert report.status == 'parsed_empty'
    assert report.parse_ok


def test_notes_are_deduplicated():
    builder = DiscoveryReportBuilder('kahoot', 'u')
    builder.add_notes(['a', 'b']).add_notes(['b', 'c'])
    assert builder.build().notes == ['a', 'b', 'c']


def test_candidates_keep_top_five():
    candidates = [Candidate(array=[{}], score=100 - n, path=f'$.c{n}') for n in range(8)]
    builder = DiscoveryReportBuilder('kahoot', 'u').set_candidates(candidates, [f'k{n}' for n in range(40)])
    report = builder.build()

    assert len(report.candidates_top5) == 5
    assert report.selected_path == '$.c0'
    assert len(report.top_level_keys) == 30
