"""
Tests for the command line entry point.
"""

import json

from quizbridge import main as cli
from quizbridge.models import DiscoveryReport, ExtractionResult, Quiz


def result_with(status, handled=True, quiz=None):
    return ExtractionResult(quiz=quiz, report=DiscoveryReport(platform='kahoot', source_url='u', status=status),
                            handled=handled)


def test_exit_codes():
    assert cli.exit_code_for(result_with('success', quiz=Quiz(title='T'))) == cli.EXIT_OK
    assert cli.exit_code_for(result_with('partial_data', quiz=Quiz(title='T'))) == cli.EXIT_OK
    assert cli.exit_code_for(result_with('transport_blocked')) == cli.EXIT_FAILED
    assert cli.exit_code_for(result_with('parsed_empty', quiz=Quiz(title='T'))) == cli.EXIT_FAILED
    assert cli.exit_code_for(result_with('not_handled', handled=False)) == cli.EXIT_NOT_HANDLED


def test_format_summary_mentions_title_and_reasons():
    result = result_with('partial_data', quiz=Quiz(title='Geography'))
    result.report.missing['reasons'] = ['no_correct_exposed: 2/2 questions']
    result.report.notes = ['card_api: skipped content slide at index 1']

    summary = cli.format_summary(result)
    assert summary.splitlines()[0] == 'Quiz:       Geography'
    assert 'no_correct_exposed: 2/2 questions' in summary
    assert 'skipped content slide' in summary


def test_write_json(tmp_path):
    target = tmp_path / 'out' / 'quiz.json'
    cli.write_json(result_with('success', quiz=Quiz(title='T')), str(target))

    payload = json.loads(target.read_text(encoding='utf-8'))
    assert payload['quiz']['title'] == 'T'
    assert payload['report']['status'] == 'success'


def test_main_rejects_bad_config(tmp_path, capsys):
    path = tmp_path / 'settings.json'
    path.write_text('{broken', encoding='utf-8')

    assert cli.main(['https://kahoot.it/x', '--config', str(path)]) == cli.EXIT_FAILED
    assert 'Configuration error' in capsys.readouterr().err


def test_main_unknown_url(tmp_path, monkeypatch, capsys):
    monkeypatch.setattr(cli, 'setup_logging', lambda settings: None)
    output = tmp_path / 'report.json'

    code = cli.main(['https://example.com/quiz', '--config', str(tmp_path / 'missing.json'),
                     '--output', str(output)])

    assert code == cli.EXIT_NOT_HANDLED
    assert 'Status:     not_handled' in capsys.readouterr().out
    assert json.loads(output.read_text(encoding='utf-8'))['quiz'] is None
