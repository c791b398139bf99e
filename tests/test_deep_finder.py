"""
Tests for the deep structural finder.
"""

import copy

from quizbridge.utils.deep_finder import (
    DeepStructuralFinder, find_image_refs, has_correct_marker, is_question_like
)


def scenario_a_document():
    questions = [
        {
            'question': f'Question {n}?',
            'answers': ['Alpha', 'Beta', 'Gamma', 'Delta'],
            'correctAnswers': ['Gamma']
        }
        for n in range(5)
    ]
    return {
        'meta': {'version': 3},
        'data': {
            'game': {
                'title': 'Greek letters',
                'tags': ['letters', 'greek'],
                'questions': questions
            }
        }
    }


def test_scenario_a_nested_array_is_top_candidate():
    document = scenario_a_document()
    candidates = DeepStructuralFinder().find(document)

    assert candidates
    top = candidates[0]
    assert top.array is document['data']['game']['questions']
    assert top.path == '$.data.game.questions'
    assert top.valid_items == 5


def test_find_is_deterministic():
    document = scenario_a_document()
    finder = DeepStructuralFinder()
    first = finder.find(document)
    second = finder.find(copy.deepcopy(document))

    assert [c.path for c in first] == [c.path for c in second]
    assert first[0].score == second[0].score


def test_correctness_marker_strictly_increases_score():
    finder = DeepStructuralFinder()
    base = [
        {'question': 'Q1', 'answers': ['a', 'b']},
        {'question': 'Q2', 'answers': ['c', 'd']}
    ]
    marked = copy.deepcopy(base)
    marked[0]['correctIndex'] = 1

    base_score, _ = finder.score_array(base)
    marked_score, _ = finder.score_array(marked)
    assert marked_score > base_score


def test_array_below_ratio_is_never_candidate():
    finder = DeepStructuralFinder()
    noise = [{'id': n, 'kind': 'filler'} for n in range(8)]
    strong = [
        {'question': 'Q1', 'choices': [{'answer': 'a', 'correct': True}], 'typingAnswers': ['a'], 'time': 20},
        {'question': 'Q2', 'choices': [{'answer': 'b', 'correct': True}], 'typingAnswers': ['b'], 'time': 20}
    ]
    document = {'items': noise + strong}

    # 2 of 10 elements are question-like
    paths = [c.path for c in finder.find(document)]
    assert '$.items' not in paths


def test_array_at_ratio_is_candidate():
    finder = DeepStructuralFinder()
    items = [{'id': n} for n in range(7)] + [{'question': f'Q{n}'} for n in range(3)]
    paths = [c.path for c in finder.find({'items': items})]
    assert '$.items' in paths


def test_skip_keys_are_not_descended():
    document = {
        'settings': {'questions': [{'question': 'hidden', 'answers': ['a', 'b']}]},
        'payload': {'questions': [{'question': 'visible', 'answers': ['a', 'b']}]}
    }
    paths = [c.path for c in DeepStructuralFinder().find(document)]
    assert paths == ['$.payload.questions']


def test_arrays_inside_arrays_are_scanned():
    document = {'sets': [[{'question': 'Q1', 'answers': ['a', 'b'], 'correctAnswer': 'a'}]]}
    candidates = DeepStructuralFinder().find(document)
    assert candidates[0].path == '$.sets[0]'


def test_max_depth_bounds_the_walk():
    document = {'a': {'b': {'c': {'questions': [{'question': 'deep'}]}}}}
    assert DeepStructuralFinder(max_depth=2).find(document) == []
    assert DeepStructuralFinder(max_depth=12).find(document)


def test_ties_keep_discovery_order():
    item = {'question': 'Q', 'answers': ['a', 'b']}
    document = {'first': [dict(item)], 'second': [dict(item)]}
    paths = [c.path for c in DeepStructuralFinder().find(document)]
    assert paths == ['$.first', '$.second']


def test_wayground_shape_is_question_like():
    item = {'structure': {'query': {'text': '<p>Q</p>'}, 'options': [{'text': 'a'}], 'answer': 0}}
    assert is_question_like(item)
    assert has_correct_marker(item)


def test_correct_markers():
    assert has_correct_marker({'question': 'Q', 'correctAnswerId': 'abc'})
    assert has_correct_marker({'question': 'Q', 'answer': 2})
    assert has_correct_marker({'question': 'Q', 'options': [{'text': 'a', 'isCorrect': True}]})
    assert not has_correct_marker({'question': 'Q', 'answer': 'free text'})
    assert not has_correct_marker({'question': 'Q', 'correctAnswers': []})
    assert not has_correct_marker({'question': 'Q', 'options': [{'text': 'a', 'correct': False}]})


def test_find_image_refs():
    document = {
        'cover': 'https://cdn.example.com/cover.png',
        'questions': [{'image': 'abc123xyz', 'text': 'no image here'}],
        'link': 'https://example.com/page'
    }
    refs = find_image_refs(document)
    paths = [path for path, _ in refs]
    assert '$.cover' in paths
    assert '$.questions[0].image' in paths
    assert '$.link' not in paths


def test_find_image_refs_caps_hits():
    document = {'images': [f'https://cdn.example.com/{n}.jpg' for n in range(80)]}
    assert len(find_image_refs(document)) == 50
