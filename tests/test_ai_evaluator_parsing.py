import json

import pytest

from pyquiz.ai_evaluator import MISSING_RESULT_FEEDBACK, AIEvaluator, EvaluationError


def test_ai_parse_results_key():
    evaluator = AIEvaluator(api_key='sk-test')
    response = '{"results": [{"output": "4", "isCorrect": true, "feedback": "Good", "syntaxError": null}]}'
    results = evaluator._parse_ai_response(response)
    assert results == [{"output": "4", "isCorrect": True, "feedback": "Good", "syntaxError": None}]


def test_ai_parse_bare_array():
    evaluator = AIEvaluator(api_key='sk-test')
    results = evaluator._parse_ai_response('[{"isCorrect": false}, {"isCorrect": true}]')
    assert len(results) == 2


def test_ai_parse_evaluations_key():
    evaluator = AIEvaluator(api_key='sk-test')
    results = evaluator._parse_ai_response('{"evaluations": [{"isCorrect": true}]}')
    assert results == [{"isCorrect": True}]


def test_ai_parse_single_object_is_wrapped():
    evaluator = AIEvaluator(api_key='sk-test')
    results = evaluator._parse_ai_response('{"output": "hi", "isCorrect": true, "feedback": "ok"}')
    assert len(results) == 1
    assert results[0]["output"] == "hi"


def test_ai_parse_json_inside_prose():
    evaluator = AIEvaluator(api_key='sk-test')
    response = 'Here is the grading:\n```json\n{"results": [{"isCorrect": true}]}\n```\nThanks.'
    results = evaluator._parse_ai_response(response)
    assert results == [{"isCorrect": True}]


def test_ai_parse_without_json_raises():
    evaluator = AIEvaluator(api_key='sk-test')
    with pytest.raises(EvaluationError):
        evaluator._parse_ai_response('The code looks correct to me.')


def test_ai_parse_scalar_json_raises():
    evaluator = AIEvaluator(api_key='sk-test')
    with pytest.raises(EvaluationError):
        evaluator._parse_ai_response('42')


def test_align_results_pads_missing_entries():
    evaluator = AIEvaluator(api_key='sk-test')
    aligned = evaluator._align_results([{"output": "1", "isCorrect": True, "feedback": "ok"}], 3)
    assert len(aligned) == 3
    assert aligned[0].is_correct is True
    assert aligned[1].is_correct is False
    assert aligned[1].feedback == MISSING_RESULT_FEEDBACK
    assert aligned[2].output == ''


def test_align_results_truncates_extra_entries():
    evaluator = AIEvaluator(api_key='sk-test')
    aligned = evaluator._align_results([{"isCorrect": True}] * 4, 2)
    assert len(aligned) == 2


def test_align_results_keeps_syntax_error():
    evaluator = AIEvaluator(api_key='sk-test')
    raw = {"output": "", "isCorrect": False, "feedback": "Fix it",
           "syntaxError": {"line": 3, "message": "invalid syntax"}}
    aligned = evaluator._align_results([raw], 1)
    assert aligned[0].syntax_error.line == 3
    assert aligned[0].to_dict()["syntaxError"] == {"line": 3, "message": "invalid syntax"}


def test_non_object_entries_become_placeholders():
    evaluator = AIEvaluator(api_key='sk-test')
    aligned = evaluator._align_results(["oops"], 1)
    assert aligned[0].feedback == MISSING_RESULT_FEEDBACK


def test_results_round_trip_through_wire_shape():
    evaluator = AIEvaluator(api_key='sk-test')
    raw = {"output": "Hello", "isCorrect": True, "feedback": "Nice", "syntaxError": None}
    aligned = evaluator._align_results(evaluator._parse_ai_response(json.dumps([raw])), 1)
    assert aligned[0].to_dict() == raw
