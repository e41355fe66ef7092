import logging

from flask import Blueprint, current_app, jsonify, request

from pyquiz.ai_evaluator import EvaluationError, EvaluatorNotConfigured, ai_evaluator, grade_quiz
from pyquiz.code_runner import RuntimeInitError, needs_input, python_runtime
from pyquiz.models.models import EvaluationResult, Problem
from pyquiz.problems import ProblemSetError, generate_random_quiz, load_problem_sets
from pyquiz.results import summarize_results
from pyquiz.suspicion_detector import detect_cheating, get_profile

logger = logging.getLogger(__name__)

main = Blueprint('main', __name__)


def _json_body():
    """Request JSON as a dict; anything else counts as an empty body."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _parse_problems(raw):
    """Convert request problems into Problem objects, restoring hidden context by title."""
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise ValueError('problems must be a list of objects')
    problems = [Problem.from_dict(item) for item in raw]
    if all(problem.context for problem in problems):
        return problems

    try:
        known = {
            problem.title: problem.context
            for problem_set in load_problem_sets().values()
            for problem in problem_set
            if problem.context
        }
    except ProblemSetError as e:
        logger.warning("Could not restore problem context: %s", e)
        return problems

    return [
        problem if problem.context or problem.title not in known
        else Problem(problem.title, problem.description, known[problem.title], problem.category)
        for problem in problems
    ]


def _parse_codes(raw):
    if not isinstance(raw, list):
        raise ValueError('userCodes must be a list')
    return ['' if code is None else str(code) for code in raw]


def _profile_for(data):
    return data.get('profile') or current_app.config.get('SUSPICION_PROFILE')


@main.route('/api/quiz', methods=['GET'])
def new_quiz():
    """Return a random quiz with one problem per category."""
    try:
        problems = generate_random_quiz()
    except ProblemSetError as e:
        logger.error("Problem set unavailable: %s", e)
        return jsonify({'error': 'Problem set unavailable', 'details': str(e)}), 500
    return jsonify({'problems': [problem.to_dict(include_context=False) for problem in problems]})


@main.route('/api/detect', methods=['POST'])
def detect():
    """Score a submission for copy-paste suspicion."""
    data = _json_body()
    code = data.get('code')
    if code is not None and not isinstance(code, str):
        return jsonify({'error': 'code must be a string'}), 400
    try:
        profile = get_profile(_profile_for(data))
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    return jsonify(detect_cheating(code or '', profile).to_dict())


@main.route('/api/run', methods=['POST'])
def run_code():
    """
    Execute Python code and return the output.
    """
    data = _json_body()
    code = data.get('code') or ''
    user_inputs = data.get('inputs') or []

    if not isinstance(code, str) or not code.strip():
        return jsonify({'error': 'No code provided'}), 400
    if not isinstance(user_inputs, list):
        return jsonify({'error': 'inputs must be a list'}), 400

    try:
        result = python_runtime.run(code, user_inputs)
    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except RuntimeInitError as e:
        return jsonify({'error': 'Python runtime unavailable', 'details': str(e)}), 503

    return jsonify(result.to_dict())


@main.route('/check-input-needed', methods=['POST'])
def check_input_needed():
    """
    Check if code needs input and return the prompt it shows first.
    """
    data = _json_body()
    code = data.get('code') or ''
    if not isinstance(code, str) or not code.strip():
        return jsonify({'needs_input': False, 'prompt': ''})
    return jsonify(needs_input(code))


@main.route('/api/evaluate', methods=['POST'])
def evaluate():
    """Grade all submissions of a quiz with one call to the grading endpoint."""
    data = _json_body()
    try:
        problems = _parse_problems(data.get('problems'))
        user_codes = _parse_codes(data.get('userCodes'))
    except ValueError:
        return jsonify({'error': 'Invalid request body'}), 400

    try:
        results = ai_evaluator.evaluate_all(problems, user_codes)
    except EvaluatorNotConfigured as e:
        logger.error("API key not found")
        return jsonify({'error': str(e), 'details': e.details}), e.status
    except EvaluationError as e:
        return jsonify({'error': str(e), 'details': e.details}), e.status
    except Exception as e:
        logger.exception("Evaluation error")
        return jsonify({'error': 'Internal server error', 'message': str(e)}), 500

    return jsonify([result.to_dict() for result in results])


@main.route('/api/results', methods=['POST'])
def results_summary():
    """Summarize a finished quiz: score plus copy-paste analysis per problem."""
    data = _json_body()
    try:
        problems = _parse_problems(data.get('problems'))
        user_codes = _parse_codes(data.get('userCodes'))
        profile = get_profile(_profile_for(data))
    except ValueError as e:
        return jsonify({'error': 'Invalid request body', 'details': str(e)}), 400

    if data.get('grade'):
        evaluations = grade_quiz(problems, user_codes, evaluator=ai_evaluator)
    else:
        raw_evaluations = data.get('evaluations') or []
        if not isinstance(raw_evaluations, list):
            return jsonify({'error': 'Invalid request body', 'details': 'evaluations must be a list'}), 400
        evaluations = [EvaluationResult.from_dict(item) if item else None for item in raw_evaluations]

    summary = summarize_results(problems, user_codes, evaluations, profile)
    return jsonify(summary.to_dict())
