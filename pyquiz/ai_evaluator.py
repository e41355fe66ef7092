"""
AI Code Evaluator using an OpenAI-compatible chat completions endpoint
Grades every problem of a quiz in a single request
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Sequence

import requests

from pyquiz import config
from pyquiz.models.models import EvaluationResult, Problem

logger = logging.getLogger(__name__)

MISSING_RESULT_FEEDBACK = "Could not generate an evaluation result."
API_ERROR_OUTPUT = "An error occurred during API evaluation."

SYSTEM_PROMPT = "You are a Python programming expert. Evaluate student code and respond with valid JSON only."


class EvaluationError(Exception):
    """Raised when the grading endpoint fails or returns an unusable answer."""

    def __init__(self, message: str, status: int = 502, details: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.details = details


class EvaluatorNotConfigured(EvaluationError):
    """Raised when no API key is configured."""

    def __init__(self):
        super().__init__(
            "API key not configured",
            status=500,
            details="Set OPENAI_API_KEY in the environment or in a .env file and restart the server",
        )


class AIEvaluator:
    """AI-powered grader for quiz submissions"""

    def __init__(self, api_key: Optional[str] = None, api_url: Optional[str] = None,
                 model: Optional[str] = None, timeout: int = 30):
        self.api_key = api_key
        self.api_url = api_url or config.OPENAI_API_URL
        self.model = model or config.OPENAI_MODEL
        self.timeout = timeout

    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def evaluate_all(self, problems: Sequence[Problem], user_codes: Sequence[str]) -> List[EvaluationResult]:
        """
        Evaluate every submission of a quiz with one API call

        Args:
            problems: Quiz problems, in order
            user_codes: Learner code for each problem (same order)

        Returns:
            One EvaluationResult per problem

        Raises:
            EvaluatorNotConfigured: if no API key is set
            EvaluationError: if the endpoint fails or the answer cannot be parsed
        """
        if not self.is_configured():
            raise EvaluatorNotConfigured()
        if not problems:
            return []

        prompt = self._create_evaluation_prompt(problems, user_codes)
        content = self._send_ai_request(prompt)
        results = self._parse_ai_response(content)
        return self._align_results(results, len(problems))

    def _create_evaluation_prompt(self, problems: Sequence[Problem], user_codes: Sequence[str]) -> str:
        """Create the grading prompt for all problems"""
        sections = []
        for index, problem in enumerate(problems):
            code = user_codes[index] if index < len(user_codes) else ''
            section = (
                f"**Problem {index + 1}: {problem.title}**\n"
                f"Description: {problem.description}\n"
            )
            if problem.context:
                section += f"Evaluation context (not shown to the student): {problem.context}\n"
            section += (
                "Student code:\n"
                f"```python\n{code or 'No code submitted'}\n```\n"
            )
            sections.append(section)

        problem_text = "\n\n".join(sections)
        return f"""You are a Python programming expert. Evaluate the students' code for the following {len(problems)} problems.

{problem_text}

Respond with a JSON object that has a "results" key, one entry per problem, in this format:

{{
  "results": [
    {{
      "output": "Output of running the code, or the error message",
      "isCorrect": true/false,
      "feedback": "Short feedback",
      "syntaxError": null or {{"line": number, "message": "error message"}}
    }}
  ]
}}

Respond with JSON only and no other text. The results array must contain exactly {len(problems)} entries."""

    def _send_ai_request(self, prompt: str) -> str:
        """Send request to the chat completions endpoint and return the message content"""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.3,  # Lower temperature for more consistent grading
        }

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                timeout=self.timeout,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
            )
        except requests.exceptions.Timeout as e:
            logger.warning("Grading request timed out after %ss", self.timeout)
            raise EvaluationError("Failed to evaluate code", status=504, details="Request timed out") from e
        except requests.exceptions.RequestException as e:
            logger.error("Error sending request to grading endpoint: %s", e)
            raise EvaluationError("Failed to evaluate code", status=502, details=str(e)) from e

        if not response.ok:
            logger.error("Grading API error: %s - %s", response.status_code, response.text)
            raise EvaluationError("Failed to evaluate code", status=response.status_code, details=response.text)

        try:
            data = response.json()
        except ValueError as e:
            raise EvaluationError("Failed to evaluate code", details="Endpoint returned invalid JSON") from e

        return self._extract_content(data)

    def _extract_content(self, data: Any) -> str:
        """Pull the first choice's message content out of a chat completions body"""
        if not isinstance(data, dict):
            raise EvaluationError("Failed to evaluate code", details="Unexpected response shape")
        choices = data.get("choices") or [{}]
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise EvaluationError("Failed to evaluate code", details="Unexpected response shape")
        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise EvaluationError("Failed to evaluate code", details="Unexpected response shape")
        content = message.get("content") or ""
        if not isinstance(content, str):
            raise EvaluationError("Failed to evaluate code", details="Unexpected response shape")
        return content.strip() or "{}"

    def _parse_ai_response(self, response: str) -> List[Dict[str, Any]]:
        """Parse the model answer into a list of raw result objects"""
        try:
            parsed = json.loads(response)
        except json.JSONDecodeError:
            # Models sometimes wrap the JSON in prose or a code fence
            json_match = re.search(r'(\{.*\}|\[.*\])', response, re.DOTALL)
            if not json_match:
                raise EvaluationError("Failed to evaluate code", details="Response did not contain JSON")
            try:
                parsed = json.loads(json_match.group(0))
            except json.JSONDecodeError as e:
                raise EvaluationError("Failed to evaluate code", details=f"Invalid JSON in response: {e}") from e

        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, dict):
            for key in ("results", "evaluations"):
                if isinstance(parsed.get(key), list):
                    return parsed[key]
            return [parsed]
        raise EvaluationError("Failed to evaluate code", details="Unexpected response shape")

    def _align_results(self, results: List[Any], expected: int) -> List[EvaluationResult]:
        """Normalise results and pad or truncate them to one per problem"""
        if len(results) != expected:
            logger.warning("Expected %d results, got %d", expected, len(results))
        aligned = []
        for index in range(expected):
            raw = results[index] if index < len(results) else None
            if isinstance(raw, dict):
                aligned.append(EvaluationResult.from_dict(raw))
            else:
                aligned.append(EvaluationResult.from_dict(None, default_feedback=MISSING_RESULT_FEEDBACK))
        return aligned


def grade_quiz(problems: Sequence[Problem], user_codes: Sequence[str],
               evaluator: Optional[AIEvaluator] = None) -> List[EvaluationResult]:
    """Grade a quiz without raising; failures become an error result per problem."""
    evaluator = evaluator or ai_evaluator
    try:
        return evaluator.evaluate_all(problems, user_codes)
    except EvaluationError as e:
        logger.error("Error evaluating all problems: %s", e)
        return [
            EvaluationResult(output=API_ERROR_OUTPUT, is_correct=False, feedback=str(e) or "API call failed")
            for _ in problems
        ]


# Global AI evaluator instance
ai_evaluator = AIEvaluator(
    api_key=config.OPENAI_API_KEY,
    api_url=config.OPENAI_API_URL,
    model=config.OPENAI_MODEL,
    timeout=config.EVALUATION_TIMEOUT,
)
