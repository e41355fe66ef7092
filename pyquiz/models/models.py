from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Problem:
    title: str
    description: str
    context: Optional[str] = None  # Hidden information used only for grading (e.g. a secret number)
    category: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Problem':
        context = data.get('context')
        category = data.get('category')
        return cls(
            title=str(data.get('title') or ''),
            description=str(data.get('description') or ''),
            context=str(context) if context else None,
            category=str(category) if category else None,
        )

    def to_dict(self, include_context: bool = True) -> Dict[str, Any]:
        data = {'title': self.title, 'description': self.description}
        if self.category:
            data['category'] = self.category
        if include_context and self.context:
            data['context'] = self.context
        return data


@dataclass(frozen=True)
class SyntaxErrorInfo:
    line: int
    message: str

    @classmethod
    def from_dict(cls, data: Any) -> Optional['SyntaxErrorInfo']:
        if not isinstance(data, dict):
            return None
        try:
            line = int(data.get('line') or 0)
        except (TypeError, ValueError):
            line = 0
        return cls(line=line, message=str(data.get('message') or ''))

    def to_dict(self) -> Dict[str, Any]:
        return {'line': self.line, 'message': self.message}


@dataclass(frozen=True)
class EvaluationResult:
    """Grading outcome for one problem, as returned by the grading endpoint."""

    output: str
    is_correct: bool
    feedback: str
    syntax_error: Optional[SyntaxErrorInfo] = None

    @classmethod
    def from_dict(cls, data: Any, default_feedback: str = '') -> 'EvaluationResult':
        """Build a result from the camelCase wire shape, filling in missing keys."""
        if not isinstance(data, dict):
            data = {}
        return cls(
            output=str(data.get('output') or ''),
            is_correct=bool(data.get('isCorrect', False)),
            feedback=str(data.get('feedback') or default_feedback),
            syntax_error=SyntaxErrorInfo.from_dict(data.get('syntaxError')),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'output': self.output,
            'isCorrect': self.is_correct,
            'feedback': self.feedback,
            'syntaxError': self.syntax_error.to_dict() if self.syntax_error else None,
        }


@dataclass(frozen=True)
class RunResult:
    output: str
    has_error: bool
    syntax_error: Optional[SyntaxErrorInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'output': self.output,
            'hasError': self.has_error,
            'syntaxError': self.syntax_error.to_dict() if self.syntax_error else None,
        }
