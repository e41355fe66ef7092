"""
Quiz results aggregation.

Combines grading results with the copy-paste report of every submission into
the summary shown at the end of a quiz.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pyquiz.models.models import EvaluationResult, Problem
from pyquiz.suspicion_detector import DetectionProfile, SuspicionReport, detect_cheating


def score_band(score: float) -> str:
    if score >= 80:
        return 'green'
    if score >= 50:
        return 'yellow'
    return 'red'


@dataclass(frozen=True)
class ProblemAnalysis:
    index: int
    problem: Problem
    code: str
    report: SuspicionReport
    evaluation: Optional[EvaluationResult] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'problemIndex': self.index,
            'problem': self.problem.to_dict(include_context=False),
            'code': self.code,
            'detection': self.report.to_dict(),
            'isHighRisk': self.report.is_high_risk,
            'evaluation': self.evaluation.to_dict() if self.evaluation else None,
        }


@dataclass(frozen=True)
class QuizSummary:
    correct_answers: int
    total_questions: int
    score: int
    band: str
    analyses: Tuple[ProblemAnalysis, ...]

    @property
    def suspicious(self) -> List[ProblemAnalysis]:
        return [item for item in self.analyses if item.report.is_suspicious]

    @property
    def high_risk(self) -> List[ProblemAnalysis]:
        return [item for item in self.suspicious if item.report.is_high_risk]

    @property
    def average_confidence(self) -> int:
        suspicious = self.suspicious
        if not suspicious:
            return 0
        return round(sum(item.report.confidence for item in suspicious) / len(suspicious))

    @property
    def complex_structure_count(self) -> int:
        return sum(1 for item in self.suspicious if item.report.details.has_complex_structure)

    @property
    def professional_naming_count(self) -> int:
        return sum(1 for item in self.suspicious if item.report.details.has_professional_naming)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'correctAnswers': self.correct_answers,
            'totalQuestions': self.total_questions,
            'score': self.score,
            'band': self.band,
            'suspiciousCount': len(self.suspicious),
            'highRiskCount': len(self.high_risk),
            'averageConfidence': self.average_confidence,
            'complexStructureCount': self.complex_structure_count,
            'professionalNamingCount': self.professional_naming_count,
            'problems': [item.to_dict() for item in self.analyses],
        }


def summarize_results(problems: Sequence[Problem],
                      user_codes: Sequence[str],
                      evaluations: Sequence[Optional[EvaluationResult]] = (),
                      profile: Union[DetectionProfile, str, None] = None) -> QuizSummary:
    """
    Build the end-of-quiz summary.

    Problems without a code entry count as empty submissions and problems
    without an evaluation count as incorrect.
    """
    analyses = []
    for index, problem in enumerate(problems):
        code = user_codes[index] if index < len(user_codes) else ''
        evaluation = evaluations[index] if index < len(evaluations) else None
        analyses.append(ProblemAnalysis(
            index=index,
            problem=problem,
            code=code or '',
            report=detect_cheating(code or '', profile),
            evaluation=evaluation,
        ))

    total = len(problems)
    correct = sum(1 for item in analyses if item.evaluation is not None and item.evaluation.is_correct)
    score = (correct / total) * 100 if total > 0 else 0
    return QuizSummary(
        correct_answers=correct,
        total_questions=total,
        score=round(score),
        band=score_band(score),
        analyses=tuple(analyses),
    )
