"""
Copy-paste suspicion scoring for learner submissions.

This is a heuristic static classifier: it never runs the submission and does
not parse Python grammar, it only pattern-matches surface syntax. Every rule is
an independent pure function returning a RuleResult; the rules run in a fixed
order, their scores are summed and the total is clamped to 0-100.

The score is advisory. It flags a submission for human review and is never
used to fail an answer on its own.

Two weighting tables are shipped:

- ``standard`` (default): threshold 50, lenient length limits
- ``strict``: threshold 60, adds a line-count rule and a boilerplate rule
"""

import re
from dataclasses import dataclass, fields
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple, Union


class Weight(NamedTuple):
    """Score contribution of a fired rule: min(base + count * per_match, cap)."""

    base: int = 0
    per_match: int = 0
    cap: Optional[int] = None

    def score(self, count: int) -> int:
        value = self.base + count * self.per_match
        if self.cap is not None:
            value = min(value, self.cap)
        return value


class RuleResult(NamedTuple):
    score: int
    reason: Optional[str] = None
    flag: Optional[str] = None


NOT_FIRED = RuleResult(0)


def _patterns(*sources: str, flags: int = 0) -> Tuple['re.Pattern', ...]:
    return tuple(re.compile(source, flags) for source in sources)


@dataclass(frozen=True)
class DetectionProfile:
    """Thresholds, weights and pattern tables for one scoring formulation.

    Every ``*_threshold`` is exclusive: a rule fires when its count is
    strictly greater than the threshold.
    """

    name: str
    threshold: int

    char_limit: int
    char_weight: Weight
    line_limit: Optional[int]
    line_weight: Weight

    structure_patterns: Tuple['re.Pattern', ...]
    structure_threshold: int
    structure_weight: Weight

    vocabulary: Tuple[str, ...]
    vocabulary_threshold: int
    vocabulary_weight: Weight

    comment_ratio: float
    comment_floor: int
    comment_weight: Weight

    indentation_weight: Weight

    error_patterns: Tuple['re.Pattern', ...]
    error_threshold: int
    error_weight: Weight

    string_patterns: Tuple['re.Pattern', ...]
    string_threshold: int
    string_weight: Weight
    string_label: str

    boilerplate_patterns: Tuple['re.Pattern', ...] = ()
    boilerplate_threshold: int = 1
    boilerplate_weight: Weight = Weight()


_COLLECTION_CALLS = (
    r'list\s*\(', r'dict\s*\(', r'set\s*\(',
    r'enumerate\s*\(', r'zip\s*\(', r'map\s*\(', r'filter\s*\(',
    r'sorted\s*\(', r'reversed\s*\(',
    r'any\s*\(', r'all\s*\(', r'sum\s*\(', r'max\s*\(', r'min\s*\(',
)

_STRING_FORMATTING = (
    r'f["\']',          # f-string
    r'\.format\s*\(',
    r'%[sdif]',         # printf-style
    r'\.join\s*\(',
)

_ERROR_HANDLING = (
    r'except\s+Exception',
    r'except\s+\w+Error',
    r'finally\s*:',
    r'raise\s+\w+',
)

_BASE_VOCABULARY = (
    'algorithm', 'implementation', 'optimization', 'complexity',
    'efficiency', 'performance', 'robust', 'scalable',
    'maintainable', 'readable', 'concise', 'elegant',
)


STANDARD = DetectionProfile(
    name='standard',
    threshold=50,
    char_limit=500,
    char_weight=Weight(base=30),
    line_limit=None,
    line_weight=Weight(),
    structure_patterns=_patterns(
        r'import\s+\w+',
        r'class\s+\w+',
        r'def\s+\w+\s*\([^)]*\)',
        r'try\s*:',
        r'with\s+\w+',
        r'lambda\s+',
        *_COLLECTION_CALLS,
    ),
    structure_threshold=3,
    structure_weight=Weight(per_match=10, cap=40),
    vocabulary=_BASE_VOCABULARY,
    vocabulary_threshold=0,
    vocabulary_weight=Weight(base=20),
    comment_ratio=0.3,
    comment_floor=2,
    comment_weight=Weight(base=25),
    indentation_weight=Weight(base=15),
    error_patterns=_patterns(*_ERROR_HANDLING),
    error_threshold=1,
    error_weight=Weight(base=20),
    string_patterns=_patterns(*_STRING_FORMATTING),
    string_threshold=2,
    string_weight=Weight(base=15),
    string_label='advanced string formatting',
)

STRICT = DetectionProfile(
    name='strict',
    threshold=60,
    char_limit=300,
    char_weight=Weight(base=25),
    line_limit=15,
    line_weight=Weight(base=20),
    structure_patterns=_patterns(
        r'class\s+\w+',
        r'def\s+\w+\s*\([^)]*\)',
        r'try\s*:',
        r'with\s+\w+',
        r'lambda\s+',
        r'^\s*@\w+',        # decorator
        r'async\s+def',
        r'yield\s+',
        r'generator\s+',
        flags=re.MULTILINE,
    ),
    structure_threshold=2,
    structure_weight=Weight(per_match=15, cap=40),
    vocabulary=_BASE_VOCABULARY + (
        'polymorphism', 'inheritance', 'encapsulation', 'abstraction',
        'recursion', 'iteration', 'traversal', 'sorting',
        'searching', 'hashing', 'caching', 'validation',
    ),
    vocabulary_threshold=2,
    vocabulary_weight=Weight(per_match=10, cap=30),
    comment_ratio=0.25,
    comment_floor=3,
    comment_weight=Weight(base=25),
    indentation_weight=Weight(base=20),
    error_patterns=_patterns(*_ERROR_HANDLING, r'logging\s*\.', r'traceback\s*\.'),
    error_threshold=2,
    error_weight=Weight(per_match=12, cap=30),
    string_patterns=_patterns(*_STRING_FORMATTING, *_COLLECTION_CALLS),
    string_threshold=4,
    string_weight=Weight(per_match=8, cap=35),
    string_label='advanced Python features',
    boilerplate_patterns=_patterns(
        r'def\s+main\s*\(\)',
        r'if\s+__name__\s*==\s*[\'"]__main__[\'"]',
        r'#!/usr/bin/env python',
        r'#\s*-\*-\s*coding:\s*utf-8\s*-\*-',
        r'#\s*Author:',
        r'#\s*Created:',
        r'#\s*Modified:',
    ),
    boilerplate_threshold=1,
    boilerplate_weight=Weight(per_match=15),
)

PROFILES: Dict[str, DetectionProfile] = {
    STANDARD.name: STANDARD,
    STRICT.name: STRICT,
}

DEFAULT_PROFILE = STANDARD

HIGH_RISK_CONFIDENCE = 80


def get_profile(name: Optional[str]) -> DetectionProfile:
    """Look up a profile by name; ``None`` or empty gives the default."""
    if not name:
        return DEFAULT_PROFILE
    if not isinstance(name, str):
        raise ValueError(f"Suspicion profile must be a string, got {type(name).__name__}")
    key = name.strip().lower()
    if key not in PROFILES:
        raise ValueError(f"Unknown suspicion profile: {name!r} (expected one of {', '.join(PROFILES)})")
    return PROFILES[key]


@dataclass(frozen=True)
class SuspicionDetails:
    line_count: int = 0
    char_count: int = 0
    has_complex_structure: bool = False
    has_professional_naming: bool = False
    has_excessive_comments: bool = False
    has_advanced_features: bool = False
    has_inconsistent_style: bool = False

    def to_dict(self) -> Dict[str, Union[int, bool]]:
        return {
            'lineCount': self.line_count,
            'charCount': self.char_count,
            'hasComplexStructure': self.has_complex_structure,
            'hasProfessionalNaming': self.has_professional_naming,
            'hasExcessiveComments': self.has_excessive_comments,
            'hasAdvancedFeatures': self.has_advanced_features,
            'hasInconsistentStyle': self.has_inconsistent_style,
        }


DETAIL_FLAGS = tuple(f.name for f in fields(SuspicionDetails) if f.name.startswith('has_'))


@dataclass(frozen=True)
class SuspicionReport:
    is_suspicious: bool
    reasons: Tuple[str, ...]
    confidence: int
    details: SuspicionDetails = SuspicionDetails()

    @property
    def is_high_risk(self) -> bool:
        return self.is_suspicious and self.confidence >= HIGH_RISK_CONFIDENCE

    def to_dict(self) -> Dict[str, object]:
        return {
            'isSuspicious': self.is_suspicious,
            'reasons': list(self.reasons),
            'confidence': self.confidence,
            'details': self.details.to_dict(),
        }


def _non_blank_lines(code: str) -> List[str]:
    return [line for line in code.split('\n') if line.strip()]


def _count_matches(code: str, patterns) -> int:
    return sum(len(pattern.findall(code)) for pattern in patterns)


# --- rules -----------------------------------------------------------------

def check_length(code: str, profile: DetectionProfile) -> RuleResult:
    char_count = len(code)
    if char_count <= profile.char_limit:
        return NOT_FIRED
    return RuleResult(
        profile.char_weight.score(char_count),
        f"Code is unusually long ({char_count} characters); possible copy-paste",
    )


def check_line_count(code: str, profile: DetectionProfile) -> RuleResult:
    if profile.line_limit is None:
        return NOT_FIRED
    line_count = len(_non_blank_lines(code))
    if line_count <= profile.line_limit:
        return NOT_FIRED
    return RuleResult(
        profile.line_weight.score(line_count),
        f"Too many lines of code ({line_count} lines); possible copy-paste",
    )


def check_structure(code: str, profile: DetectionProfile) -> RuleResult:
    count = _count_matches(code, profile.structure_patterns)
    if count <= profile.structure_threshold:
        return NOT_FIRED
    return RuleResult(
        profile.structure_weight.score(count),
        f"Advanced Python constructs used ({count}); beyond the expected learner level",
        'has_complex_structure',
    )


def check_vocabulary(code: str, profile: DetectionProfile) -> RuleResult:
    lowered = code.lower()
    found = [term for term in profile.vocabulary if term in lowered]
    if len(found) <= profile.vocabulary_threshold:
        return NOT_FIRED
    return RuleResult(
        profile.vocabulary_weight.score(len(found)),
        f"Professional terminology used: {', '.join(found)}",
        'has_professional_naming',
    )


def check_comments(code: str, profile: DetectionProfile) -> RuleResult:
    line_count = len(_non_blank_lines(code))
    if not line_count:
        return NOT_FIRED
    comment_lines = len(re.findall(r'#.*$', code, re.MULTILINE))
    ratio = comment_lines / line_count
    if ratio <= profile.comment_ratio or comment_lines <= profile.comment_floor:
        return NOT_FIRED
    return RuleResult(
        profile.comment_weight.score(comment_lines),
        f"Excessive comments ({comment_lines} lines, {round(ratio * 100)}%)",
        'has_excessive_comments',
    )


def check_indentation(code: str, profile: DetectionProfile) -> RuleResult:
    styles = set()
    for line in _non_blank_lines(code):
        if line.startswith(' '):
            styles.add('space')
        elif line.startswith('\t'):
            styles.add('tab')
    if len(styles) < 2:
        return NOT_FIRED
    return RuleResult(
        profile.indentation_weight.score(1),
        "Mixed spaces and tabs in indentation; possible copy-paste",
        'has_inconsistent_style',
    )


def check_error_handling(code: str, profile: DetectionProfile) -> RuleResult:
    count = _count_matches(code, profile.error_patterns)
    if count <= profile.error_threshold:
        return NOT_FIRED
    return RuleResult(
        profile.error_weight.score(count),
        f"Exhaustive error handling ({count}); possibly copied from external material",
    )


def check_string_features(code: str, profile: DetectionProfile) -> RuleResult:
    count = _count_matches(code, profile.string_patterns)
    if count <= profile.string_threshold:
        return NOT_FIRED
    return RuleResult(
        profile.string_weight.score(count),
        f"Heavy use of {profile.string_label} ({count})",
        'has_advanced_features',
    )


def check_boilerplate(code: str, profile: DetectionProfile) -> RuleResult:
    if not profile.boilerplate_patterns:
        return NOT_FIRED
    count = _count_matches(code, profile.boilerplate_patterns)
    if count <= profile.boilerplate_threshold:
        return NOT_FIRED
    return RuleResult(
        profile.boilerplate_weight.score(count),
        f"Boilerplate often copied from tutorials or repositories ({count})",
    )


# Evaluation order is the order reasons are reported in.
RULES: Tuple[Callable[[str, DetectionProfile], RuleResult], ...] = (
    check_length,
    check_line_count,
    check_structure,
    check_vocabulary,
    check_comments,
    check_indentation,
    check_error_handling,
    check_string_features,
    check_boilerplate,
)


def detect_cheating(code: str, profile: Union[DetectionProfile, str, None] = None) -> SuspicionReport:
    """
    Score a submission for signs of copy-paste.

    Args:
        code: The learner's current source text
        profile: A DetectionProfile, a profile name, or None for the default

    Returns:
        SuspicionReport with the clamped confidence and the reasons of every
        rule that fired, in rule order
    """
    if not isinstance(profile, DetectionProfile):
        profile = get_profile(profile)
    code = code or ''

    reasons = []
    flags = set()
    total = 0
    for rule in RULES:
        result = rule(code, profile)
        if result.reason is None:
            continue
        reasons.append(result.reason)
        total += result.score
        if result.flag:
            flags.add(result.flag)

    confidence = max(0, min(total, 100))
    details = SuspicionDetails(
        line_count=len(_non_blank_lines(code)),
        char_count=len(code),
        **{flag: flag in flags for flag in DETAIL_FLAGS},
    )
    return SuspicionReport(
        is_suspicious=confidence >= profile.threshold,
        reasons=tuple(reasons),
        confidence=confidence,
        details=details,
    )


def detect_copy_paste(code: str) -> SuspicionReport:
    """Score with the strict profile."""
    return detect_cheating(code, STRICT)
