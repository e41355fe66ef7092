"""
Problem set source.

Problems ship as a CSV file inside the package, one row per problem, grouped by
the ``category`` column. A quiz takes one random problem from each category.
"""

import logging
import os
import random
from typing import Dict, List, Optional

import pandas as pd

from pyquiz.models.models import Problem

logger = logging.getLogger(__name__)

PROBLEMS_CSV = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data', 'problems.csv')

REQUIRED_COLUMNS = ('category', 'title', 'description')


class ProblemSetError(Exception):
    """Raised when the problem set file is missing or malformed."""


def load_problem_sets(csv_path: Optional[str] = None) -> Dict[str, List[Problem]]:
    """
    Load problems grouped by category.

    Categories and the problems inside them keep the order of the file.
    """
    csv_path = csv_path or PROBLEMS_CSV
    if not os.path.exists(csv_path):
        raise ProblemSetError(f"Problem set not found: {csv_path}")

    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ProblemSetError(f"Problem set {csv_path} is missing columns: {', '.join(missing)}")

    problem_sets: Dict[str, List[Problem]] = {}
    for row in df.itertuples(index=False):
        category = row.category.strip()
        title = row.title.strip()
        if not category:
            logger.warning("Skipping problem %r without a category", title)
            continue
        problem_sets.setdefault(category, [])
        if not title:
            # An empty title keeps the category but contributes no problem
            continue
        context = getattr(row, 'context', '').strip()
        problem_sets[category].append(Problem(
            title=title,
            description=row.description.strip(),
            context=context or None,
            category=category,
        ))

    logger.debug("Loaded %d problem categories from %s", len(problem_sets), csv_path)
    return problem_sets


def generate_random_quiz(problem_sets: Optional[Dict[str, List[Problem]]] = None,
                         rng: Optional[random.Random] = None) -> List[Problem]:
    """Pick one problem from every category."""
    if problem_sets is None:
        problem_sets = load_problem_sets()
    rng = rng or random

    quiz = []
    for category, problems in problem_sets.items():
        if not problems:
            quiz.append(Problem(
                title='Error',
                description='No problem found for this category.',
                category=category,
            ))
            continue
        quiz.append(problems[rng.randrange(len(problems))])
    return quiz
