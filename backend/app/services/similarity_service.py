"""
Similarity scoring between expenses.

Two expenses are compared on amount, title text and category. Each comparison
yields a score in [0, 1]; the overall similarity is their weighted sum.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from rapidfuzz.distance import Levenshtein

from app.config import settings
from app.schemas.expense import ExpenseRecord

logger = logging.getLogger(__name__)

AMOUNT_WEIGHT = 0.40
TITLE_WEIGHT = 0.35
CATEGORY_WEIGHT = 0.25

DEFAULT_CATEGORY = "Other"


def amount_similarity(amount_a: Decimal, amount_b: Decimal) -> float:
    """1 minus the relative difference of two non-negative amounts."""
    a = float(amount_a)
    b = float(amount_b)
    max_amount = max(a, b)
    if max_amount == 0:
        return 1.0
    return 1.0 - abs(a - b) / max_amount


def title_similarity(title_a: str, title_b: str) -> float:
    """Normalized Levenshtein similarity of two titles."""
    title_a = title_a or ""
    title_b = title_b or ""
    if not title_a and not title_b:
        return 1.0
    if not title_a or not title_b:
        return 0.0

    distance = Levenshtein.distance(title_a, title_b)
    return 1.0 - distance / max(len(title_a), len(title_b))


def normalize_category(category: Optional[str]) -> str:
    """Missing categories compare as the literal "Other"."""
    return category or DEFAULT_CATEGORY


def category_similarity(category_a: Optional[str], category_b: Optional[str]) -> float:
    """1.0 for equal categories (case-sensitive), else 0.0."""
    return 1.0 if normalize_category(category_a) == normalize_category(category_b) else 0.0


def _is_blank(expense: ExpenseRecord) -> bool:
    return expense.amount == 0 and not expense.title and not expense.category


def calculate_similarity(a: ExpenseRecord, b: ExpenseRecord) -> float:
    """
    Weighted similarity of two expenses in [0, 1].

    Symmetric in its arguments. Two records with nothing to compare (zero
    amounts, empty titles, no categories) score 0.0 so that they never match.
    """
    if _is_blank(a) and _is_blank(b):
        return 0.0

    score = (
        amount_similarity(a.amount, b.amount) * AMOUNT_WEIGHT
        + title_similarity(a.title, b.title) * TITLE_WEIGHT
        + category_similarity(a.category, b.category) * CATEGORY_WEIGHT
    )
    return min(1.0, max(0.0, score))


def find_cluster(
    target: ExpenseRecord,
    history: Iterable[ExpenseRecord],
    threshold: Optional[float] = None
) -> List[ExpenseRecord]:
    """
    Return history entries similar enough to target to belong to the same series.

    The target itself (matched by id) is never part of its own cluster.
    """
    if threshold is None:
        threshold = settings.similarity_threshold

    cluster = [
        other for other in history
        if other.id != target.id and calculate_similarity(target, other) >= threshold
    ]

    logger.debug(
        "Cluster for expense %s (%r): %d match(es) at threshold %.2f",
        target.id, target.title, len(cluster), threshold
    )
    return cluster
