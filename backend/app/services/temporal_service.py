"""Interval statistics and cadence classification for expense series."""

import logging
import math
from typing import List, Sequence, Tuple

from app.models.recurring import Frequency
from app.schemas.expense import ExpenseRecord

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60

# Inclusive day ranges per bucket; daily is half-open [0, 2).
# Gaps between ranges classify as unknown.
FREQUENCY_RANGES = [
    (Frequency.weekly, 6, 8),
    (Frequency.biweekly, 13, 17),
    (Frequency.monthly, 28, 32),
    (Frequency.quarterly, 88, 95),
    (Frequency.yearly, 360, 370),
]


def calculate_intervals(sorted_expenses: Sequence[ExpenseRecord]) -> List[float]:
    """Gaps in seconds between consecutive expenses."""
    return [
        (current.timestamp - previous.timestamp).total_seconds()
        for previous, current in zip(sorted_expenses, sorted_expenses[1:])
    ]


def classify_frequency(days: float) -> Frequency:
    """Map a mean interval in days to a frequency bucket."""
    if 0 <= days < 2:
        return Frequency.daily
    for frequency, low, high in FREQUENCY_RANGES:
        if low <= days <= high:
            return frequency
    return Frequency.unknown


def interval_confidence(intervals: Sequence[float]) -> float:
    """
    1 minus the coefficient of variation of the intervals, floored at 0.

    Regular spacing gives a confidence near 1 no matter how long the gaps are.
    A zero mean interval counts as infinite variation.
    """
    if not intervals:
        return 0.0

    mean_interval = sum(intervals) / len(intervals)
    if mean_interval == 0:
        return 0.0

    variance = sum((i - mean_interval) ** 2 for i in intervals) / len(intervals)
    coefficient_of_variation = math.sqrt(variance) / mean_interval
    return min(1.0, max(0.0, 1.0 - coefficient_of_variation))


def analyze_intervals(sorted_expenses: Sequence[ExpenseRecord]) -> Tuple[Frequency, float]:
    """Infer (frequency, confidence) from expenses sorted ascending by timestamp."""
    if len(sorted_expenses) < 2:
        return Frequency.unknown, 0.0

    intervals = calculate_intervals(sorted_expenses)
    mean_interval = sum(intervals) / len(intervals)

    frequency = classify_frequency(mean_interval / SECONDS_PER_DAY)
    confidence = interval_confidence(intervals)

    logger.debug(
        "Analyzed %d interval(s): mean %.2f days -> %s (confidence %.3f)",
        len(intervals), mean_interval / SECONDS_PER_DAY, frequency.value, confidence
    )
    return frequency, confidence
