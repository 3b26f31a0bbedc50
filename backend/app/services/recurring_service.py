"""Service for building recurring patterns from clusters of similar expenses."""

from typing import List, Optional, Sequence
from datetime import datetime, timedelta
from decimal import Decimal
import logging
import uuid

from dateutil.relativedelta import relativedelta

from app.config import settings
from app.models.recurring import Frequency
from app.schemas.expense import ExpenseRecord
from app.schemas.recurring import RecurringPattern
from app.services.similarity_service import normalize_category
from app.services.temporal_service import analyze_intervals

logger = logging.getLogger(__name__)

# Namespace for deterministic pattern ids
PATTERN_NAMESPACE = uuid.UUID("6f1c7a52-3d0e-4c41-9a57-0b8e2f6d4c19")

DEFAULT_TITLE = "Unknown"

CADENCE_STEPS = {
    Frequency.daily: timedelta(days=1),
    Frequency.weekly: timedelta(days=7),
    Frequency.biweekly: timedelta(days=14),
    Frequency.monthly: relativedelta(months=1),
    Frequency.quarterly: relativedelta(months=3),
    Frequency.yearly: relativedelta(years=1),
}


def calculate_next_expected(last_occurrence: datetime, frequency: Frequency) -> Optional[datetime]:
    """
    Advance last_occurrence by one unit of the given frequency.

    Calendar steps clamp to the end of shorter months (Jan 31 -> Feb 28/29).
    Returns None for unknown frequency.
    """
    step = CADENCE_STEPS.get(frequency)
    if step is None:
        return None
    return last_occurrence + step


def pattern_id_for(title: str, category: Optional[str]) -> str:
    """Stable id for the logical series identified by (title, category)."""
    key = f"{title or DEFAULT_TITLE}\x1f{normalize_category(category)}"
    return str(uuid.uuid5(PATTERN_NAMESPACE, key))


def calculate_average_amount(expenses: Sequence[ExpenseRecord]) -> Decimal:
    """Arithmetic mean of the amounts."""
    total = sum((Decimal(e.amount) for e in expenses), Decimal("0"))
    return total / len(expenses)


def build_pattern(
    trigger: ExpenseRecord,
    cluster: List[ExpenseRecord],
    min_confidence: Optional[float] = None
) -> Optional[RecurringPattern]:
    """
    Build a recurring pattern from a triggering expense and its cluster.

    Returns None when fewer than two expenses are available or when the
    interval regularity does not exceed min_confidence.
    """
    if min_confidence is None:
        min_confidence = settings.min_confidence

    merged = sorted([trigger] + list(cluster), key=lambda e: e.timestamp)
    if len(merged) < 2:
        return None

    frequency, confidence = analyze_intervals(merged)
    if confidence <= min_confidence:
        logger.debug(
            "No pattern for %r: confidence %.3f <= %.2f",
            trigger.title, confidence, min_confidence
        )
        return None

    last_occurrence = merged[-1].timestamp
    title = trigger.title or DEFAULT_TITLE
    category = normalize_category(trigger.category)

    return RecurringPattern(
        id=pattern_id_for(title, category),
        title=title,
        category=category,
        average_amount=calculate_average_amount(merged),
        frequency=frequency,
        confidence=confidence,
        last_occurrence=last_occurrence,
        next_predicted=calculate_next_expected(last_occurrence, frequency),
    )
