"""
Registry of detected recurring patterns and pending suggestions.

The registry is the only stateful part of recurring detection. All reads and
writes of its maps go through one lock so it can be shared between request
threads. Change notifications are delivered to subscribed listeners after the
lock is released.
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional

from app.config import settings
from app.schemas.expense import ExpenseRecord
from app.schemas.recurring import (
    RecurringPattern,
    RecurringSuggestion,
    RegistryEvent,
    RegistryEventKind,
    SuggestionStatus,
)
from app.services.recurring_service import build_pattern, calculate_next_expected
from app.services.similarity_service import find_cluster
from app.services.time_service import to_naive_utc, utc_now

logger = logging.getLogger(__name__)

Listener = Callable[[RegistryEvent], None]


class SuggestionRegistry:
    """Stores recurring patterns and the suggestions surfaced for them."""

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        similarity_threshold: Optional[float] = None,
        min_confidence: Optional[float] = None,
    ):
        self._clock = clock or utc_now
        self._similarity_threshold = similarity_threshold
        self._min_confidence = min_confidence
        self._patterns: Dict[str, RecurringPattern] = {}
        self._suggestions: Dict[str, RecurringSuggestion] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    def analyze(
        self,
        expense: ExpenseRecord,
        history: Iterable[ExpenseRecord]
    ) -> Optional[RecurringSuggestion]:
        """
        Check whether expense belongs to a recurring series.

        Stores the detected pattern (one per series) and returns a pending
        suggestion unless the expense is already flagged recurring. Returns
        None when no pattern is detected.
        """
        cluster = find_cluster(expense, history, self._similarity_threshold)
        pattern = build_pattern(expense, cluster, self._min_confidence)
        if pattern is None:
            return None

        events: List[RegistryEvent] = []
        suggestion = None

        with self._lock:
            existing = self._patterns.get(pattern.id)
            if existing is None:
                self._patterns[pattern.id] = pattern
                events.append(RegistryEvent(kind=RegistryEventKind.pattern_detected, pattern_id=pattern.id))
                logger.info(
                    "Detected %s pattern %r (confidence %.2f)",
                    pattern.frequency.value, pattern.title, pattern.confidence
                )
            elif pattern.last_occurrence > existing.last_occurrence:
                # Cadence, confidence and amount stay as first detected
                pattern = existing.model_copy(update={
                    "last_occurrence": pattern.last_occurrence,
                    "next_predicted": calculate_next_expected(pattern.last_occurrence, existing.frequency),
                })
                self._patterns[pattern.id] = pattern
                events.append(RegistryEvent(kind=RegistryEventKind.pattern_refreshed, pattern_id=pattern.id))
                logger.info("Refreshed pattern %r, next expected %s", pattern.title, pattern.next_predicted)
            else:
                pattern = existing

            if not expense.is_recurring:
                suggestion = self._find_pending(expense.id, pattern.id)
                if suggestion is None:
                    suggestion = RecurringSuggestion(
                        id=str(uuid.uuid4()),
                        expense=expense,
                        pattern=pattern,
                        confidence=pattern.confidence,
                        created_at=self._now(),
                    )
                    self._suggestions[suggestion.id] = suggestion
                    events.append(RegistryEvent(
                        kind=RegistryEventKind.suggestion_created,
                        pattern_id=pattern.id,
                        suggestion_id=suggestion.id,
                        expense_id=expense.id,
                    ))

        self._notify(events)
        return suggestion

    def _find_pending(self, expense_id: str, pattern_id: str) -> Optional[RecurringSuggestion]:
        for suggestion in self._suggestions.values():
            if suggestion.expense.id == expense_id and suggestion.pattern.id == pattern_id:
                return suggestion
        return None

    def list_patterns(self) -> List[RecurringPattern]:
        with self._lock:
            return list(self._patterns.values())

    def list_suggestions(self) -> List[RecurringSuggestion]:
        with self._lock:
            return list(self._suggestions.values())

    def get_pattern(self, pattern_id: str) -> Optional[RecurringPattern]:
        with self._lock:
            return self._patterns.get(pattern_id)

    def get_suggestion(self, suggestion_id: str) -> Optional[RecurringSuggestion]:
        with self._lock:
            return self._suggestions.get(suggestion_id)

    def _now(self) -> datetime:
        return to_naive_utc(self._clock())

    def upcoming(self, within_days: Optional[int] = None) -> List[RecurringPattern]:
        """Patterns predicted to recur between now and now + within_days, soonest first."""
        if within_days is None:
            within_days = settings.upcoming_window_days

        now = self._now()
        horizon = now + timedelta(days=within_days)

        with self._lock:
            due = [
                p for p in self._patterns.values()
                if p.next_predicted is not None and now <= p.next_predicted <= horizon
            ]
        return sorted(due, key=lambda p: p.next_predicted)

    def dismiss(self, suggestion_id: str) -> None:
        """Drop a suggestion. Unknown ids are ignored; the pattern is kept."""
        with self._lock:
            suggestion = self._suggestions.pop(suggestion_id, None)
            if suggestion is None:
                return
            suggestion.status = SuggestionStatus.dismissed

        logger.info("Dismissed suggestion %s for expense %s", suggestion_id, suggestion.expense.id)
        self._notify([RegistryEvent(
            kind=RegistryEventKind.suggestion_dismissed,
            pattern_id=suggestion.pattern.id,
            suggestion_id=suggestion_id,
            expense_id=suggestion.expense.id,
        )])

    def promote(self, expense_id: str) -> List[RecurringSuggestion]:
        """
        Accept the suggestions for an expense.

        Flips is_recurring on the referenced expense and removes every
        suggestion pointing at it. Returns the removed suggestions, whose
        expense carries the flipped flag for the caller to persist. Unknown
        ids return an empty list.
        """
        with self._lock:
            promoted = [s for s in self._suggestions.values() if s.expense.id == expense_id]
            for suggestion in promoted:
                del self._suggestions[suggestion.id]
                suggestion.status = SuggestionStatus.promoted
                suggestion.expense.is_recurring = True

        if not promoted:
            return []

        logger.info("Promoted expense %s (%d suggestion(s) cleared)", expense_id, len(promoted))
        self._notify([
            RegistryEvent(
                kind=RegistryEventKind.suggestion_promoted,
                pattern_id=s.pattern.id,
                suggestion_id=s.id,
                expense_id=expense_id,
            )
            for s in promoted
        ])
        return promoted

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a change listener. Returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def clear(self) -> None:
        """Forget all patterns and suggestions."""
        with self._lock:
            self._patterns.clear()
            self._suggestions.clear()

    def _notify(self, events: List[RegistryEvent]) -> None:
        if not events:
            return
        with self._lock:
            listeners = list(self._listeners)
        for event in events:
            for listener in listeners:
                try:
                    listener(event)
                except Exception:
                    logger.exception("Registry listener failed on %s", event.kind.value)
