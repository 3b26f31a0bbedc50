"""Pydantic schemas for recurring patterns and suggestions."""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
import enum

from app.models.recurring import Frequency
from app.schemas.expense import ExpenseRecord, ExpenseResponse


class SuggestionStatus(str, enum.Enum):
    pending = "pending"
    dismissed = "dismissed"
    promoted = "promoted"


class RecurringPattern(BaseModel):
    """A detected recurring series and its predicted cadence."""
    id: str
    title: str
    category: str
    average_amount: Decimal
    frequency: Frequency
    confidence: float = Field(ge=0.0, le=1.0)
    last_occurrence: datetime
    next_predicted: Optional[datetime] = None


class RecurringSuggestion(BaseModel):
    """A proposal that an expense be marked recurring."""
    id: str
    expense: ExpenseRecord
    pattern: RecurringPattern
    confidence: float = Field(ge=0.0, le=1.0)
    status: SuggestionStatus = SuggestionStatus.pending
    created_at: datetime


class ExpenseAnalysisResponse(BaseModel):
    """Response from recording an expense."""
    expense: ExpenseResponse
    suggestion: Optional[RecurringSuggestion] = None


class PromoteResponse(BaseModel):
    expense_id: str
    is_recurring: bool
    removed_suggestions: int


class PatternListResponse(BaseModel):
    items: List[RecurringPattern]
    total: int


class SuggestionListResponse(BaseModel):
    items: List[RecurringSuggestion]
    total: int


class RegistryEventKind(str, enum.Enum):
    pattern_detected = "pattern_detected"
    pattern_refreshed = "pattern_refreshed"
    suggestion_created = "suggestion_created"
    suggestion_dismissed = "suggestion_dismissed"
    suggestion_promoted = "suggestion_promoted"


class RegistryEvent(BaseModel):
    """Change notification emitted by the suggestion registry."""
    kind: RegistryEventKind
    pattern_id: Optional[str] = None
    suggestion_id: Optional[str] = None
    expense_id: Optional[str] = None
