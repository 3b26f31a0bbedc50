"""API endpoints for recurring patterns and suggestions."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.dependencies import get_db, get_registry
from app.schemas.expense import ExpenseResponse
from app.schemas.recurring import (
    PatternListResponse,
    SuggestionListResponse,
    PromoteResponse,
    RecurringPattern,
)
from app.services import expense_service
from app.services.suggestion_registry import SuggestionRegistry

router = APIRouter(prefix="/recurring", tags=["recurring"])


@router.get("/patterns", response_model=PatternListResponse)
def list_patterns(registry: SuggestionRegistry = Depends(get_registry)):
    """Get all detected recurring patterns."""
    patterns = registry.list_patterns()
    return PatternListResponse(items=patterns, total=len(patterns))


@router.get("/suggestions", response_model=SuggestionListResponse)
def list_suggestions(registry: SuggestionRegistry = Depends(get_registry)):
    """Get pending recurring suggestions."""
    suggestions = registry.list_suggestions()
    return SuggestionListResponse(items=suggestions, total=len(suggestions))


@router.get("/upcoming", response_model=List[RecurringPattern])
def upcoming(
    within_days: Optional[int] = Query(None, ge=0, le=366),
    registry: SuggestionRegistry = Depends(get_registry)
):
    """Get patterns expected to recur soon."""
    return registry.upcoming(within_days)


@router.post("/suggestions/{suggestion_id}/dismiss")
def dismiss_suggestion(
    suggestion_id: str,
    registry: SuggestionRegistry = Depends(get_registry)
):
    """Dismiss a suggestion. Unknown ids are ignored."""
    registry.dismiss(suggestion_id)
    return {"success": True}


@router.post("/expenses/{expense_id}/promote", response_model=PromoteResponse)
def promote_expense(
    expense_id: str,
    db: Session = Depends(get_db),
    registry: SuggestionRegistry = Depends(get_registry)
):
    """Mark an expense as recurring and clear its suggestions."""
    promoted = registry.promote(expense_id)

    # The registry only reports the flag; persisting it is up to us
    expense = expense_service.set_recurring(db, expense_id, True)

    if expense is not None:
        is_recurring = expense.is_recurring
    else:
        is_recurring = any(s.expense.is_recurring for s in promoted)

    return PromoteResponse(
        expense_id=expense_id,
        is_recurring=is_recurring,
        removed_suggestions=len(promoted)
    )


@router.get("/expenses", response_model=List[ExpenseResponse])
def list_recurring_expenses(db: Session = Depends(get_db)):
    """Get expenses flagged as recurring."""
    return [ExpenseResponse.model_validate(e) for e in expense_service.get_recurring_expenses(db)]
