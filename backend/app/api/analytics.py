"""
Spending analytics API endpoints.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Callable, List
from datetime import datetime

from app.dependencies import get_db, get_clock
from app.schemas.analytics import DailySpending, SpendingSummary, Timeframe
from app.services import analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("/summary", response_model=SpendingSummary)
def get_spending_summary(
    timeframe: Timeframe = Query(Timeframe.month),
    count: int = Query(1, ge=1, le=120),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock)
):
    """
    Spending over the last `count` units of timeframe.
    Returns: total, average per day, by_category
    """
    return analytics_service.get_spending_summary(db, timeframe, count, clock())


@router.get("/daily", response_model=List[DailySpending])
def get_daily_spending(
    days: int = Query(30, ge=1, le=366),
    db: Session = Depends(get_db),
    clock: Callable[[], datetime] = Depends(get_clock)
):
    """Per-day spending totals for the last N days."""
    return analytics_service.get_daily_spending(db, days, clock())
