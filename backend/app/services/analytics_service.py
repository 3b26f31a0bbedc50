"""Service for spending totals and breakdowns over a recent timeframe."""

from typing import Dict, List
from datetime import date, datetime
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from app.models.expense import Expense
from app.schemas.analytics import CategoryTotal, DailySpending, SpendingSummary, Timeframe
from app.services.similarity_service import normalize_category

TIMEFRAME_STEPS = {
    Timeframe.day: relativedelta(days=1),
    Timeframe.week: relativedelta(weeks=1),
    Timeframe.month: relativedelta(months=1),
    Timeframe.year: relativedelta(years=1),
}

# Days per timeframe unit for daily averages; months and years are approximate
DAYS_PER_TIMEFRAME = {
    Timeframe.day: 1,
    Timeframe.week: 7,
    Timeframe.month: 30,
    Timeframe.year: 365,
}


def timeframe_start(now: datetime, timeframe: Timeframe, count: int = 1) -> datetime:
    """Start of the window covering the last `count` units of timeframe."""
    return now - TIMEFRAME_STEPS[timeframe] * count


def get_expenses_since(db: Session, start: datetime, now: datetime) -> List[Expense]:
    return db.query(Expense).filter(
        Expense.timestamp >= start,
        Expense.timestamp <= now
    ).all()


def get_total_spending(db: Session, timeframe: Timeframe, count: int, now: datetime) -> Decimal:
    expenses = get_expenses_since(db, timeframe_start(now, timeframe, count), now)
    return sum((e.amount for e in expenses), Decimal("0"))


def get_spending_by_category(
    db: Session,
    timeframe: Timeframe,
    count: int,
    now: datetime
) -> Dict[str, Decimal]:
    """Totals per category; uncategorized expenses count as "Other"."""
    totals: Dict[str, Decimal] = {}
    for e in get_expenses_since(db, timeframe_start(now, timeframe, count), now):
        category = normalize_category(e.category)
        totals[category] = totals.get(category, Decimal("0")) + e.amount
    return totals


def get_average_spending(db: Session, timeframe: Timeframe, count: int, now: datetime) -> Decimal:
    """Average spending per day over the window."""
    total = get_total_spending(db, timeframe, count, now)
    return total / (count * DAYS_PER_TIMEFRAME[timeframe])


def get_daily_spending(db: Session, days: int, now: datetime) -> List[DailySpending]:
    """Per-day totals for the last `days` days, oldest first. Days without spending are omitted."""
    totals: Dict[date, Decimal] = {}
    for e in get_expenses_since(db, timeframe_start(now, Timeframe.day, days), now):
        day = e.timestamp.date()
        totals[day] = totals.get(day, Decimal("0")) + e.amount

    return [DailySpending(day=day, amount=float(amount)) for day, amount in sorted(totals.items())]


def get_spending_summary(
    db: Session,
    timeframe: Timeframe,
    count: int,
    now: datetime
) -> SpendingSummary:
    start = timeframe_start(now, timeframe, count)
    expenses = get_expenses_since(db, start, now)
    total = sum((e.amount for e in expenses), Decimal("0"))

    by_category = get_spending_by_category(db, timeframe, count, now)
    category_totals = [
        CategoryTotal(
            category=category,
            amount=float(amount),
            percent=float(amount / total * 100) if total > 0 else 0.0
        )
        for category, amount in sorted(by_category.items(), key=lambda x: x[1], reverse=True)
    ]

    return SpendingSummary(
        timeframe=timeframe,
        count=count,
        start=start,
        end=now,
        total=float(total),
        average_daily=float(get_average_spending(db, timeframe, count, now)),
        expense_count=len(expenses),
        by_category=category_totals,
    )
