"""
Spending analytics schemas.
"""

from pydantic import BaseModel
from typing import List
from datetime import date, datetime
import enum


class Timeframe(str, enum.Enum):
    day = "day"
    week = "week"
    month = "month"
    year = "year"


class CategoryTotal(BaseModel):
    category: str
    amount: float
    percent: float


class SpendingSummary(BaseModel):
    timeframe: Timeframe
    count: int
    start: datetime
    end: datetime
    total: float
    average_daily: float
    expense_count: int
    by_category: List[CategoryTotal]


class DailySpending(BaseModel):
    day: date
    amount: float
