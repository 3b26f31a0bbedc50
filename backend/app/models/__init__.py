"""
Database models package.
"""

from app.models.expense import Expense
from app.models.recurring import Frequency

__all__ = [
    "Expense",
    "Frequency",
]
