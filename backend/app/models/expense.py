"""
Expense database model.
"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, Boolean, DateTime, Numeric, Text, Index
from app.database import Base


class Expense(Base):
    """Expense model."""

    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    amount = Column(Numeric(12, 2), nullable=False)  # Always non-negative
    title = Column(String(255), nullable=False, default="")
    category = Column(String(100), nullable=True)
    timestamp = Column(DateTime, nullable=False, index=True)
    notes = Column(Text, nullable=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    source = Column(String(20), default="manual", nullable=False)  # manual, voice, bank, import
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("idx_expense_category", "category"),
    )
