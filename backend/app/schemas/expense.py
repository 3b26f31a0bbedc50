"""
Expense schemas.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from app.services.time_service import to_naive_utc


class ExpenseRecord(BaseModel):
    """The view of an expense the recurring detector reads."""
    id: str
    amount: Decimal = Field(ge=0)
    title: str = ""
    category: Optional[str] = None
    timestamp: datetime
    is_recurring: bool = False

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    class Config:
        from_attributes = True


class ExpenseBase(BaseModel):
    amount: Decimal = Field(ge=0)
    title: str = ""
    category: Optional[str] = None
    timestamp: datetime
    notes: Optional[str] = None
    is_recurring: bool = False

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: datetime) -> datetime:
        return to_naive_utc(value)


class ExpenseCreate(ExpenseBase):
    source: str = "manual"


class ExpenseUpdate(BaseModel):
    amount: Optional[Decimal] = Field(None, ge=0)
    title: Optional[str] = None
    category: Optional[str] = None
    timestamp: Optional[datetime] = None
    notes: Optional[str] = None
    is_recurring: Optional[bool] = None

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, value: Optional[datetime]) -> Optional[datetime]:
        return to_naive_utc(value) if value is not None else None


class ExpenseResponse(ExpenseBase):
    id: str
    source: str
    created_at: datetime

    class Config:
        from_attributes = True


class ExpenseListResponse(BaseModel):
    items: List[ExpenseResponse]
    total: int


class ImportResult(BaseModel):
    imported: int
    skipped: int


class ParseTextRequest(BaseModel):
    text: str


class ParsedExpense(BaseModel):
    """Expense fields extracted from free text."""
    amount: Optional[Decimal] = None
    description: Optional[str] = None
    category: Optional[str] = None
    raw_text: str
