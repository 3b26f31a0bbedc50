"""Service for recording expenses and feeding them to recurring detection."""

from typing import List, Optional, Tuple
import logging
import uuid

from sqlalchemy.orm import Session

from app.models.expense import Expense
from app.schemas.expense import ExpenseCreate, ExpenseRecord, ExpenseUpdate
from app.schemas.recurring import RecurringSuggestion
from app.services.category_service import guess_category
from app.services.csv_service import parse_expenses_csv
from app.services.suggestion_registry import SuggestionRegistry

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"category", "notes"}


def create_expense(db: Session, data: ExpenseCreate) -> Expense:
    """Persist an expense, guessing its category from the title when missing."""
    category = data.category or guess_category(data.title)

    expense = Expense(
        id=str(uuid.uuid4()),
        amount=data.amount,
        title=data.title,
        category=category,
        timestamp=data.timestamp,
        notes=data.notes,
        is_recurring=data.is_recurring,
        source=data.source,
    )
    db.add(expense)
    db.commit()
    db.refresh(expense)
    return expense


def get_expense(db: Session, expense_id: str) -> Optional[Expense]:
    return db.query(Expense).filter(Expense.id == expense_id).first()


def get_history(db: Session, exclude_id: Optional[str] = None) -> List[ExpenseRecord]:
    """All stored expenses as detector records."""
    query = db.query(Expense)
    if exclude_id:
        query = query.filter(Expense.id != exclude_id)
    return [ExpenseRecord.model_validate(e) for e in query.order_by(Expense.timestamp).all()]


def record_expense(
    db: Session,
    registry: SuggestionRegistry,
    data: ExpenseCreate
) -> Tuple[Expense, Optional[RecurringSuggestion]]:
    """
    Store a new expense and run recurring detection against the stored history.
    """
    expense = create_expense(db, data)
    history = get_history(db, exclude_id=expense.id)

    suggestion = registry.analyze(ExpenseRecord.model_validate(expense), history)
    if suggestion:
        logger.info(
            "Expense %s looks %s (confidence %.2f)",
            expense.id, suggestion.pattern.frequency.value, suggestion.confidence
        )
    return expense, suggestion


def set_recurring(db: Session, expense_id: str, is_recurring: bool = True) -> Optional[Expense]:
    """Persist the recurring flag of an expense."""
    expense = get_expense(db, expense_id)
    if expense:
        expense.is_recurring = is_recurring
        db.commit()
        db.refresh(expense)
    return expense


def get_recurring_expenses(db: Session) -> List[Expense]:
    return db.query(Expense).filter(Expense.is_recurring == True).order_by(Expense.timestamp.desc()).all()


def delete_expense(db: Session, expense_id: str) -> bool:
    expense = get_expense(db, expense_id)
    if not expense:
        return False
    db.delete(expense)
    db.commit()
    return True


def update_expense(db: Session, expense_id: str, data: ExpenseUpdate) -> Optional[Expense]:
    """Apply the fields set on data to a stored expense."""
    expense = get_expense(db, expense_id)
    if not expense:
        return None

    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(expense, field, value)

    db.commit()
    db.refresh(expense)
    return expense


def import_expenses(db: Session, content: str) -> Tuple[int, int]:
    """Store expenses parsed from CSV text. Returns (imported, skipped)."""
    parsed, skipped = parse_expenses_csv(content)
    for data in parsed:
        create_expense(db, data)

    logger.info("Imported %d expense(s), skipped %d row(s)", len(parsed), skipped)
    return len(parsed), skipped
