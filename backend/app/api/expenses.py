"""
Expense API endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, UploadFile, File
from fastapi.responses import Response
from sqlalchemy.orm import Session
from sqlalchemy import or_
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.dependencies import get_db, get_registry
from app.models.expense import Expense
from app.schemas.expense import (
    ExpenseCreate,
    ExpenseUpdate,
    ExpenseResponse,
    ExpenseListResponse,
    ImportResult,
    ParseTextRequest,
    ParsedExpense,
)
from app.schemas.recurring import ExpenseAnalysisResponse
from app.services import expense_service
from app.services.category_service import parse_expense_text
from app.services.csv_service import export_expenses_csv
from app.services.suggestion_registry import SuggestionRegistry
from app.services.time_service import to_naive_utc

router = APIRouter(prefix="/expenses", tags=["expenses"])


@router.get("", response_model=ExpenseListResponse)
def list_expenses(
    category: Optional[str] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    is_recurring: Optional[bool] = None,
    min_amount: Optional[Decimal] = Query(None, ge=0),
    max_amount: Optional[Decimal] = Query(None, ge=0),
    search: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db)
):
    """List expenses, newest first."""
    query = db.query(Expense)

    if category:
        query = query.filter(Expense.category == category)
    if start:
        query = query.filter(Expense.timestamp >= to_naive_utc(start))
    if end:
        query = query.filter(Expense.timestamp <= to_naive_utc(end))
    if is_recurring is not None:
        query = query.filter(Expense.is_recurring == is_recurring)
    if min_amount is not None:
        query = query.filter(Expense.amount >= min_amount)
    if max_amount is not None:
        query = query.filter(Expense.amount <= max_amount)
    if search:
        search_term = f"%{search}%"
        query = query.filter(
            or_(
                Expense.title.ilike(search_term),
                Expense.category.ilike(search_term),
                Expense.notes.ilike(search_term)
            )
        )

    total = query.count()
    expenses = query.order_by(Expense.timestamp.desc()).limit(limit).all()

    return ExpenseListResponse(
        items=[ExpenseResponse.model_validate(e) for e in expenses],
        total=total
    )


@router.post("", response_model=ExpenseAnalysisResponse, status_code=201)
def create_expense(
    data: ExpenseCreate,
    db: Session = Depends(get_db),
    registry: SuggestionRegistry = Depends(get_registry)
):
    """Record an expense and check it for a recurring pattern."""
    expense, suggestion = expense_service.record_expense(db, registry, data)
    return ExpenseAnalysisResponse(
        expense=ExpenseResponse.model_validate(expense),
        suggestion=suggestion
    )


@router.post("/parse", response_model=ParsedExpense)
def parse_expense(request: ParseTextRequest):
    """Extract amount, description and category from transcribed text."""
    return parse_expense_text(request.text)


@router.get("/export")
def export_expenses(db: Session = Depends(get_db)):
    """Download all expenses as CSV."""
    expenses = db.query(Expense).order_by(Expense.timestamp.desc()).all()
    return Response(
        content=export_expenses_csv(expenses),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="expenses.csv"'}
    )


@router.post("/import", response_model=ImportResult)
async def import_expenses(
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """Import expenses from a CSV file (Amount, Title, Category, Date, Notes)."""
    content = (await file.read()).decode("utf-8-sig")
    imported, skipped = expense_service.import_expenses(db, content)
    return ImportResult(imported=imported, skipped=skipped)


@router.get("/{expense_id}", response_model=ExpenseResponse)
def get_expense(expense_id: str, db: Session = Depends(get_db)):
    """Get a single expense."""
    expense = expense_service.get_expense(db, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return ExpenseResponse.model_validate(expense)


@router.patch("/{expense_id}", response_model=ExpenseResponse)
def update_expense(
    expense_id: str,
    update: ExpenseUpdate,
    db: Session = Depends(get_db)
):
    """Update an expense."""
    expense = expense_service.update_expense(db, expense_id, update)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return ExpenseResponse.model_validate(expense)


@router.delete("/{expense_id}")
def delete_expense(expense_id: str, db: Session = Depends(get_db)):
    """Delete an expense."""
    if not expense_service.delete_expense(db, expense_id):
        raise HTTPException(status_code=404, detail="Expense not found")
    return {"deleted": True}
