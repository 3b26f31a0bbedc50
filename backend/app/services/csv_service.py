"""
CSV import and export of expenses.

Columns: Amount, Title, Category, Date (ISO 8601), Notes.
"""

import csv
import io
import logging
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple

from pydantic import ValidationError

from app.models.expense import Expense
from app.schemas.expense import ExpenseCreate

logger = logging.getLogger(__name__)

CSV_HEADERS = ["Amount", "Title", "Category", "Date", "Notes"]


def export_expenses_csv(expenses: Iterable[Expense]) -> str:
    """Render expenses as CSV text with a header row."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(CSV_HEADERS)
    for e in expenses:
        writer.writerow([
            str(e.amount),
            e.title or "",
            e.category or "",
            e.timestamp.isoformat(),
            e.notes or "",
        ])
    return output.getvalue()


def _clean_amount(amount_str: str) -> Optional[Decimal]:
    """Parse an amount, ignoring currency symbols and separators. Sign is dropped."""
    if not amount_str or not amount_str.strip():
        return None

    amount_str = amount_str.strip()
    if amount_str.startswith('(') and amount_str.endswith(')'):
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r'[$,]', '', amount_str)

    try:
        return abs(Decimal(amount_str))
    except InvalidOperation:
        return None


def _parse_timestamp(value: str) -> datetime:
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def _parse_row(row: List[str]) -> Optional[ExpenseCreate]:
    if len(row) < 4:
        return None

    amount = _clean_amount(row[0])
    if amount is None:
        return None

    return ExpenseCreate(
        amount=amount,
        title=row[1].strip(),
        category=row[2].strip() or None,
        timestamp=_parse_timestamp(row[3]),
        notes=(row[4].strip() or None) if len(row) > 4 else None,
        source="import",
    )


def parse_expenses_csv(content: str) -> Tuple[List[ExpenseCreate], int]:
    """
    Parse CSV text into expenses to create.

    The first row is a header. Returns the parsed expenses and the number of
    rows that could not be parsed.
    """
    parsed: List[ExpenseCreate] = []
    skipped = 0

    reader = csv.reader(io.StringIO(content))
    next(reader, None)

    for row in reader:
        if not row or all(cell.strip() == '' for cell in row):
            continue

        try:
            expense = _parse_row(row)
        except (ValueError, ValidationError) as e:
            logger.warning("Skipping CSV row %r: %s", row, e)
            expense = None

        if expense is None:
            skipped += 1
            continue
        parsed.append(expense)

    return parsed, skipped
