"""Keyword-based category guessing and free-text expense parsing."""

import re
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Mapping, Optional, Sequence

from app.config import settings
from app.schemas.expense import ParsedExpense

AMOUNT_PATTERNS = [
    re.compile(r"(\d+(?:\.\d{1,2})?)\s*(?:dollars?|bucks?|\$)", re.IGNORECASE),
    re.compile(r"\$\s*(\d+(?:\.\d{1,2})?)"),
]

FILLER_PHRASES = [
    "i spent",
    "i bought",
    "i paid",
    "spent on",
    "paid for",
    "bought",
    "for",
    "on",
    "at",
]


def guess_category(
    text: str,
    keyword_table: Optional[Mapping[str, Sequence[str]]] = None
) -> Optional[str]:
    """
    Guess a category from free text.

    Returns the first category, in table order, with a keyword contained in
    the lower-cased text, or None.
    """
    if keyword_table is None:
        keyword_table = settings.category_keywords

    lowered = (text or "").lower()
    for category, keywords in keyword_table.items():
        if any(keyword.lower() in lowered for keyword in keywords):
            return category
    return None


def extract_amount(text: str) -> Optional[Decimal]:
    for pattern in AMOUNT_PATTERNS:
        match = pattern.search(text)
        if match:
            try:
                return Decimal(match.group(1))
            except InvalidOperation:
                return None
    return None


def extract_description(text: str) -> Optional[str]:
    """Strip amount mentions and filler phrases, leaving the description."""
    cleaned = text
    for pattern in AMOUNT_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)

    for phrase in FILLER_PHRASES:
        cleaned = re.sub(rf"\b{re.escape(phrase)}\b", " ", cleaned, flags=re.IGNORECASE)

    words: List[str] = cleaned.strip(" \t\n.,!?;:").split()
    result = " ".join(words)
    return result or None


def parse_expense_text(
    text: str,
    keyword_table: Optional[Dict[str, List[str]]] = None
) -> ParsedExpense:
    """Extract amount, description and category from a spoken or typed sentence."""
    return ParsedExpense(
        amount=extract_amount(text),
        description=extract_description(text),
        category=guess_category(text, keyword_table),
        raw_text=text,
    )
