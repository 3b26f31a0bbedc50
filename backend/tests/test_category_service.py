"""Tests for keyword category guessing and text parsing."""

from decimal import Decimal

from app.services.category_service import (
    extract_amount,
    extract_description,
    guess_category,
    parse_expense_text,
)


class TestGuessCategory:
    """Test keyword lookup."""

    def test_default_table(self):
        assert guess_category("Morning coffee") == "Food & Dining"
        assert guess_category("Netflix subscription") == "Entertainment"
        assert guess_category("UBER trip") == "Transportation"

    def test_no_match(self):
        assert guess_category("something unusual") is None
        assert guess_category("") is None

    def test_custom_table(self):
        table = {"Pets": ["vet", "kibble"], "Kids": ["daycare"]}
        assert guess_category("Vet visit", table) == "Pets"
        assert guess_category("coffee", table) is None

    def test_first_category_wins(self):
        table = {"First": ["shared"], "Second": ["shared"]}
        assert guess_category("shared keyword", table) == "First"


class TestParseExpenseText:
    """Test free-text extraction."""

    def test_amount_formats(self):
        assert extract_amount("25 dollars") == Decimal("25")
        assert extract_amount("25.50 bucks") == Decimal("25.50")
        assert extract_amount("$ 12.99 for lunch") == Decimal("12.99")
        assert extract_amount("no amount here") is None

    def test_description(self):
        assert extract_description("I spent 5 dollars on coffee at Starbucks") == "coffee Starbucks"

    def test_description_empty(self):
        assert extract_description("I spent 5 dollars") is None

    def test_filler_words_inside_other_words_survive(self):
        assert extract_description("$40 phone bill") == "phone bill"

    def test_parse(self):
        parsed = parse_expense_text("I paid $12.50 for Uber")
        assert parsed.amount == Decimal("12.50")
        assert parsed.description == "Uber"
        assert parsed.category == "Transportation"
        assert parsed.raw_text == "I paid $12.50 for Uber"
