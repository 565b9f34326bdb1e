"""Tests for exptrack.domain.expenses pure functions."""

from datetime import date
from decimal import Decimal

import pytest

from exptrack.domain.expenses import (
    ExpenseRecord,
    build_expense,
    parse_amount,
    validate_amount,
    validate_expense_input,
)
from exptrack.domain.models import Category
from exptrack.errors import ValidationError

TODAY = date(2025, 6, 15)


class TestExpenseRecordJson:
    """Tests for converting records to and from the wire format."""

    def test_from_json(self) -> None:
        """Should parse every field, keeping the amount exact."""
        record = ExpenseRecord.from_json(
            {"id": 4, "description": "Groceries", "amount": 45.1, "date": "2025-01-31", "category": "FOOD"}
        )

        assert record.id == 4
        assert record.amount == Decimal("45.1")
        assert record.date == date(2025, 1, 31)
        assert record.category is Category.FOOD

    def test_from_json_unknown_category(self) -> None:
        """Should raise ValueError for a category the client does not know."""
        with pytest.raises(ValueError):
            ExpenseRecord.from_json({"id": 1, "amount": 1, "date": "2025-01-01", "category": "PETS"})

    def test_from_json_missing_field(self) -> None:
        """Should raise KeyError when the date is missing."""
        with pytest.raises(KeyError):
            ExpenseRecord.from_json({"id": 1, "amount": 1, "category": "FOOD"})

    def test_to_json_omits_id(self) -> None:
        """Should serialize the amount as a string and leave the id out."""
        record = ExpenseRecord(None, "Bus", Decimal("2.50"), date(2025, 2, 1), Category.TRANSPORTATION)

        assert record.to_json() == {
            "description": "Bus",
            "amount": "2.50",
            "date": "2025-02-01",
            "category": "TRANSPORTATION",
        }


class TestAmounts:
    """Tests for parse_amount and validate_amount."""

    @pytest.mark.parametrize("raw", ["abc", "", "nan", "inf"])
    def test_unparseable(self, raw: str) -> None:
        """Should return None for anything that is not a finite number."""
        assert parse_amount(raw) is None

    def test_parses_decimal(self) -> None:
        """Should keep the exact decimal value."""
        assert parse_amount(" 19.99 ") == Decimal("19.99")

    @pytest.mark.parametrize("raw", ["0.01", "1", "12.5", "999999999999999.99"])
    def test_valid(self, raw: str) -> None:
        """Should accept amounts inside the column constraints."""
        assert validate_amount(Decimal(raw)) == []

    @pytest.mark.parametrize(
        ("raw", "message"),
        [
            ("0", "at least 0.01"),
            ("-5", "at least 0.01"),
            ("1.999", "at most 2 decimal places"),
            ("1000000000000000", "at most 15 integer digits"),
        ],
    )
    def test_invalid(self, raw: str, message: str) -> None:
        """Should explain why an amount is rejected."""
        errors = validate_amount(Decimal(raw))

        assert any(message in error for error in errors)

    def test_missing(self) -> None:
        """Should report an amount that did not parse."""
        assert validate_amount(None) == ["Amount must be a number"]


class TestValidateExpenseInput:
    """Tests for validate_expense_input."""

    def test_valid(self) -> None:
        """Should return no errors for a complete form."""
        errors = validate_expense_input("Rent", Decimal("900"), date(2025, 6, 1), "HOUSING", today=TODAY)

        assert errors == []

    def test_collects_every_error(self) -> None:
        """Should report all invalid fields at once."""
        errors = validate_expense_input("  ", None, None, None, today=TODAY)

        assert errors == [
            "Description is required",
            "Amount must be a number",
            "Date is required",
            "Category is required",
        ]

    def test_description_too_long(self) -> None:
        """Should cap the description length."""
        errors = validate_expense_input("x" * 256, Decimal("1"), TODAY, "FOOD", today=TODAY)

        assert errors == ["Description must be at most 255 characters"]

    def test_future_date(self) -> None:
        """Should reject dates after today."""
        errors = validate_expense_input("Rent", Decimal("1"), date(2025, 6, 16), "FOOD", today=TODAY)

        assert errors == ["Date cannot be in the future"]

    def test_date_too_early(self) -> None:
        """Should reject dates before 2020."""
        errors = validate_expense_input("Rent", Decimal("1"), date(2019, 12, 31), "FOOD", today=TODAY)

        assert errors == ["Date cannot be before 2020-01-01"]

    def test_unknown_category(self) -> None:
        """Should reject categories outside the closed set."""
        errors = validate_expense_input("Cat food", Decimal("1"), TODAY, "PETS", today=TODAY)

        assert errors == ["Unknown category 'PETS'"]


class TestBuildExpense:
    """Tests for build_expense."""

    def test_builds_record(self) -> None:
        """Should strip the description and carry the id."""
        record = build_expense("  Coffee ", Decimal("3.20"), TODAY, "FOOD", expense_id=9, today=TODAY)

        assert record == ExpenseRecord(9, "Coffee", Decimal("3.20"), TODAY, Category.FOOD)

    def test_raises_with_all_errors(self) -> None:
        """Should raise ValidationError listing every problem."""
        with pytest.raises(ValidationError) as exc_info:
            build_expense("", Decimal("0"), TODAY, "FOOD", today=TODAY)

        assert exc_info.value.errors == ["Description is required", "Amount must be at least 0.01"]
