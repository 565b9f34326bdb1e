"""Pure functions for expense records and form validation.

This module contains the functional core for single expenses:
- No I/O operations (no network, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

Amounts are decimal currency units (Decimal), never floats.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from exptrack.dates import format_iso_date, parse_iso_date
from exptrack.domain.models import Category, ExpenseId
from exptrack.errors import ValidationError

MIN_AMOUNT = Decimal("0.01")
MAX_INTEGER_DIGITS = 15
MAX_FRACTION_DIGITS = 2
MAX_DESCRIPTION_LENGTH = 255
EARLIEST_DATE = date(2020, 1, 1)


@dataclass(frozen=True)
class ExpenseRecord:
    """Immutable expense record as held by the list view."""

    id: ExpenseId | None
    description: str
    amount: Decimal
    date: date
    category: Category

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "ExpenseRecord":
        """Build a record from the backend's JSON representation.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If a field cannot be parsed.
        """
        raw_id = payload.get("id")
        try:
            amount = Decimal(str(payload["amount"]))
        except InvalidOperation:
            raise ValueError(f"Invalid amount {payload['amount']!r}") from None
        return cls(
            id=ExpenseId(int(raw_id)) if raw_id is not None else None,
            description=str(payload.get("description") or ""),
            amount=amount,
            date=parse_iso_date(payload["date"]),
            category=Category(payload["category"]),
        )

    def to_json(self) -> dict[str, Any]:
        """Serialize for create/update requests (the id travels in the URL)."""
        return {
            "description": self.description,
            "amount": str(self.amount),
            "date": format_iso_date(self.date),
            "category": self.category.value,
        }


def parse_amount(raw_amount: str) -> Decimal | None:
    """Parse an amount string, returning None if it is not a finite decimal."""
    try:
        amount = Decimal(raw_amount.strip())
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def validate_amount(amount: Decimal | None) -> list[str]:
    """Check an amount against the backend's column constraints."""
    if amount is None:
        return ["Amount must be a number"]

    errors = []
    if amount < MIN_AMOUNT:
        errors.append(f"Amount must be at least {MIN_AMOUNT}")

    _, digits, exponent = amount.as_tuple()
    assert isinstance(exponent, int)  # finite amounts only
    fraction_digits = max(-exponent, 0)
    integer_digits = max(len(digits) + exponent, 0)
    if fraction_digits > MAX_FRACTION_DIGITS:
        errors.append(f"Amount must have at most {MAX_FRACTION_DIGITS} decimal places")
    if integer_digits > MAX_INTEGER_DIGITS:
        errors.append(f"Amount must have at most {MAX_INTEGER_DIGITS} integer digits")
    return errors


def validate_expense_input(
    description: str,
    amount: Decimal | None,
    expense_date: date | None,
    category: str | None,
    today: date | None = None,
) -> list[str]:
    """Validate expense form fields.

    Args:
        description: Free text description.
        amount: Parsed amount, or None if it did not parse.
        expense_date: Parsed date, or None if it did not parse.
        category: Category value as entered.
        today: Reference date for the "not in the future" rule.

    Returns:
        List of error messages. Empty if the input is valid.
    """
    if today is None:
        today = date.today()

    errors = []

    if not description.strip():
        errors.append("Description is required")
    elif len(description) > MAX_DESCRIPTION_LENGTH:
        errors.append(f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters")

    errors.extend(validate_amount(amount))

    if expense_date is None:
        errors.append("Date is required")
    elif expense_date > today:
        errors.append("Date cannot be in the future")
    elif expense_date < EARLIEST_DATE:
        errors.append(f"Date cannot be before {format_iso_date(EARLIEST_DATE)}")

    if not category:
        errors.append("Category is required")
    elif category not in {member.value for member in Category}:
        errors.append(f"Unknown category '{category}'")

    return errors


def build_expense(
    description: str,
    amount: Decimal | None,
    expense_date: date | None,
    category: str | None,
    expense_id: ExpenseId | None = None,
    today: date | None = None,
) -> ExpenseRecord:
    """Validate form input and build a record from it.

    Raises:
        ValidationError: If any field is invalid.
    """
    errors = validate_expense_input(description, amount, expense_date, category, today)
    if errors:
        raise ValidationError(errors)

    # validate_expense_input has ruled out the None cases
    assert amount is not None and expense_date is not None and category is not None
    return ExpenseRecord(
        id=expense_id,
        description=description.strip(),
        amount=amount,
        date=expense_date,
        category=Category(category),
    )
