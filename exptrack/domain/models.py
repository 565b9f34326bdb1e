"""Domain type definitions for exptrack.

These types give semantic clarity and help with type checking:
- ExpenseId: Server-assigned expense identifier
- IsoDate: Date string in YYYY-MM-DD format (wire format)
- Category: Closed set of expense categories
"""

from enum import StrEnum
from typing import NewType

# Identifiers are assigned by the backend and never change
ExpenseId = NewType("ExpenseId", int)

# Dates always travel as YYYY-MM-DD (e.g., "2025-01-31")
IsoDate = NewType("IsoDate", str)

# Page sizes offered to the user; the first one is the default
PAGE_SIZES: tuple[int, ...] = (10, 25)
DEFAULT_PAGE_SIZE = PAGE_SIZES[0]

# Lists are always newest first
SORT_FIELD = "date"
SORT_DIRECTION = "desc"


class Category(StrEnum):
    """Expense categories understood by the backend."""

    FOOD = "FOOD"
    HOUSING = "HOUSING"
    TRANSPORTATION = "TRANSPORTATION"
    UTILITIES = "UTILITIES"
    ENTERTAINMENT = "ENTERTAINMENT"
    HEALTHCARE = "HEALTHCARE"
    EDUCATION = "EDUCATION"
    PERSONAL_CARE = "PERSONAL_CARE"
    MISCELLANEOUS = "MISCELLANEOUS"


CATEGORY_LABELS: dict[Category, str] = {
    Category.FOOD: "Food",
    Category.HOUSING: "Housing",
    Category.TRANSPORTATION: "Transportation",
    Category.UTILITIES: "Utilities",
    Category.ENTERTAINMENT: "Entertainment",
    Category.HEALTHCARE: "Healthcare",
    Category.EDUCATION: "Education",
    Category.PERSONAL_CARE: "Personal Care",
    Category.MISCELLANEOUS: "Miscellaneous",
}

CATEGORY_ICONS: dict[Category, str] = {
    Category.FOOD: "🍽️",
    Category.HOUSING: "🏠",
    Category.TRANSPORTATION: "🚗",
    Category.UTILITIES: "💡",
    Category.ENTERTAINMENT: "🎬",
    Category.HEALTHCARE: "🏥",
    Category.EDUCATION: "📚",
    Category.PERSONAL_CARE: "💄",
    Category.MISCELLANEOUS: "📦",
}


def parse_category(value: str) -> Category:
    """Parse a category from user input or the wire.

    Accepts the enum value in any case, and the human label
    (e.g. "personal care").

    Raises:
        ValueError: If the value names no category.
    """
    normalized = value.strip().upper().replace(" ", "_").replace("-", "_")
    try:
        return Category(normalized)
    except ValueError:
        raise ValueError(f"Unknown category '{value}'") from None


def category_label(value: str) -> str:
    """Human-readable label, or the raw value if it is not a known category."""
    try:
        return CATEGORY_LABELS[Category(value)]
    except ValueError:
        return value


def category_icon(value: str) -> str:
    """Icon for a category, falling back to the miscellaneous icon."""
    try:
        return CATEGORY_ICONS[Category(value)]
    except ValueError:
        return CATEGORY_ICONS[Category.MISCELLANEOUS]
