"""Domain models and types for exptrack.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- List and form logic separated from the network and the terminal
"""

from exptrack.domain.models import Category, ExpenseId, IsoDate

__all__ = ["Category", "ExpenseId", "IsoDate"]
