"""Date utilities for exptrack.

Pure functions for parsing, formatting and month-based filter bounds.
"""

from datetime import date, datetime, timedelta

import pandas as pd

from exptrack.domain.models import IsoDate


def parse_iso_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD date as sent by the backend.

    Raises:
        ValueError: If the value is not an ISO calendar date.
    """
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_iso_date(value: date) -> IsoDate:
    """Format a date for the wire (YYYY-MM-DD)."""
    return IsoDate(value.strftime("%Y-%m-%d"))


def normalize_date(raw_date: str) -> date:
    """Parse a user-typed date.

    YYYY-MM-DD is read as is. Anything else goes through pandas.to_datetime
    with dayfirst, so European dates and a range of other formats are
    accepted from the command line.

    Args:
        raw_date: Date as typed by the user.

    Returns:
        The parsed calendar date.

    Raises:
        ValueError: If the date cannot be parsed.
    """
    raw_date = raw_date.strip()
    try:
        return parse_iso_date(raw_date)
    except ValueError:
        pass

    try:
        parsed_date = pd.to_datetime(raw_date, dayfirst=True)
    except (ValueError, pd.errors.ParserError) as e:
        raise ValueError(f"Could not parse date '{raw_date}': {e}") from e
    if pd.isna(parsed_date):
        raise ValueError(f"Could not parse date '{raw_date}'")
    return parsed_date.date()


def month_range(month: str) -> tuple[date, date, str]:
    """Calculate the inclusive date range and label for a month.

    Args:
        month: Month in YYYY-MM format.

    Returns:
        Tuple of (start_date, end_date, label) where:
        - start_date: First day of the month
        - end_date: Last day of the month (the backend filter is inclusive)
        - label: Human-readable month (e.g., "January 2025")
    """
    dt = datetime.strptime(month, "%Y-%m")
    start = dt.date()
    next_month = (dt.replace(day=28) + timedelta(days=4)).replace(day=1)
    end = next_month.date() - timedelta(days=1)
    label = dt.strftime("%B %Y")
    return start, end, label
