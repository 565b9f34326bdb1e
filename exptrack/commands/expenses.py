"""Expense management commands (add, edit, delete, categories)."""

import sys
from datetime import date
from decimal import Decimal

import typer
from rich.table import Table

from exptrack.commands.context import (
    ClientContext,
    build_context,
    console,
    expense_table,
    format_amount,
    require_login,
)
from exptrack.dates import normalize_date
from exptrack.domain.expenses import ExpenseRecord, build_expense, parse_amount
from exptrack.domain.models import CATEGORY_ICONS, CATEGORY_LABELS, ExpenseId, parse_category
from exptrack.errors import ServiceError, ValidationError


def parse_form_fields(
    raw_amount: str, raw_date: str, raw_category: str
) -> tuple[Decimal | None, date | None, str]:
    """Turn typed form values into the types the validator expects.

    Unparseable values come back as None (amount, date) or unchanged
    (category) so validation reports them.
    """
    amount = parse_amount(raw_amount)

    try:
        expense_date = normalize_date(raw_date) if raw_date.strip() else None
    except ValueError:
        expense_date = None

    try:
        category = parse_category(raw_category).value
    except ValueError:
        category = raw_category

    return amount, expense_date, category


def prompt_expense_form(existing: ExpenseRecord | None = None) -> ExpenseRecord:
    """Prompt for expense fields until they validate.

    Args:
        existing: Record being edited; its values are offered as defaults.

    Returns:
        A validated record (carrying the existing id when editing).
    """
    while True:
        description = typer.prompt("Description", default=existing.description if existing else None)
        raw_amount = typer.prompt("Amount", default=str(existing.amount) if existing else None)
        raw_date = typer.prompt(
            "Date (YYYY-MM-DD)",
            default=existing.date.isoformat() if existing else date.today().isoformat(),
        )
        raw_category = typer.prompt(
            f"Category ({', '.join(CATEGORY_LABELS.values())})",
            default=existing.category.value if existing else None,
        )

        amount, expense_date, category = parse_form_fields(raw_amount, raw_date, raw_category)
        try:
            return build_expense(
                description,
                amount,
                expense_date,
                category,
                expense_id=existing.id if existing else None,
            )
        except ValidationError as e:
            for message in e.errors:
                console.print(f"[red]✗[/red] {message}")
            console.print()


def save_expense(ctx: ClientContext, record: ExpenseRecord) -> ExpenseRecord:
    """Create or update a record depending on whether it has an id."""
    if record.id is None:
        return ctx.expenses.create(record)
    return ctx.expenses.update(record.id, record)


def add_command(
    description: str | None = None,
    amount: str | None = None,
    expense_date: str | None = None,
    category: str | None = None,
) -> None:
    """Add an expense. Prompts for the form when fields are missing."""
    ctx = build_context()
    require_login(ctx)

    if None in (description, amount, category):
        record = prompt_expense_form()
    else:
        assert description is not None and amount is not None and category is not None
        parsed_amount, parsed_date, parsed_category = parse_form_fields(
            amount, expense_date or date.today().isoformat(), category
        )
        try:
            record = build_expense(description, parsed_amount, parsed_date, parsed_category)
        except ValidationError as e:
            console.print("[red]Invalid expense:[/red]", style="bold")
            for message in e.errors:
                console.print(f"  {message}")
            sys.exit(1)

    try:
        saved = save_expense(ctx, record)
    except ServiceError as e:
        console.print(f"[red]API error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Expense added:")
    console.print(expense_table([saved]))


def edit_command(
    expense_id: int,
    description: str | None = None,
    amount: str | None = None,
    expense_date: str | None = None,
    category: str | None = None,
) -> None:
    """Edit an expense. Prompts with the current values when no field is given."""
    ctx = build_context()
    require_login(ctx)

    try:
        existing = ctx.expenses.get_by_id(ExpenseId(expense_id))
    except ServiceError as e:
        console.print(f"[red]API error: {e}[/red]", style="bold")
        sys.exit(1)

    if all(value is None for value in (description, amount, expense_date, category)):
        record = prompt_expense_form(existing)
    else:
        parsed_amount, parsed_date, parsed_category = parse_form_fields(
            amount if amount is not None else str(existing.amount),
            expense_date if expense_date is not None else existing.date.isoformat(),
            category if category is not None else existing.category.value,
        )
        try:
            record = build_expense(
                description if description is not None else existing.description,
                parsed_amount,
                parsed_date,
                parsed_category,
                expense_id=existing.id,
            )
        except ValidationError as e:
            console.print("[red]Invalid expense:[/red]", style="bold")
            for message in e.errors:
                console.print(f"  {message}")
            sys.exit(1)

    try:
        saved = save_expense(ctx, record)
    except ServiceError as e:
        console.print(f"[red]API error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Updated expense {expense_id}:")
    console.print(expense_table([saved]))


def delete_command(expense_id: int, yes: bool = False) -> None:
    """Delete an expense by id."""
    ctx = build_context()
    require_login(ctx)

    if not yes and not typer.confirm(f"Delete expense {expense_id}?", default=False):
        console.print("[dim]Cancelled[/dim]")
        return

    try:
        ctx.expenses.delete_by_id(ExpenseId(expense_id))
    except ServiceError as e:
        console.print(f"[red]API error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Deleted expense {expense_id}")


def categories_command() -> None:
    """List the expense categories."""
    table = Table(title="Categories")
    table.add_column("", justify="center")
    table.add_column("Value", style="magenta")
    table.add_column("Label")

    for category, label in CATEGORY_LABELS.items():
        table.add_row(CATEGORY_ICONS[category], category.value, label)

    console.print(table)


def describe_record(record: ExpenseRecord) -> str:
    """One-line summary used in confirmations."""
    return f"{record.date.isoformat()} {record.description} ({format_amount(record.amount)})"
