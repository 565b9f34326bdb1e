"""CLI entry point for exptrack."""

import typer

from exptrack.commands.admin import init_command, login_command, logout_command, profile_command, register_command
from exptrack.commands.expenses import add_command, categories_command, delete_command, edit_command
from exptrack.commands.listing import list_command
from exptrack.logging_setup import configure_logging

app = typer.Typer(
    name="exptrack",
    help="Track your expenses against an expense-tracker server",
    add_completion=False,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Track your expenses against an expense-tracker server."""
    configure_logging("DEBUG" if verbose else None)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config"),
) -> None:
    """Create your configuration file."""
    init_command(force)


@app.command()
def register(
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
    username: str = typer.Option(None, "--username", "-u", help="Username"),
    first_name: str = typer.Option(None, "--first-name", help="First name"),
    last_name: str = typer.Option(None, "--last-name", help="Last name"),
    accept_terms: bool = typer.Option(
        False, "--accept-terms", help="Accept the terms of service and privacy policy"
    ),
) -> None:
    """Create an account and log in (prompts for anything missing)."""
    register_command(email, username, first_name, last_name, accept_terms)


@app.command()
def login(
    email: str = typer.Option(None, "--email", "-e", help="Account email (prompted if omitted)"),
) -> None:
    """Sign in and remember your session."""
    login_command(email)


@app.command()
def logout() -> None:
    """Forget your saved session."""
    logout_command()


@app.command()
def profile(
    first_name: str = typer.Option(None, "--first-name", help="New first name"),
    last_name: str = typer.Option(None, "--last-name", help="New last name"),
    phone: str = typer.Option(None, "--phone", help="New phone number"),
    locale: str = typer.Option(None, "--locale", help="New locale (e.g. en-US)"),
    timezone: str = typer.Option(None, "--timezone", help="New timezone (e.g. Europe/Madrid)"),
) -> None:
    """Show your profile, or change it with the options."""
    profile_command(first_name, last_name, phone, locale, timezone)


@app.command(name="list")
def list_expenses(
    page: int = typer.Option(1, "--page", "-p", min=1, help="Page number"),
    size: int = typer.Option(None, "--size", "-s", help="Expenses per page (10 or 25, default from config)"),
    category: str = typer.Option(None, "--category", "-c", help="Only this category"),
    from_date: str = typer.Option(None, "--from", help="Only expenses on or after this date"),
    to_date: str = typer.Option(None, "--to", help="Only expenses on or before this date"),
    month: str = typer.Option(None, "--month", help="Only this month (YYYY-MM), overrides --from/--to"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Browse pages interactively"),
) -> None:
    """Show your expenses, newest first."""
    list_command(page, size, category, from_date, to_date, month, interactive)


@app.command()
def add(
    description: str = typer.Option(None, "--description", "-d", help="What the money was spent on"),
    amount: str = typer.Option(None, "--amount", "-a", help="Amount (at least 0.01)"),
    expense_date: str = typer.Option(None, "--date", help="Date (default: today)"),
    category: str = typer.Option(None, "--category", "-c", help="Category"),
) -> None:
    """Add an expense (prompts for anything missing)."""
    add_command(description, amount, expense_date, category)


@app.command()
def edit(
    expense_id: int,
    description: str = typer.Option(None, "--description", "-d", help="New description"),
    amount: str = typer.Option(None, "--amount", "-a", help="New amount"),
    expense_date: str = typer.Option(None, "--date", help="New date"),
    category: str = typer.Option(None, "--category", "-c", help="New category"),
) -> None:
    """Edit an expense (prompts with current values if no option is given)."""
    edit_command(expense_id, description, amount, expense_date, category)


@app.command()
def delete(
    expense_id: int,
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
) -> None:
    """Delete an expense."""
    delete_command(expense_id, yes)


@app.command()
def categories() -> None:
    """Show the available categories."""
    categories_command()


if __name__ == "__main__":
    app()
