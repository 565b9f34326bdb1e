"""Shared wiring for CLI commands: config, session and services."""

import sys
import tomllib
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from exptrack.auth import AuthService
from exptrack.config import load_config
from exptrack.domain.expenses import ExpenseRecord
from exptrack.domain.models import category_icon, category_label
from exptrack.service import ExpenseService
from exptrack.session import Session, delete_session, get_session_path, load_session

console = Console()


@dataclass
class ClientContext:
    """Everything a command needs to talk to the backend."""

    config: dict[str, Any]
    session: Session
    session_path: Path
    expenses: ExpenseService
    auth: AuthService


def build_context(config_path: Path | None = None, session_path: Path | None = None) -> ClientContext:
    """Load config and the saved session and build the services.

    Exits with an error message if the config cannot be read.
    """
    try:
        config = load_config(config_path)
    except (ValueError, tomllib.TOMLDecodeError) as e:
        console.print(f"[red]Invalid config: {e}[/red]", style="bold")
        sys.exit(1)

    if session_path is None:
        session_path = get_session_path()

    try:
        session = load_session(session_path)
    except tomllib.TOMLDecodeError:
        console.print("[yellow]Saved session is unreadable, please log in again[/yellow]")
        delete_session(session_path)
        session = Session()

    def forget_session(_: Session) -> None:
        delete_session(session_path)
        console.print("[yellow]Your session has expired. Run 'exptrack login' to sign in again.[/yellow]")

    session.on_expired(forget_session)

    base_url = config["api"]["base_url"]
    timeout = float(config["api"]["timeout"])
    return ClientContext(
        config=config,
        session=session,
        session_path=session_path,
        expenses=ExpenseService(base_url, session, timeout=timeout),
        auth=AuthService(base_url, session, timeout=timeout),
    )


def require_login(ctx: ClientContext) -> None:
    """Exit unless a session is saved."""
    if not ctx.session.is_authenticated:
        console.print("[red]Not logged in. Run 'exptrack login' first.[/red]", style="bold")
        sys.exit(1)


def format_amount(amount: Decimal) -> str:
    return f"${amount:,.2f}"


def format_category(value: str) -> str:
    return f"{category_icon(value)} {category_label(value)}"


def expense_table(records: tuple[ExpenseRecord, ...] | list[ExpenseRecord], title: str | None = None) -> Table:
    """Render expenses as a rich table."""
    table = Table(title=title)
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Date", style="cyan")
    table.add_column("Description", style="white")
    table.add_column("Category", style="magenta")
    table.add_column("Amount", justify="right")

    for record in records:
        table.add_row(
            str(record.id),
            record.date.isoformat(),
            record.description,
            format_category(record.category),
            f"[red]{format_amount(record.amount)}[/red]",
        )

    return table
