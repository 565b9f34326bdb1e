"""List command: paginated, filterable expense view."""

import sys
from datetime import date

import typer

from exptrack.commands.context import ClientContext, build_context, console, expense_table, require_login
from exptrack.commands.expenses import describe_record, prompt_expense_form, save_expense
from exptrack.controller import ListController
from exptrack.dates import month_range, normalize_date
from exptrack.domain.expenses import ExpenseRecord
from exptrack.domain.models import PAGE_SIZES, ExpenseId, category_label, parse_category
from exptrack.domain.pagination import ListViewState
from exptrack.errors import ServiceError

INTERACTIVE_HELP = (
    "[dim]n next, p previous, g <page> go to, s <size> page size, "
    "c <category|-> category, d <from|-> <to|-> dates, x <id> delete, "
    "e <id> edit, a add, r refresh, q quit[/dim]"
)


def parse_filter_date(raw_date: str | None) -> date | None:
    """Parse a --from/--to option, exiting on bad input."""
    if raw_date is None:
        return None
    try:
        return normalize_date(raw_date)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)


def describe_filters(view: ListViewState) -> str:
    """Summarize the active filters, e.g. "Food, 2024-01-01 to any"."""
    query = view.query
    parts = []
    if query.category is not None:
        parts.append(category_label(query.category))
    if query.start_date is not None or query.end_date is not None:
        start = query.start_date.isoformat() if query.start_date else "any"
        end = query.end_date.isoformat() if query.end_date else "any"
        parts.append(f"{start} to {end}")
    return ", ".join(parts) if parts else "no filters"


def render_view(view: ListViewState) -> None:
    """Print the page currently held by the controller."""
    if view.error:
        console.print(f"[red]Error: {view.error}[/red]")

    if view.loading:
        console.print("[cyan]Loading...[/cyan]")
        return

    result = view.result
    page_number = view.query.page_index + 1
    title = f"Expenses ({describe_filters(view)})"

    if not result.content:
        console.print(f"[yellow]No expenses found ({describe_filters(view)})[/yellow]")
    else:
        console.print(expense_table(result.content, title=title))

    console.print(
        f"Page {page_number} of {max(result.total_pages, 1)} "
        f"({result.total_elements} total, {view.query.page_size} per page)"
    )


def wait_for_view(controller: ListController, timeout: float) -> ListViewState:
    """Wait for outstanding requests, then return the view to render."""
    if not controller.wait_idle(timeout):
        console.print(f"[yellow]Still waiting for the server after {timeout:.0f}s[/yellow]")
    return controller.snapshot()


def build_controller(ctx: ClientContext, page_size: int | None = None) -> ListController:
    list_config = ctx.config["list"]

    def add_flow() -> None:
        record = prompt_expense_form()
        saved = save_expense(ctx, record)
        console.print(f"[green]✓[/green] Added {describe_record(saved)}")

    def edit_flow(record: ExpenseRecord) -> None:
        updated = prompt_expense_form(record)
        saved = save_expense(ctx, updated)
        console.print(f"[green]✓[/green] Updated {describe_record(saved)}")

    return ListController(
        ctx.expenses,
        page_size=page_size or list_config["page_size"],
        strategy=list_config["delete_strategy"],
        discard_stale=list_config["discard_stale"],
        on_add=add_flow,
        on_edit=edit_flow,
    )


def list_command(
    page: int = 1,
    size: int | None = None,
    category: str | None = None,
    from_date: str | None = None,
    to_date: str | None = None,
    month: str | None = None,
    interactive: bool = False,
) -> None:
    """Show a page of expenses, newest first."""
    ctx = build_context()
    require_login(ctx)

    if size is not None and size not in PAGE_SIZES:
        console.print(f"[red]Page size must be one of {', '.join(str(s) for s in PAGE_SIZES)}[/red]")
        sys.exit(1)

    try:
        selected_category = parse_category(category) if category else None
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)

    start_date = parse_filter_date(from_date)
    end_date = parse_filter_date(to_date)
    if month:
        try:
            start_date, end_date, _ = month_range(month)
        except ValueError:
            console.print(f"[red]Invalid month '{month}', expected YYYY-MM[/red]")
            sys.exit(1)

    timeout = float(ctx.config["api"]["timeout"]) * 2
    controller = build_controller(ctx, size)
    try:
        if selected_category or start_date or end_date:
            controller.set_filter(selected_category, start_date, end_date)
        else:
            controller.mount()
        wait_for_view(controller, timeout)

        if page > 1:
            controller.set_page(page - 1)
        view = wait_for_view(controller, timeout)

        if interactive:
            run_interactive(ctx, controller, timeout)
        else:
            render_view(view)
            if view.error:
                sys.exit(1)
    finally:
        controller.close()


def run_interactive(ctx: ClientContext, controller: ListController, timeout: float) -> None:
    """Drive the controller from single-letter commands until the user quits."""
    while ctx.session.is_authenticated:
        render_view(controller.snapshot())
        console.print(INTERACTIVE_HELP)
        line = typer.prompt(">", default="q", show_default=False).strip()
        if not line:
            continue

        action, *args = line.split()
        action = action.lower()

        if action == "q":
            return
        try:
            handle_action(controller, action, args)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
        except ServiceError as e:
            # Raised by the add/edit flows, which save outside the controller
            console.print(f"[red]API error: {e}[/red]")
            controller.load_page()
        wait_for_view(controller, timeout)


def handle_action(controller: ListController, action: str, args: list[str]) -> None:
    """Translate one interactive command into a controller intent.

    Raises:
        ValueError: If the command or its arguments are invalid.
    """
    if action == "n":
        controller.request_page(controller.page_index + 1)
    elif action == "p":
        controller.request_page(controller.page_index - 1)
    elif action == "g":
        controller.request_page(_int_arg(args, "page number") - 1)
    elif action == "s":
        controller.request_page_size(_int_arg(args, "page size"))
    elif action == "c":
        value = _arg(args, "category")
        controller.request_filter_change(category=None if value == "-" else parse_category(value))
    elif action == "d":
        if len(args) != 2:
            raise ValueError("Usage: d <from|-> <to|->")
        start, end = (None if value == "-" else normalize_date(value) for value in args)
        controller.request_filter_change(start_date=start, end_date=end)
    elif action == "x":
        expense_id = ExpenseId(_int_arg(args, "expense id"))
        if typer.confirm(f"Delete expense {expense_id}?", default=False):
            controller.request_delete(expense_id)
    elif action == "e":
        expense_id = _int_arg(args, "expense id")
        record = next((r for r in controller.content if r.id == expense_id), None)
        if record is None:
            raise ValueError(f"Expense {expense_id} is not on this page")
        controller.request_edit(record)
        controller.load_page()
    elif action == "a":
        controller.request_add()
        controller.load_page()
    elif action == "r":
        controller.load_page()
    else:
        raise ValueError(f"Unknown command '{action}'")


def _arg(args: list[str], name: str) -> str:
    if not args:
        raise ValueError(f"Missing {name}")
    return " ".join(args)


def _int_arg(args: list[str], name: str) -> int:
    value = _arg(args, name)
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid {name} '{value}'") from None
