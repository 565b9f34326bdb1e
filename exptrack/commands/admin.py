"""Admin commands for initialization, accounts and sign-in."""

import sys
from typing import Any

import typer
from rich.table import Table

from exptrack.commands.context import build_context, console, require_login
from exptrack.config import create_default_config, get_config_path
from exptrack.domain.accounts import build_registration, profile_changes
from exptrack.errors import AuthenticationError, ServiceError, ValidationError
from exptrack.session import delete_session, save_session

PROFILE_LABELS = (
    ("username", "Username"),
    ("email", "Email"),
    ("firstName", "First name"),
    ("lastName", "Last name"),
    ("phone", "Phone"),
    ("locale", "Locale"),
    ("timezone", "Timezone"),
)


def init_command(force: bool = False) -> None:
    """Write a default configuration file."""
    config_path = get_config_path()

    # Guard: refuse to overwrite without force flag
    if config_path.exists() and not force:
        console.print("[red]Initialization failed:[/red]", style="bold")
        console.print(f"  Config already exists: {config_path}")
        console.print("\n[yellow]Use 'exptrack init --force' to overwrite[/yellow]")
        sys.exit(1)

    try:
        console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
        create_default_config(config_path)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Config file created (permissions: 600)")
    console.print("[dim]Edit api.base_url to point at your expense server, then run 'exptrack login'[/dim]")


def login_command(email: str | None = None) -> None:
    """Log in and save the session."""
    ctx = build_context()

    if email is None:
        email = typer.prompt("Email")
    password = typer.prompt("Password", hide_input=True)

    try:
        user = ctx.auth.login(email, password)
    except AuthenticationError as e:
        console.print(f"[red]Login failed: {e}[/red]", style="bold")
        sys.exit(1)
    except ServiceError as e:
        console.print(f"[red]API error: {e}[/red]", style="bold")
        sys.exit(1)

    try:
        save_session(ctx.session, ctx.session_path)
    except OSError as e:
        console.print(f"[red]Could not save session: {e}[/red]", style="bold")
        sys.exit(1)

    name = user.get("firstName") or user.get("username") or email
    console.print(f"[green]✓[/green] Logged in as {name}")


def logout_command() -> None:
    """Forget the saved session."""
    ctx = build_context()
    ctx.auth.logout()

    if delete_session(ctx.session_path):
        console.print("[green]✓[/green] Logged out")
    else:
        console.print("[dim]No saved session[/dim]")


def register_command(
    email: str | None = None,
    username: str | None = None,
    first_name: str | None = None,
    last_name: str | None = None,
    accept_terms: bool = False,
) -> None:
    """Create an account, then log in with it."""
    ctx = build_context()

    first_name = first_name or typer.prompt("First name")
    last_name = last_name or typer.prompt("Last name")
    username = username or typer.prompt("Username")
    email = email or typer.prompt("Email")
    password = typer.prompt("Password", hide_input=True)
    confirm_password = typer.prompt("Repeat password", hide_input=True)

    if accept_terms:
        terms_accepted = privacy_accepted = True
    else:
        terms_accepted = typer.confirm("Do you accept the terms of service?", default=False)
        privacy_accepted = typer.confirm("Do you accept the privacy policy?", default=False)

    try:
        registration = build_registration(
            email,
            password,
            confirm_password,
            username,
            first_name,
            last_name,
            terms_accepted=terms_accepted,
            privacy_policy_accepted=privacy_accepted,
        )
    except ValidationError as e:
        console.print("[red]Registration failed:[/red]", style="bold")
        for message in e.errors:
            console.print(f"  {message}")
        sys.exit(1)

    try:
        ctx.auth.register(registration)
        user = ctx.auth.login(registration.email, registration.password)
        save_session(ctx.session, ctx.session_path)
    except ServiceError as e:
        console.print(f"[red]Registration failed: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Could not save session: {e}[/red]", style="bold")
        sys.exit(1)

    name = user.get("firstName") or registration.first_name
    console.print(f"[green]✓[/green] Registered and logged in as {name}")


def profile_command(
    first_name: str | None = None,
    last_name: str | None = None,
    phone: str | None = None,
    locale: str | None = None,
    timezone: str | None = None,
) -> None:
    """Show the logged-in user's profile, or change it when options are given."""
    ctx = build_context()
    require_login(ctx)

    user_id = ctx.session.user.get("id")
    if user_id is None:
        console.print("[red]Saved session has no user id. Run 'exptrack login' again.[/red]", style="bold")
        sys.exit(1)

    changes = profile_changes(
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        locale=locale,
        timezone=timezone,
    )

    try:
        if changes:
            profile = ctx.auth.update_profile(user_id, changes)
            save_session(ctx.session, ctx.session_path)
        else:
            profile = ctx.auth.get_profile(user_id)
    except ServiceError as e:
        console.print(f"[red]API error: {e}[/red]", style="bold")
        sys.exit(1)

    if changes:
        console.print("[green]✓[/green] Profile updated")
    console.print(profile_table(profile))


def profile_table(profile: dict[str, Any]) -> Table:
    """Render a user profile as a two-column table."""
    table = Table(title="Profile", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    for key, label in PROFILE_LABELS:
        value = profile.get(key)
        if value is not None:
            table.add_row(label, str(value))

    return table
