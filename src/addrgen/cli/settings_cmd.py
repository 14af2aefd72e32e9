"""CLI commands for inspecting and validating addrgen settings."""

from __future__ import annotations

import json

import typer
from rich.console import Console

settings_app = typer.Typer(help="Inspect and validate addrgen configuration.")
console = Console()


@settings_app.command("show")
def show_settings() -> None:
    """Display the currently resolved settings."""
    from addrgen.settings import get_settings

    settings = get_settings()
    console.print_json(json.dumps(settings.model_dump(mode="json"), indent=2, default=str))


@settings_app.command("validate")
def validate_settings() -> None:
    """Validate settings and report any issues."""
    from addrgen.settings import get_settings

    try:
        settings = get_settings()
        console.print("[green]✓[/green] Settings are valid.")
        console.print(f"  Environment: {settings.env}")
        console.print(f"  History DB: {settings.history.sqlite_path}")
        console.print(f"  Geocoder: {settings.geocode.base_url}")
        console.print(f"  Mail: {settings.mail.base_url if settings.mail.enabled else 'disabled'}")
    except Exception as e:
        console.print(f"[red]✗[/red] Settings validation failed: {e}")
        raise typer.Exit(code=1)
