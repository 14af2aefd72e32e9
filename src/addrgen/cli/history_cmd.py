"""CLI commands for browsing and pruning generated identity history."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from addrgen.cli._render import history_table, identity_table
from addrgen.models.history import HistoryRecord
from addrgen.store import build_history_store

history_app = typer.Typer(help="Browse and prune generated identity history.")
console = Console()


def _resolve(record_id: str) -> HistoryRecord:
    """Find a record by full id or by a unique id prefix (the table shows 8 characters)."""
    store = build_history_store()
    record = store.get(record_id)
    if record is not None:
        return record
    matches = [r for r in store.list_records() if r.id.startswith(record_id)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        console.print(f"[red]No history record matches[/red] {record_id}")
    else:
        console.print(f"[yellow]{len(matches)} records match[/yellow] {record_id}; use a longer prefix.")
    raise typer.Exit(code=1)


@history_app.command("list")
def list_history(
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of records to show."),
    as_json: bool = typer.Option(False, "--json", help="Print records as JSON."),
) -> None:
    """List generated identities, newest first."""
    records = build_history_store().list_records(limit=limit)
    if as_json:
        console.print_json(data=[r.model_dump(mode="json") for r in records])
        return
    if not records:
        console.print("[yellow]History is empty.[/yellow]")
        return
    console.print(history_table(records))


@history_app.command("show")
def show_history(record_id: str = typer.Argument(..., help="Record id or unique prefix.")) -> None:
    """Show one stored identity."""
    record = _resolve(record_id)
    console.print(
        Panel(
            identity_table(record.user, record.address, ip=record.ip),
            title=f"{record.id} · {record.timestamp:%Y-%m-%d %H:%M}",
            border_style="blue",
        )
    )


@history_app.command("delete")
def delete_history(record_id: str = typer.Argument(..., help="Record id or unique prefix.")) -> None:
    """Delete one stored identity."""
    record = _resolve(record_id)
    build_history_store().delete(record.id)
    console.print(f"[green]✓[/green] Deleted {record.id}")


@history_app.command("clear")
def clear_history(yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation.")) -> None:
    """Delete all stored identities."""
    if not yes:
        typer.confirm("Delete all history records?", abort=True)
    removed = build_history_store().delete_all()
    console.print(f"[green]✓[/green] Deleted {removed} record(s)")
