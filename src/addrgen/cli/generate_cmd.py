"""CLI command for generating an identity."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from addrgen.cli._render import identity_table
from addrgen.generator.session import build_session
from addrgen.models.state import InputMode

console = Console()


def generate(
    ip: Optional[str] = typer.Option(None, "--ip", help="Generate near this IP instead of your own."),
    address: Optional[str] = typer.Option(
        None, "--address", "-a", help='Generate near a place, written "country|state|city".'
    ),
    nationality: Optional[str] = typer.Option(None, "--nat", help="Nationality of the generated person (e.g. US, GB)."),
    mail: bool = typer.Option(False, "--mail/--no-mail", help="Open a disposable inbox and use it as the email."),
    as_json: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    """Generate a synthetic identity at a real address and add it to history.

    Without --ip or --address, your own public IP is detected and used.
    """
    if ip and address:
        console.print("[red]Use either --ip or --address, not both.[/red]")
        raise typer.Exit(code=2)

    session = build_session(nationality=nationality, with_mail=mail)
    try:
        if address is not None:
            session.set_input_mode(InputMode.ADDRESS)
            session.set_input(address)
            session.generate()
        elif ip:
            session.set_input(ip)
            session.generate()
        else:
            session.initialize()

        state = session.snapshot(include_history=False)
    finally:
        session.close()

    if state.error:
        console.print(f"[red]✗[/red] {state.error}")
        raise typer.Exit(code=1)

    if as_json:
        console.print_json(state.model_dump_json(include={"ip", "input_value", "user", "email", "address", "selected_history"}))
        return

    origin = address or ip or state.ip
    console.print(
        Panel(
            identity_table(state.user, state.address, email=state.email, ip=origin),
            title="真实地址生成器",
            border_style="blue",
        )
    )
    if state.selected_history:
        console.print(f"[dim]Saved to history as {state.selected_history}[/dim]")
