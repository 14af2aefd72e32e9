"""CLI commands for the disposable inbox.

The mailbox created by ``addrgen mail new`` is saved to ``mail.mailbox_file``
so later ``inbox`` / ``read`` / ``watch`` invocations can reuse it.
"""

from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.console import Console

from addrgen.cli._render import messages_table, print_message
from addrgen.exceptions import MailboxError
from addrgen.models.mail import TempMailbox
from addrgen.sources.temp_mail import MailPoller, TempMailClient

mail_app = typer.Typer(help="Create and read a disposable inbox.")
console = Console()


def _mailbox_path() -> Path:
    from addrgen.settings import get_settings

    return Path(get_settings().mail.mailbox_file)


def save_mailbox(mailbox: TempMailbox) -> Path:
    path = _mailbox_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(mailbox.model_dump_json(indent=2), encoding="utf-8")
    return path


def load_mailbox() -> TempMailbox:
    path = _mailbox_path()
    if not path.is_file():
        console.print("[yellow]No mailbox yet.[/yellow] Create one with: addrgen mail new")
        raise typer.Exit(code=1)
    return TempMailbox.model_validate_json(path.read_text(encoding="utf-8"))


@mail_app.command("new")
def new_mailbox() -> None:
    """Create a disposable mailbox and remember it."""
    client = TempMailClient()
    try:
        mailbox = client.create_mailbox()
    except MailboxError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        client.close()
    path = save_mailbox(mailbox)
    console.print(f"[green]✓[/green] {mailbox.address}")
    console.print(f"  Password: {mailbox.password}")
    console.print(f"  Saved to: {path}")


@mail_app.command("inbox")
def show_inbox() -> None:
    """List messages in the saved mailbox."""
    mailbox = load_mailbox()
    client = TempMailClient()
    try:
        messages = client.list_messages(mailbox)
    except MailboxError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        client.close()
    if not messages:
        console.print(f"[dim]No messages for {mailbox.address}[/dim]")
        return
    console.print(messages_table(messages))


@mail_app.command("read")
def read_message(message_id: str = typer.Argument(..., help="Message id from `addrgen mail inbox`.")) -> None:
    """Print one message."""
    mailbox = load_mailbox()
    client = TempMailClient()
    try:
        message = client.get_message(mailbox, message_id)
    except MailboxError as e:
        console.print(f"[red]✗[/red] {e}")
        raise typer.Exit(code=1)
    finally:
        client.close()
    print_message(console, message)


@mail_app.command("watch")
def watch_inbox(
    interval: float = typer.Option(0.0, "--interval", "-i", min=0.0, help="Seconds between polls (default: mail.poll_interval_sec)."),
    count: int = typer.Option(0, "--count", "-c", min=0, help="Stop after this many polls (0 = until interrupted)."),
) -> None:
    """Poll the saved mailbox and print each message as it arrives."""
    from addrgen.settings import get_settings

    mailbox = load_mailbox()
    delay = interval or get_settings().mail.poll_interval_sec
    client = TempMailClient()
    poller = MailPoller(client, mailbox)
    console.print(f"Watching {mailbox.address} (every {delay:g}s, Ctrl+C to stop)")
    polls = 0
    try:
        while True:
            try:
                for message in reversed(poller.poll()):
                    console.print(f"[bold cyan]新邮件[/bold cyan] {message.sender.address}: {message.subject}")
            except MailboxError as e:
                console.print(f"[yellow]Poll failed:[/yellow] {e}")
            polls += 1
            if count and polls >= count:
                break
            time.sleep(delay)
    except KeyboardInterrupt:
        pass
    finally:
        client.close()
