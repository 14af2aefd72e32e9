"""Rich renderers shared by the CLI commands."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from addrgen.models.history import HistoryRecord
from addrgen.models.identity import Address, GeneratedUser
from addrgen.models.mail import TempMailMessage


def identity_table(user: GeneratedUser | None, address: Address | None, *, email: str = "", ip: str = "") -> Table:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="dim")
    table.add_column()
    if ip:
        table.add_row("IP / place", ip)
    if user is not None:
        table.add_row("Name", user.full_name)
        table.add_row("Gender", user.gender)
        table.add_row("Birthday", f"{user.date_of_birth} ({user.age})" if user.age is not None else user.date_of_birth)
        table.add_row("Phone", user.phone)
        table.add_row("Email", email or user.email)
        table.add_row("Username", user.username)
    if address is not None:
        table.add_row("Street", address.street_line)
        table.add_row("City", address.city)
        table.add_row("State", address.state)
        table.add_row("Postcode", address.postcode)
        table.add_row("Country", address.country)
        if address.latitude is not None and address.longitude is not None:
            table.add_row("Coordinates", f"{address.latitude:.5f}, {address.longitude:.5f}")
    return table


def history_table(records: list[HistoryRecord]) -> Table:
    table = Table(title="History")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("When")
    table.add_column("Name")
    table.add_column("IP / place")
    table.add_column("Address")
    for r in records:
        table.add_row(r.id[:8], r.timestamp.strftime("%Y-%m-%d %H:%M"), r.user.full_name, r.ip, r.address.one_line())
    return table


def messages_table(messages: list[TempMailMessage]) -> Table:
    table = Table(title="Inbox")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("From")
    table.add_column("Subject")
    table.add_column("Received")
    for m in messages:
        received = m.created_at.strftime("%Y-%m-%d %H:%M") if m.created_at else ""
        table.add_row(m.id, m.sender.address, m.subject, received)
    return table


def print_message(console: Console, message: TempMailMessage) -> None:
    console.print(f"[bold]{message.subject or '(no subject)'}[/bold]")
    console.print(f"From: {message.sender.name} <{message.sender.address}>")
    console.print()
    console.print(message.text or message.intro)
