"""Domain models for generated identities, history and the disposable inbox."""

from __future__ import annotations

from addrgen.models.identity import Address, Coordinates, GeneratedUser
from addrgen.models.history import HistoryRecord
from addrgen.models.mail import MailSender, TempMailbox, TempMailMessage
from addrgen.models.state import InputMode, SessionState

__all__ = [
    "Address",
    "Coordinates",
    "GeneratedUser",
    "HistoryRecord",
    "InputMode",
    "MailSender",
    "SessionState",
    "TempMailMessage",
    "TempMailbox",
]
