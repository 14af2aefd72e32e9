"""Disposable inbox models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TempMailbox(BaseModel):
    """Credentials for a disposable mailbox."""

    address: str
    password: str
    account_id: str = ""
    token: str = ""


class MailSender(BaseModel):
    address: str = ""
    name: str = ""


class TempMailMessage(BaseModel):
    """A message received by the disposable mailbox.

    Listings only carry the summary fields; ``text`` and ``html`` are filled
    once the full message is fetched.
    """

    id: str
    sender: MailSender = Field(default_factory=MailSender)
    subject: str = ""
    intro: str = ""
    text: str = ""
    html: list[str] = Field(default_factory=list)
    seen: bool = False
    created_at: datetime | None = None
