"""Serializable snapshot of a generator page session."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from addrgen.models.history import HistoryRecord
from addrgen.models.identity import Address, Coordinates, GeneratedUser
from addrgen.models.mail import TempMailMessage


class InputMode(str, Enum):
    """How the generation target is chosen."""

    IP = "ip"
    ADDRESS = "address"


class SessionState(BaseModel):
    ip: str = ""
    input_mode: InputMode = InputMode.IP
    input_value: str = ""
    user: GeneratedUser | None = None
    email: str = ""
    address: Address | None = None
    coordinates: Coordinates | None = None
    is_loading: bool = False
    error: str = ""
    selected_history: str | None = None
    history: list[HistoryRecord] = Field(default_factory=list)
    messages: list[TempMailMessage] = Field(default_factory=list)
    selected_message: TempMailMessage | None = None
    toast_message: TempMailMessage | None = None
    inbox_open: bool = False
