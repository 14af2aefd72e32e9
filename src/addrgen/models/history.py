"""History records of previously generated identities."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from addrgen.models.identity import Address, GeneratedUser

# Separator used in manual ``country|state|city`` selections.
SELECTION_SEPARATOR = "|"


class HistoryRecord(BaseModel):
    """Snapshot of one generated identity/address pair.

    ``ip`` holds the looked-up IP address, or the ``country|state|city``
    selection string when the record was produced in address mode.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    user: GeneratedUser
    address: Address
    ip: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_selection(self) -> bool:
        return SELECTION_SEPARATOR in self.ip
