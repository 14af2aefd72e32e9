"""addrgen exception hierarchy."""

from __future__ import annotations

ADDRESS_LOOKUP_FAILED = "获取地址失败"
SELECTION_REQUIRED = "请选择地址"


class AddrGenError(Exception):
    """Base exception for all addrgen errors."""


class UpstreamError(AddrGenError):
    """Raised when a third-party API call fails or returns an unusable payload.

    Attributes:
        service: Short name of the upstream service (``ipinfo``, ``nominatim``...).
        detail: Human-readable failure description.
    """

    def __init__(self, service: str, detail: str) -> None:
        self.service = service
        self.detail = detail
        super().__init__(f"{service}: {detail}")


class AddressLookupError(AddrGenError):
    """Raised when coordinates or a postal address cannot be resolved."""

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        self.user_message = ADDRESS_LOOKUP_FAILED
        super().__init__(detail or ADDRESS_LOOKUP_FAILED)


class SelectionRequiredError(AddrGenError):
    """Raised when address mode is used without a ``country|state|city`` selection."""

    def __init__(self) -> None:
        self.user_message = SELECTION_REQUIRED
        super().__init__(SELECTION_REQUIRED)


class MailboxError(AddrGenError):
    """Raised when the disposable inbox cannot be created or read."""


class HistoryRecordNotFoundError(AddrGenError):
    """Raised when a history record id does not exist."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"History record {record_id!r} not found")
