"""Disposable inbox client for the mail.tm REST API.

Usage::

    client = TempMailClient()
    mailbox = client.create_mailbox()
    poller = MailPoller(client, mailbox)
    new_messages = poller.poll()   # call on a timer
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import Any

import httpx

from addrgen.exceptions import MailboxError
from addrgen.models.mail import MailSender, TempMailbox, TempMailMessage
from addrgen.sources import build_http_client, with_retries

logger = logging.getLogger(__name__)

_LOCAL_PART_ALPHABET = string.ascii_lowercase + string.digits


class TempMailClient:
    """Thin wrapper over the mail.tm account, token and message endpoints.

    Args:
        client: Optional pre-built ``httpx.Client``; its base URL is ignored
            in favour of ``mail.base_url``.
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        from addrgen.settings import get_settings

        settings = get_settings()
        self.base_url = settings.mail.base_url.rstrip("/")
        self._client = client or build_http_client()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_mailbox(self, local_part: str | None = None) -> TempMailbox:
        """Register a fresh mailbox on the first active domain and log in."""
        domain = self._first_domain()
        address = f"{local_part or _random_local_part()}@{domain}"
        password = secrets.token_urlsafe(12)

        account = self._request("POST", "/accounts", json={"address": address, "password": password})
        mailbox = TempMailbox(address=address, password=password, account_id=account.get("id", ""))
        mailbox.token = self._token(mailbox)
        logger.info("Created disposable mailbox %s", address)
        return mailbox

    def _first_domain(self) -> str:
        data = self._request("GET", "/domains")
        domains = _members(data)
        for entry in domains:
            if entry.get("isActive", True) and entry.get("domain"):
                return entry["domain"]
        raise MailboxError("mail service offered no active domain")

    def _token(self, mailbox: TempMailbox) -> str:
        data = self._request("POST", "/token", json={"address": mailbox.address, "password": mailbox.password})
        token = data.get("token", "")
        if not token:
            raise MailboxError("mail service returned no token")
        return token

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    @with_retries()
    def list_messages(self, mailbox: TempMailbox) -> list[TempMailMessage]:
        """Return message summaries, newest first."""
        data = self._request("GET", "/messages", mailbox=mailbox)
        messages = [parse_message(m) for m in _members(data)]
        messages.sort(key=lambda m: m.created_at.timestamp() if m.created_at else 0.0, reverse=True)
        return messages

    @with_retries()
    def get_message(self, mailbox: TempMailbox, message_id: str) -> TempMailMessage:
        """Return the full message including text and HTML bodies."""
        return parse_message(self._request("GET", f"/messages/{message_id}", mailbox=mailbox))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        mailbox: TempMailbox | None = None,
    ) -> Any:
        headers = {}
        if mailbox is not None and mailbox.token:
            headers["Authorization"] = f"Bearer {mailbox.token}"
        try:
            resp = self._client.request(method, f"{self.base_url}{path}", json=json, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise MailboxError(f"{method} {path} failed: HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise MailboxError(f"{method} {path} returned invalid JSON") from e


class MailPoller:
    """Short-polling helper that reports each message once.

    Args:
        client: The ``TempMailClient`` to poll with.
        mailbox: The mailbox to watch.
    """

    def __init__(self, client: TempMailClient, mailbox: TempMailbox) -> None:
        self.client = client
        self.mailbox = mailbox
        self.messages: list[TempMailMessage] = []
        self._seen_ids: set[str] = set()

    def poll(self) -> list[TempMailMessage]:
        """Refresh the inbox and return messages not returned by earlier polls, newest first."""
        self.messages = self.client.list_messages(self.mailbox)
        fresh = [m for m in self.messages if m.id not in self._seen_ids]
        self._seen_ids.update(m.id for m in fresh)
        if fresh:
            logger.info("%d new message(s) for %s", len(fresh), self.mailbox.address)
        return fresh


def parse_message(data: dict[str, Any]) -> TempMailMessage:
    """Convert a mail.tm message payload (summary or full) to ``TempMailMessage``."""
    sender = data.get("from") or {}
    html = data.get("html") or []
    if isinstance(html, str):
        html = [html]
    return TempMailMessage(
        id=str(data.get("id", "")),
        sender=MailSender(address=sender.get("address", ""), name=sender.get("name", "")),
        subject=data.get("subject", "") or "",
        intro=data.get("intro", "") or "",
        text=data.get("text", "") or "",
        html=html,
        seen=bool(data.get("seen", False)),
        created_at=data.get("createdAt"),
    )


def _members(data: Any) -> list[dict[str, Any]]:
    """Unwrap a Hydra collection (``hydra:member``) or a bare JSON list."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict):
        return data.get("hydra:member") or data.get("member") or []
    return []


def _random_local_part(length: int = 10) -> str:
    return "".join(secrets.choice(_LOCAL_PART_ALPHABET) for _ in range(length))
