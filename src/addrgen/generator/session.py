"""Generator page session.

Holds the state of one generator page (detected IP, input mode, current
identity and address, history selection, disposable inbox) and runs the
short chain of lookups behind each user action. Every action catches its own
failures and turns them into the single user-facing error string.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

import httpx

from addrgen.exceptions import (
    ADDRESS_LOOKUP_FAILED,
    AddrGenError,
    HistoryRecordNotFoundError,
    MailboxError,
    SelectionRequiredError,
)
from addrgen.models.history import SELECTION_SEPARATOR, HistoryRecord
from addrgen.models.identity import Address, Coordinates, GeneratedUser
from addrgen.models.mail import TempMailbox, TempMailMessage
from addrgen.models.state import InputMode, SessionState
from addrgen.sources.geocoding import Geocoder
from addrgen.sources.ip_lookup import IPLookup
from addrgen.sources.random_user import DEFAULT_NATIONALITY, RandomUserClient
from addrgen.sources.temp_mail import MailPoller, TempMailClient
from addrgen.store.history_store import HistoryStore

logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = (AddrGenError, httpx.TransportError)


def parse_selection(value: str) -> tuple[str, str, str]:
    """Split a ``country|state|city`` selection; missing parts become ``""``."""
    parts = [p.strip() for p in value.split(SELECTION_SEPARATOR)]
    parts += [""] * (3 - len(parts))
    country, state, city = parts[:3]
    return country, state, city


class GeneratorSession:
    """State and actions of one generator page.

    Args:
        ip_lookup: Public IP / GeoIP source.
        users: Random user source.
        geocoder: Forward / reverse geocoder.
        history_store: Persistence for generated identities.
        mail_client: Disposable inbox client, or ``None`` to run without mail.
        nationality: Nationality passed to the user source.
    """

    def __init__(
        self,
        *,
        ip_lookup: IPLookup,
        users: RandomUserClient,
        geocoder: Geocoder,
        history_store: HistoryStore,
        mail_client: TempMailClient | None = None,
        nationality: str = DEFAULT_NATIONALITY,
    ) -> None:
        self.ip_lookup = ip_lookup
        self.users = users
        self.geocoder = geocoder
        self.history_store = history_store
        self.mail_client = mail_client
        self.nationality = nationality

        self.ip = ""
        self.input_mode = InputMode.IP
        self.input_value = ""
        self.user: GeneratedUser | None = None
        self.address: Address | None = None
        self.coordinates: Coordinates | None = None

        self.loading = False
        self.email_loading = False
        self.address_loading = False
        self.error = ""
        self.address_error = ""

        self.selected_history: str | None = None
        self._should_add_to_history = False
        self._history_ip = ""

        self.mailbox: TempMailbox | None = None
        self._poller: MailPoller | None = None
        self.selected_message: TempMailMessage | None = None
        self.toast_message: TempMailMessage | None = None
        self.inbox_open = False

        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.loading or self.email_loading or self.address_loading

    @property
    def display_error(self) -> str:
        return self.error or self.address_error

    @property
    def email(self) -> str:
        """The identity email shown on the page: the disposable address when there is one."""
        if self.mailbox is not None:
            return self.mailbox.address
        return self.user.email if self.user else ""

    @property
    def messages(self) -> list[TempMailMessage]:
        return self._poller.messages if self._poller else []

    # ------------------------------------------------------------------
    # Page lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Detect the visitor IP, load a first identity and inbox, then place it at an address."""
        with self._lock:
            self._should_add_to_history = False
            try:
                self._fetch_user()
            except _LOOKUP_ERRORS as e:
                logger.error("Initial user generation failed: %s", e)
            self._open_mailbox()

            with self._flag("loading"):
                try:
                    self.ip = self.ip_lookup.current_ip()
                    self.coordinates = self.ip_lookup.coordinates_for_ip(self.ip)
                    self._resolve_address()
                    self._mark_for_history(self.ip)
                except _LOOKUP_ERRORS as e:
                    self.error = ADDRESS_LOOKUP_FAILED
                    logger.error("Initialisation failed: %s", e)
                self._maybe_add_to_history()

    def set_input_mode(self, mode: InputMode | str) -> None:
        """Switch between IP and address input; the input field is cleared."""
        self.input_mode = InputMode(mode)
        self.input_value = ""

    def set_input(self, value: str) -> None:
        self.input_value = value.strip()

    def generate(self) -> None:
        """Generate a new identity for the current input."""
        with self._lock, self._flag("loading"):
            self._should_add_to_history = False
            self.error = ""
            self.address_error = ""
            try:
                if self.input_mode == InputMode.ADDRESS:
                    self._generate_from_selection()
                else:
                    self._generate_from_ip()
            except SelectionRequiredError as e:
                self.error = e.user_message
            self._maybe_add_to_history()

    def _generate_from_selection(self) -> None:
        if not self.input_value:
            raise SelectionRequiredError()
        country, state, city = parse_selection(self.input_value)
        try:
            self.coordinates = self.geocoder.search(country, state, city)
            self._fetch_user()
            self._resolve_address()
            self._mark_for_history(self.input_value)
        except _LOOKUP_ERRORS as e:
            self.error = ADDRESS_LOOKUP_FAILED
            logger.error("Generation for %s failed: %s", self.input_value, e)

    def _generate_from_ip(self) -> None:
        target = self.input_value or self.ip
        if not target:
            self.error = ADDRESS_LOOKUP_FAILED
            logger.error("No IP to generate from; initialise first or type one")
            return
        try:
            with self._flag("address_loading"):
                self.coordinates = self.ip_lookup.coordinates_for_ip(target)
                self._resolve_address()
        except _LOOKUP_ERRORS as e:
            self.address_error = ADDRESS_LOOKUP_FAILED
            logger.error("Address lookup for %s failed: %s", target, e)
            return
        try:
            self._fetch_user()
        except _LOOKUP_ERRORS as e:
            self.error = ADDRESS_LOOKUP_FAILED
            logger.error("User generation failed: %s", e)
            return
        self._mark_for_history(target)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def history(self) -> list[HistoryRecord]:
        return self.history_store.list_records()

    def select_history(self, record_id: str) -> HistoryRecord:
        """Restore a stored identity onto the page.

        Raises:
            HistoryRecordNotFoundError: *record_id* is unknown.
        """
        with self._lock:
            record = self.history_store.require(record_id)
            self.selected_history = record.id
            self.user = record.user
            self.address = record.address
            if not record.is_selection:
                self.ip = record.ip
                # None makes the next IP generation look the point up again
                self.coordinates = record.address.coordinates
            return record

    def delete_history(self, record_id: str) -> None:
        with self._lock:
            if not self.history_store.delete(record_id):
                raise HistoryRecordNotFoundError(record_id)
            if self.selected_history == record_id:
                self.selected_history = None

    def clear_history(self) -> int:
        with self._lock:
            self.selected_history = None
            return self.history_store.delete_all()

    def _mark_for_history(self, ip: str) -> None:
        self._should_add_to_history = True
        self._history_ip = ip

    def _maybe_add_to_history(self) -> None:
        # a mark only ever applies to the action that set it
        if not self._should_add_to_history:
            return
        self._should_add_to_history = False
        if self.coordinates and self.user and self.address and self._history_ip:
            record = self.history_store.add(user=self.user, address=self.address, ip=self._history_ip)
            self.selected_history = record.id

    # ------------------------------------------------------------------
    # Disposable inbox
    # ------------------------------------------------------------------

    def refresh_mail(self) -> list[TempMailMessage]:
        """Poll the inbox. The newest new message, if any, becomes the toast."""
        with self._lock:
            if self._poller is None:
                return []
            with self._flag("email_loading"):
                try:
                    fresh = self._poller.poll()
                except (MailboxError, httpx.TransportError) as e:
                    logger.warning("Inbox poll failed: %s", e)
                    return []
            if fresh:
                self.toast_message = fresh[0]
            return fresh

    def open_message(self, message_id: str) -> TempMailMessage:
        """Fetch the full message and show it in the open inbox."""
        with self._lock:
            if self.mail_client is None or self.mailbox is None:
                raise MailboxError("no mailbox is open")
            try:
                message = self.mail_client.get_message(self.mailbox, message_id)
            except httpx.TransportError as e:
                raise MailboxError(f"could not fetch message {message_id}: {e}") from e
            self.selected_message = message
            self.inbox_open = True
            if self.toast_message and self.toast_message.id == message_id:
                self.toast_message = None
            return message

    def open_toast(self) -> TempMailMessage | None:
        with self._lock:
            if self.toast_message is None:
                return None
            return self.open_message(self.toast_message.id)

    def dismiss_toast(self) -> None:
        with self._lock:
            self.toast_message = None

    def _open_mailbox(self) -> None:
        if self.mail_client is None or self.mailbox is not None:
            return
        with self._flag("email_loading"):
            try:
                self.mailbox = self.mail_client.create_mailbox()
                self._poller = MailPoller(self.mail_client, self.mailbox)
            except (MailboxError, httpx.TransportError) as e:
                logger.warning("Disposable inbox unavailable: %s", e)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fetch_user(self) -> None:
        self.user = self.users.fetch_user(self.nationality)

    def _resolve_address(self) -> None:
        if self.coordinates is None:
            return
        self.address = self.geocoder.random_address_near(self.coordinates)

    @contextmanager
    def _flag(self, name: str) -> Iterator[None]:
        setattr(self, name, True)
        try:
            yield
        finally:
            setattr(self, name, False)

    def snapshot(self, *, include_history: bool = True) -> SessionState:
        """Return a serializable view of the page."""
        return SessionState(
            ip=self.ip,
            input_mode=self.input_mode,
            input_value=self.input_value,
            user=self.user,
            email=self.email,
            address=self.address,
            coordinates=self.coordinates,
            is_loading=self.is_loading,
            error=self.display_error,
            selected_history=self.selected_history,
            history=self.history() if include_history else [],
            messages=self.messages,
            selected_message=self.selected_message,
            toast_message=self.toast_message,
            inbox_open=self.inbox_open,
        )

    def close(self) -> None:
        for source in (self.ip_lookup, self.users, self.geocoder, self.mail_client):
            if source is not None:
                source.close()


def build_session(*, nationality: str | None = None, with_mail: bool | None = None) -> GeneratorSession:
    """Factory: wire a ``GeneratorSession`` from settings."""
    from addrgen.settings import get_settings
    from addrgen.store import build_history_store

    settings = get_settings()
    use_mail = settings.mail.enabled if with_mail is None else with_mail
    return GeneratorSession(
        ip_lookup=IPLookup(),
        users=RandomUserClient(),
        geocoder=Geocoder(),
        history_store=build_history_store(),
        mail_client=TempMailClient() if use_mail else None,
        nationality=nationality or settings.user.default_nationality,
    )
