"""addrgen test configuration: shared fixtures for unit and integration tests."""

from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any

import httpx
import pytest

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point persistent files at a temp dir and clear the settings cache between tests."""
    from addrgen.settings.config import get_settings

    monkeypatch.setenv("ADDRGEN_HISTORY__SQLITE_PATH", str(tmp_path / "history.db"))
    monkeypatch.setenv("ADDRGEN_MAIL__MAILBOX_FILE", str(tmp_path / "mailbox.json"))
    monkeypatch.delenv("ADDRGEN_ENV", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ---------------------------------------------------------------------------
# Stores
# ---------------------------------------------------------------------------


@pytest.fixture()
def history_store(tmp_path: Path):
    """Create a disposable ``HistoryStore`` backed by a temporary SQLite DB."""
    from addrgen.store.history_store import HistoryStore

    return HistoryStore(db_path=tmp_path / "test_history.db")


# ---------------------------------------------------------------------------
# Fake upstream APIs
# ---------------------------------------------------------------------------

RANDOM_USER = {
    "gender": "female",
    "name": {"title": "Ms", "first": "Jane", "last": "Doe"},
    "email": "jane.doe@example.com",
    "login": {"username": "bluecat123", "password": "hunter22"},
    "dob": {"date": "1990-04-12T08:30:00.000Z", "age": 36},
    "phone": "(555) 010-2030",
    "cell": "(555) 010-4050",
    "picture": {"large": "https://randomuser.me/api/portraits/women/1.jpg"},
    "nat": "US",
}

REVERSE_HIT = {
    "lat": "37.4220",
    "lon": "-122.0841",
    "display_name": "1600, Amphitheatre Parkway, Mountain View, California, 94043, United States",
    "address": {
        "house_number": "1600",
        "road": "Amphitheatre Parkway",
        "town": "Mountain View",
        "state": "California",
        "postcode": "94043",
        "country": "United States",
        "country_code": "us",
    },
}


class FakeUpstream:
    """In-process stand-in for ipify, ipinfo, randomuser, Nominatim and mail.tm."""

    def __init__(self) -> None:
        self.public_ip = "8.8.8.8"
        self.locations: dict[str, str] = {"8.8.8.8": "37.4056,-122.0775", "1.1.1.1": "-33.8688,151.2093"}
        self.user: dict[str, Any] = dict(RANDOM_USER)
        self.user_status = 200
        self.search_hits: dict[str, list[dict[str, str]]] = {"United States": [{"lat": "40.7127", "lon": "-74.0060"}]}
        self.reverse_hit: dict[str, Any] = dict(REVERSE_HIT)
        self.reverse_status = 200
        self.mail_status = 200
        self.messages: list[dict[str, Any]] = []
        self.calls: list[tuple[str, str]] = []

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))

    def add_message(self, message_id: str, subject: str, created_at: str = "2026-10-17T10:00:00+00:00") -> None:
        self.messages.append(
            {
                "id": message_id,
                "from": {"address": "noreply@shop.test", "name": "Shop"},
                "subject": subject,
                "intro": f"{subject} intro",
                "seen": False,
                "createdAt": created_at,
            }
        )

    def handle(self, request: httpx.Request) -> httpx.Response:
        host, path = request.url.host, request.url.path
        self.calls.append((host, path))

        if host == "api.ipify.org":
            return httpx.Response(200, json={"ip": self.public_ip})

        if host == "ipinfo.io":
            ip = path.strip("/").split("/")[0]
            loc = self.locations.get(ip)
            return httpx.Response(200, json={"ip": ip, "bogon": True} if loc is None else {"ip": ip, "loc": loc})

        if host == "randomuser.me":
            if self.user_status != 200:
                return httpx.Response(self.user_status, text="down")
            return httpx.Response(200, json={"results": [self.user], "info": {"results": 1}})

        if host == "nominatim.openstreetmap.org":
            if path == "/search":
                country = request.url.params.get("country", "")
                return httpx.Response(200, json=self.search_hits.get(country, []))
            if path == "/reverse":
                if self.reverse_status != 200:
                    return httpx.Response(self.reverse_status, text="busy")
                return httpx.Response(200, json=self.reverse_hit)

        if host == "api.mail.tm":
            if self.mail_status != 200:
                return httpx.Response(self.mail_status, json={"detail": "unavailable"})
            if path == "/domains":
                return httpx.Response(200, json={"hydra:member": [{"domain": "mail.test", "isActive": True}]})
            if path == "/accounts" and request.method == "POST":
                body = json.loads(request.content)
                return httpx.Response(201, json={"id": "acc-1", "address": body["address"]})
            if path == "/token":
                return httpx.Response(200, json={"id": "acc-1", "token": "tok-123"})
            if path == "/messages":
                return httpx.Response(200, json={"hydra:member": self.messages})
            if path.startswith("/messages/"):
                message_id = path.rsplit("/", 1)[1]
                for m in self.messages:
                    if m["id"] == message_id:
                        return httpx.Response(
                            200, json={**m, "text": f"Body of {m['subject']}", "html": ["<p>hi</p>"]}
                        )
                return httpx.Response(404, json={"detail": "Not Found"})

        return httpx.Response(404, json={"detail": f"unexpected {request.method} {request.url}"})


@pytest.fixture()
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture()
def make_session(upstream: FakeUpstream, history_store):
    """Factory for a ``GeneratorSession`` wired to the fake upstream APIs."""
    from addrgen.generator.session import GeneratorSession
    from addrgen.sources.geocoding import Geocoder
    from addrgen.sources.ip_lookup import IPLookup
    from addrgen.sources.random_user import RandomUserClient
    from addrgen.sources.temp_mail import TempMailClient

    def _make(*, with_mail: bool = True, offline_fallback: bool = False):
        return GeneratorSession(
            ip_lookup=IPLookup(client=upstream.client()),
            users=RandomUserClient(client=upstream.client(), offline_fallback=offline_fallback),
            geocoder=Geocoder(client=upstream.client(), rng=random.Random(7)),
            history_store=history_store,
            mail_client=TempMailClient(client=upstream.client()) if with_mail else None,
        )

    return _make


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests that exercise the HTTP surface end to end")
