"""Random user generation via the randomuser.me API.

Falls back to the local Faker-backed ``UserFactory`` when the API is down and
``user.offline_fallback`` is enabled.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from addrgen.exceptions import UpstreamError
from addrgen.identity.factory import NATIONALITY_LOCALES, UserFactory
from addrgen.models.identity import GeneratedUser
from addrgen.sources import build_http_client, with_retries

logger = logging.getLogger(__name__)

DEFAULT_NATIONALITY = "US"


class RandomUserClient:
    """Fetch synthetic users for a given nationality.

    Args:
        client: Optional pre-built ``httpx.Client``.
        offline_fallback: Override ``user.offline_fallback`` from settings.
    """

    def __init__(self, client: httpx.Client | None = None, offline_fallback: bool | None = None) -> None:
        from addrgen.settings import get_settings

        settings = get_settings()
        self.api_url = settings.user.api_url
        self.offline_fallback = settings.user.offline_fallback if offline_fallback is None else offline_fallback
        self._client = client or build_http_client()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    def fetch_user(self, nationality: str = DEFAULT_NATIONALITY) -> GeneratedUser:
        """Return one synthetic user.

        Args:
            nationality: Two-letter code. Unsupported codes fall back to ``US``.
        """
        nat = normalize_nationality(nationality)
        try:
            return self._fetch_remote(nat)
        except (UpstreamError, httpx.TransportError) as e:
            if not self.offline_fallback:
                raise
            logger.warning("randomuser.me unavailable (%s); generating %s user locally", e, nat)
            return UserFactory(nationality=nat).generate()

    @with_retries()
    def _fetch_remote(self, nat: str) -> GeneratedUser:
        try:
            resp = self._client.get(self.api_url, params={"nat": nat.lower()})
            resp.raise_for_status()
            results = resp.json().get("results") or []
        except httpx.HTTPStatusError as e:
            raise UpstreamError("randomuser", f"HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise UpstreamError("randomuser", "invalid JSON response") from e

        if not results:
            raise UpstreamError("randomuser", "empty results")
        return parse_random_user(results[0], nationality=nat)


def normalize_nationality(nationality: str | None) -> str:
    nat = (nationality or DEFAULT_NATIONALITY).strip().upper()
    return nat if nat in NATIONALITY_LOCALES else DEFAULT_NATIONALITY


def parse_random_user(data: dict[str, Any], *, nationality: str = DEFAULT_NATIONALITY) -> GeneratedUser:
    """Convert one randomuser.me ``results`` entry to a ``GeneratedUser``."""
    name = data.get("name") or {}
    dob = data.get("dob") or {}
    login = data.get("login") or {}
    first = name.get("first", "")
    last = name.get("last", "")

    return GeneratedUser(
        first_name=first,
        last_name=last,
        full_name=f"{first} {last}".strip(),
        gender=data.get("gender", ""),
        email=data.get("email", ""),
        phone=data.get("phone", ""),
        cell=data.get("cell", ""),
        date_of_birth=(dob.get("date") or "")[:10],
        age=dob.get("age"),
        username=login.get("username", ""),
        password=login.get("password", ""),
        nationality=(data.get("nat") or nationality).upper(),
        picture_url=(data.get("picture") or {}).get("large", ""),
        source="randomuser",
    )
