"""Public IP detection (ipify) and IP geolocation (ipinfo.io)."""

from __future__ import annotations

import ipaddress
import logging

import httpx

from addrgen.exceptions import AddressLookupError, UpstreamError
from addrgen.models.identity import Coordinates
from addrgen.sources import build_http_client, with_retries

logger = logging.getLogger(__name__)


class IPLookup:
    """Resolve the caller's public IP and map IPs to approximate coordinates.

    Args:
        client: Optional pre-built ``httpx.Client`` (absolute URLs are used,
            so no base URL is required).
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        from addrgen.settings import get_settings

        settings = get_settings()
        self.detect_url = settings.ip.detect_url.rstrip("/")
        self.geo_url = settings.ip.geo_url.rstrip("/")
        self.token = settings.ip.ipinfo_token
        self._client = client or build_http_client()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @with_retries()
    def current_ip(self) -> str:
        """Return the public IP address this process is seen from."""
        try:
            resp = self._client.get(self.detect_url, params={"format": "json"})
            resp.raise_for_status()
            ip = resp.json().get("ip", "")
        except httpx.HTTPStatusError as e:
            raise UpstreamError("ipify", f"HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise UpstreamError("ipify", "invalid JSON response") from e

        if not ip:
            raise UpstreamError("ipify", "response carried no IP")
        logger.info("Detected public IP %s", ip)
        return ip

    @with_retries()
    def coordinates_for_ip(self, ip: str) -> Coordinates:
        """Look up the approximate location of *ip*.

        Raises:
            AddressLookupError: *ip* is not a valid address, or ipinfo.io has
                no usable ``loc`` for it (bogon / private ranges).
        """
        try:
            ipaddress.ip_address(ip.strip())
        except ValueError as e:
            raise AddressLookupError(f"not an IP address: {ip!r}") from e

        logger.info("GeoIP lookup for %s", ip)
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            resp = self._client.get(f"{self.geo_url}/{ip.strip()}/json", headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError("ipinfo", f"HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise UpstreamError("ipinfo", "invalid JSON response") from e

        return parse_loc(data.get("loc", ""), ip=ip)


def parse_loc(loc: str, *, ip: str = "") -> Coordinates:
    """Parse ipinfo's ``"lat,lon"`` string into ``Coordinates``."""
    try:
        lat_s, lon_s = loc.split(",")
        return Coordinates(latitude=float(lat_s), longitude=float(lon_s))
    except ValueError as e:
        raise AddressLookupError(f"no location for {ip or 'IP'}: {loc!r}") from e
