"""Forward and reverse geocoding against a Nominatim-compatible API.

``random_address_near`` is what turns a rough IP location into a believable
street address: pick a random point around the location and ask Nominatim
what sits there.
"""

from __future__ import annotations

import logging
import math
import random
from typing import Any

import httpx

from addrgen.exceptions import AddressLookupError, UpstreamError
from addrgen.models.identity import Address, Coordinates
from addrgen.sources import build_http_client, with_retries

logger = logging.getLogger(__name__)

_EARTH_RADIUS_KM = 6371.0088

# Nominatim ``address`` keys tried in order for the locality
_CITY_KEYS = ("city", "town", "village", "municipality", "county")


class Geocoder:
    """Nominatim client.

    Args:
        client: Optional pre-built ``httpx.Client``.
        rng: Optional ``random.Random`` for reproducible jitter.
    """

    def __init__(self, client: httpx.Client | None = None, rng: random.Random | None = None) -> None:
        from addrgen.settings import get_settings

        settings = get_settings()
        self.base_url = settings.geocode.base_url.rstrip("/")
        self.jitter_km = settings.geocode.jitter_km
        self.max_attempts = max(1, settings.geocode.max_attempts)
        self.zoom = settings.geocode.zoom
        self.language = settings.geocode.language
        self._rng = rng or random.Random()
        self._client = client or build_http_client()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @with_retries()
    def search(self, country: str, state: str = "", city: str = "") -> Coordinates:
        """Return the coordinates of the best match for a ``country/state/city`` selection.

        Raises:
            AddressLookupError: No place matches the selection.
        """
        params: dict[str, Any] = {"format": "json", "limit": 1, "country": country.strip()}
        if state.strip():
            params["state"] = state.strip()
        if city.strip():
            params["city"] = city.strip()

        logger.info("Geocoding selection %s|%s|%s", country, state, city)
        hits = self._get_json("/search", params)
        if not isinstance(hits, list) or not hits:
            raise AddressLookupError(f"no match for {country}|{state}|{city}")
        try:
            return Coordinates(latitude=float(hits[0]["lat"]), longitude=float(hits[0]["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise AddressLookupError(f"malformed search hit: {hits[0]!r}") from e

    @with_retries()
    def reverse(self, coordinates: Coordinates) -> Address:
        """Return the postal address at *coordinates*.

        Raises:
            AddressLookupError: Nothing addressable at that point (sea, desert...).
        """
        params = {
            "format": "json",
            "lat": f"{coordinates.latitude:.6f}",
            "lon": f"{coordinates.longitude:.6f}",
            "zoom": self.zoom,
            "addressdetails": 1,
        }
        data = self._get_json("/reverse", params)
        if not isinstance(data, dict) or "error" in data or not data.get("address"):
            raise AddressLookupError(f"no address at {coordinates.latitude:.5f},{coordinates.longitude:.5f}")
        return parse_nominatim_address(data, fallback=coordinates)

    def random_address_near(self, center: Coordinates) -> Address:
        """Pick a random real address within ``geocode.jitter_km`` of *center*.

        Tries up to ``geocode.max_attempts`` points and prefers a result with
        a street; otherwise returns the last usable address.
        """
        fallback: Address | None = None
        for attempt in range(1, self.max_attempts + 1):
            point = jitter(center, self.jitter_km, self._rng)
            try:
                address = self.reverse(point)
            except AddressLookupError as e:
                logger.debug("Attempt %d: %s", attempt, e)
                continue
            address.latitude, address.longitude = point.latitude, point.longitude
            if address.street:
                return address
            fallback = address

        if fallback is not None:
            return fallback
        # Last resort: the center itself
        address = self.reverse(center)
        address.latitude, address.longitude = center.latitude, center.longitude
        return address

    def _get_json(self, path: str, params: dict[str, Any]) -> Any:
        try:
            resp = self._client.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Accept-Language": self.language},
            )
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamError("nominatim", f"HTTP {e.response.status_code}") from e
        except ValueError as e:
            raise UpstreamError("nominatim", "invalid JSON response") from e


def jitter(center: Coordinates, radius_km: float, rng: random.Random | None = None) -> Coordinates:
    """Return a point uniformly distributed within *radius_km* of *center*."""
    rng = rng or random.Random()
    if radius_km <= 0:
        return center
    # sqrt keeps the density uniform over the disc
    distance = radius_km * math.sqrt(rng.random())
    bearing = rng.uniform(0.0, 2.0 * math.pi)

    lat1 = math.radians(center.latitude)
    lon1 = math.radians(center.longitude)
    delta = distance / _EARTH_RADIUS_KM

    lat2 = math.asin(math.sin(lat1) * math.cos(delta) + math.cos(lat1) * math.sin(delta) * math.cos(bearing))
    lon2 = lon1 + math.atan2(
        math.sin(bearing) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    lon_deg = (math.degrees(lon2) + 540.0) % 360.0 - 180.0
    return Coordinates(latitude=math.degrees(lat2), longitude=lon_deg)


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    lat1, lon1, lat2, lon2 = map(math.radians, (a.latitude, a.longitude, b.latitude, b.longitude))
    h = math.sin((lat2 - lat1) / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin((lon2 - lon1) / 2) ** 2
    return 2 * _EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def parse_nominatim_address(data: dict[str, Any], *, fallback: Coordinates | None = None) -> Address:
    """Convert a Nominatim ``/reverse`` payload to an ``Address``."""
    details = data.get("address") or {}
    city = next((details[k] for k in _CITY_KEYS if details.get(k)), "")

    latitude = _to_float(data.get("lat"))
    longitude = _to_float(data.get("lon"))
    if (latitude is None or longitude is None) and fallback is not None:
        latitude, longitude = fallback.latitude, fallback.longitude

    return Address(
        house_number=details.get("house_number", ""),
        street=details.get("road") or details.get("pedestrian") or details.get("street", ""),
        city=city,
        state=details.get("state") or details.get("province") or details.get("region", ""),
        postcode=details.get("postcode", ""),
        country=details.get("country", ""),
        country_code=(details.get("country_code") or "").upper(),
        display_name=data.get("display_name", ""),
        latitude=latitude,
        longitude=longitude,
    )


def _to_float(value: Any) -> float | None:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
