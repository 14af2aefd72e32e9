"""Generated user profiles, postal addresses and coordinates."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """A WGS84 point."""

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class GeneratedUser(BaseModel):
    """A synthetic person. Display-only; nothing here refers to a real individual."""

    first_name: str = ""
    last_name: str = ""
    full_name: str = ""
    gender: str = ""
    email: str = ""
    phone: str = ""
    cell: str = ""
    date_of_birth: str = ""
    age: int | None = None
    username: str = ""
    password: str = ""
    nationality: str = "US"
    picture_url: str = ""
    source: str = "randomuser"


class Address(BaseModel):
    """A postal address, optionally pinned to the point it was resolved from."""

    house_number: str = ""
    street: str = ""
    city: str = ""
    state: str = ""
    postcode: str = ""
    country: str = ""
    country_code: str = ""
    display_name: str = ""
    latitude: float | None = None
    longitude: float | None = None

    @property
    def street_line(self) -> str:
        return " ".join(part for part in (self.house_number, self.street) if part)

    @property
    def coordinates(self) -> Coordinates | None:
        """The stored point, or ``None`` unless both components are set."""
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    def one_line(self) -> str:
        parts = [self.street_line, self.city, " ".join(p for p in (self.state, self.postcode) if p), self.country]
        return ", ".join(p for p in parts if p) or self.display_name
