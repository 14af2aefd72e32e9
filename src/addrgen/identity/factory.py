"""Offline synthetic user factory.

Generates region-appropriate fake people with Faker when the random-user
API is unreachable. The output has the same shape as the remote generator so
the page never has to care where a user came from.
"""

from __future__ import annotations

import logging
import random as _rng
from datetime import date

from faker import Faker

from addrgen.models.identity import GeneratedUser

logger = logging.getLogger(__name__)

# randomuser.me nationality code -> Faker locale
NATIONALITY_LOCALES: dict[str, str] = {
    "AU": "en_AU",
    "BR": "pt_BR",
    "CA": "en_CA",
    "CH": "de_CH",
    "DE": "de_DE",
    "DK": "da_DK",
    "ES": "es_ES",
    "FI": "fi_FI",
    "FR": "fr_FR",
    "GB": "en_GB",
    "IE": "en_IE",
    "IN": "en_IN",
    "IR": "fa_IR",
    "MX": "es_MX",
    "NL": "nl_NL",
    "NO": "no_NO",
    "NZ": "en_NZ",
    "RS": "sr_RS",
    "TR": "tr_TR",
    "UA": "uk_UA",
    "US": "en_US",
}


class UserFactory:
    """Factory for synthetic users.

    Args:
        nationality: Two-letter nationality code; unknown codes use ``en_US``.
        email_domain: Domain used for generated email addresses.
        seed: Optional seed for reproducible output.
    """

    def __init__(self, nationality: str = "US", email_domain: str = "example.com", seed: int | None = None) -> None:
        self.nationality = nationality.upper()
        locale = NATIONALITY_LOCALES.get(self.nationality, "en_US")
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
        self.email_domain = email_domain

    def generate(self) -> GeneratedUser:
        gender = _rng.choice(["male", "female"])
        if gender == "male":
            first = self.fake.first_name_male()
        else:
            first = self.fake.first_name_female()
        last = self.fake.last_name()
        # Email local parts must stay ASCII even for non-Latin locales
        ascii_first = first.encode("ascii", "ignore").decode().lower() or "user"
        ascii_last = last.encode("ascii", "ignore").decode().lower() or "anon"
        username = f"{ascii_first}{ascii_last}{self.fake.random_int(min=10, max=999)}"
        dob = self.fake.date_of_birth(minimum_age=18, maximum_age=75)

        return GeneratedUser(
            first_name=first,
            last_name=last,
            full_name=f"{first} {last}",
            gender=gender,
            email=f"{ascii_first}.{ascii_last}@{self.email_domain}",
            phone=self.fake.phone_number(),
            cell=self.fake.phone_number(),
            date_of_birth=dob.isoformat(),
            age=_age(dob),
            username=username,
            password=self.fake.password(length=12, special_chars=False),
            nationality=self.nationality,
            source="faker",
        )


def _age(dob: date, today: date | None = None) -> int:
    today = today or date.today()
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))
