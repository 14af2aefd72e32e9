"""Unit tests for random user generation and the offline Faker fallback."""

from __future__ import annotations

import pytest

from addrgen.exceptions import UpstreamError
from addrgen.identity.factory import UserFactory
from addrgen.sources.random_user import RandomUserClient, normalize_nationality, parse_random_user


class TestParseRandomUser:
    def test_full_payload(self, upstream):
        user = parse_random_user(upstream.user)
        assert user.full_name == "Jane Doe"
        assert user.gender == "female"
        assert user.date_of_birth == "1990-04-12"
        assert user.age == 36
        assert user.username == "bluecat123"
        assert user.nationality == "US"
        assert user.picture_url.endswith("1.jpg")
        assert user.source == "randomuser"

    def test_sparse_payload(self):
        user = parse_random_user({"name": {"first": "Ana"}}, nationality="BR")
        assert user.full_name == "Ana"
        assert user.nationality == "BR"
        assert user.age is None


class TestNormalizeNationality:
    @pytest.mark.parametrize(("given", "expected"), [("gb", "GB"), (" de ", "DE"), ("XX", "US"), (None, "US"), ("", "US")])
    def test_normalize(self, given, expected):
        assert normalize_nationality(given) == expected


class TestRandomUserClient:
    def test_fetch_sends_lowercase_nat(self, upstream):
        client = RandomUserClient(client=upstream.client(), offline_fallback=False)
        user = client.fetch_user("GB")
        assert user.first_name == "Jane"
        assert ("randomuser.me", "/api/") in upstream.calls

    def test_remote_failure_raises_without_fallback(self, upstream):
        upstream.user_status = 503
        client = RandomUserClient(client=upstream.client(), offline_fallback=False)
        with pytest.raises(UpstreamError):
            client.fetch_user()

    def test_remote_failure_uses_faker_fallback(self, upstream):
        upstream.user_status = 500
        client = RandomUserClient(client=upstream.client(), offline_fallback=True)
        user = client.fetch_user("FR")
        assert user.source == "faker"
        assert user.nationality == "FR"
        assert user.first_name and user.last_name


class TestUserFactory:
    def test_generate_is_complete(self):
        user = UserFactory(nationality="US", seed=1).generate()
        assert user.full_name == f"{user.first_name} {user.last_name}"
        assert user.email.endswith("@example.com")
        assert user.gender in ("male", "female")
        assert 18 <= user.age <= 76

    def test_unknown_nationality_uses_en_us(self):
        factory = UserFactory(nationality="ZZ")
        assert factory.fake.locales == ["en_US"]

    def test_non_latin_locale_keeps_ascii_email(self):
        user = UserFactory(nationality="UA", seed=3).generate()
        local_part = user.email.split("@")[0]
        assert local_part.isascii()
