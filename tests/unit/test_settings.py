"""Unit tests for addrgen settings.

Covers default loading, TOML layering, env var overrides and path resolution.
"""

from __future__ import annotations

import os


class TestSettings:
    """Core settings loading and override mechanics."""

    def test_default_settings_load(self):
        from addrgen.settings import get_settings

        s = get_settings()
        assert s.env == "local"
        assert s.user.default_nationality == "US"
        assert s.geocode.base_url.startswith("https://nominatim")
        assert s.mail.enabled is True

    def test_get_settings_is_cached(self):
        from addrgen.settings import get_settings

        assert get_settings() is get_settings()

    def test_env_override(self, monkeypatch):
        """ADDRGEN_USER__DEFAULT_NATIONALITY should override the default."""
        monkeypatch.setenv("ADDRGEN_USER__DEFAULT_NATIONALITY", "GB")
        from addrgen.settings.config import Settings

        s = Settings()
        assert s.user.default_nationality == "GB"

    def test_nested_env_var_override_double_underscore(self, monkeypatch):
        monkeypatch.setenv("ADDRGEN_GEOCODE__JITTER_KM", "0.5")
        monkeypatch.setenv("ADDRGEN_API__PORT", "9999")
        from addrgen.settings.config import Settings

        s = Settings()
        assert s.geocode.jitter_km == 0.5
        assert s.api.port == 9999

    def test_dev_profile_overrides(self, monkeypatch):
        """ADDRGEN_ENV=dev layers settings.dev.toml over the defaults."""
        monkeypatch.setenv("ADDRGEN_ENV", "dev")
        from addrgen.settings.config import Settings

        s = Settings()
        assert s.env == "dev"
        assert s.api.host == "0.0.0.0"
        assert s.api.initialize_on_startup is True
        # untouched keys keep their defaults
        assert s.api.port == 8200

    def test_paths_resolved_relative_to_project_root(self, monkeypatch):
        monkeypatch.delenv("ADDRGEN_HISTORY__SQLITE_PATH", raising=False)
        monkeypatch.delenv("ADDRGEN_MAIL__MAILBOX_FILE", raising=False)
        from addrgen.settings.config import Settings

        s = Settings()
        assert os.path.isabs(s.history.sqlite_path)
        assert s.history.sqlite_path.endswith(os.path.join("data", "history.db"))
        assert os.path.isabs(s.mail.mailbox_file)

    def test_absolute_path_kept(self, tmp_path):
        from addrgen.settings import get_settings

        assert get_settings().history.sqlite_path == str(tmp_path / "history.db")
