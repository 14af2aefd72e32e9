"""Configuration loader for addrgen using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags (where applicable)
  2. Environment variables (ADDRGEN_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("ADDRGEN_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "ADDRGEN_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class HTTPSettings(BaseSettings):
    """Shared outbound HTTP client settings."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_HTTP__")

    timeout_sec: float = 10.0
    user_agent: str = "addrgen/0.1 (+https://github.com/addrgen/addrgen)"


class IPSettings(BaseSettings):
    """Public IP detection and IP geolocation."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_IP__")

    detect_url: str = "https://api.ipify.org"
    geo_url: str = "https://ipinfo.io"
    ipinfo_token: str = ""


class UserSettings(BaseSettings):
    """Random user generation."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_USER__")

    api_url: str = "https://randomuser.me/api/"
    default_nationality: str = "US"
    offline_fallback: bool = True


class GeocodeSettings(BaseSettings):
    """Forward / reverse geocoding via Nominatim."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_GEOCODE__")

    base_url: str = "https://nominatim.openstreetmap.org"
    jitter_km: float = 3.0
    max_attempts: int = 3
    zoom: int = 18
    language: str = "en"


class MailSettings(BaseSettings):
    """Disposable inbox (mail.tm compatible API)."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_MAIL__")

    base_url: str = "https://api.mail.tm"
    poll_interval_sec: float = 5.0
    enabled: bool = True
    mailbox_file: str = "data/mailbox.json"


class HistorySettings(BaseSettings):
    """Generated identity history persistence."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_HISTORY__")

    sqlite_path: str = "data/history.db"
    max_records: int = 100


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="ADDRGEN_API__")

    host: str = "127.0.0.1"
    port: int = 8200
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    initialize_on_startup: bool = False


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root addrgen settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRGEN_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False
    log_level: str = "INFO"

    http: HTTPSettings = Field(default_factory=HTTPSettings)
    ip: IPSettings = Field(default_factory=IPSettings)
    user: UserSettings = Field(default_factory=UserSettings)
    geocode: GeocodeSettings = Field(default_factory=GeocodeSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    history: HistorySettings = Field(default_factory=HistorySettings)
    api: APISettings = Field(default_factory=APISettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Normalize relative paths against project_root."""
        if not Path(self.history.sqlite_path).is_absolute():
            self.history.sqlite_path = str(self.project_root / self.history.sqlite_path)
        if not Path(self.mail.mailbox_file).is_absolute():
            self.mail.mailbox_file = str(self.project_root / self.mail.mailbox_file)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
