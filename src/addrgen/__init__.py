"""Real Address Generator: synthetic identities placed at real addresses near a network location."""

from __future__ import annotations

try:
    from importlib.metadata import version

    __version__ = version("addrgen")
except Exception:
    __version__ = "0.0.0"
