"""Generator page orchestration."""

from __future__ import annotations

from addrgen.generator.session import GeneratorSession, build_session, parse_selection

__all__ = ["GeneratorSession", "build_session", "parse_selection"]
