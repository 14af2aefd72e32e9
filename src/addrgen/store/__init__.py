"""addrgen store: SQL schema, engine helpers and HistoryStore.

Generated identities are kept in a local SQLite database so the history
list survives restarts of the CLI and the API server.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from addrgen.store.history_store import HistoryStore


def build_history_store(db_path: str | Path | None = None) -> "HistoryStore":
    """Factory: return a ``HistoryStore`` honouring addrgen settings.

    Args:
        db_path: Optional override for the SQLite file path. Defaults to
            ``get_settings().history.sqlite_path``.

    Returns:
        A configured :class:`HistoryStore` instance.
    """
    from addrgen.settings import get_settings
    from addrgen.store.history_store import HistoryStore

    settings = get_settings()
    return HistoryStore(db_path=db_path, max_records=settings.history.max_records)
