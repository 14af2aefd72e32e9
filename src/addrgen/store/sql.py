"""SQLAlchemy table definitions for generated identity history."""

from __future__ import annotations

from pathlib import Path

import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker

TIMESTAMP = sa.DateTime(timezone=True)
UUID_TYPE = sa.String(length=64)

METADATA = sa.MetaData()

# ---------------------------------------------------------------------------
# history_records: one row per generated identity/address pair
# ---------------------------------------------------------------------------

history_records = sa.Table(
    "history_records",
    METADATA,
    sa.Column("record_id", UUID_TYPE, primary_key=True),
    sa.Column("ip", sa.Text(), nullable=False),
    sa.Column("user", sa.JSON(), nullable=False),
    sa.Column("address", sa.JSON(), nullable=False),
    sa.Column("full_name", sa.Text(), nullable=True),
    sa.Column("summary", sa.Text(), nullable=True),
    sa.Column("created_at", TIMESTAMP, nullable=False),
    sa.Column("seq", sa.Integer(), nullable=False, server_default="0"),
)
sa.Index("idx_history_records_created_at", history_records.c.created_at, history_records.c.seq)


# ---------------------------------------------------------------------------
# Engine / session helpers
# ---------------------------------------------------------------------------


def build_engine(*, db_path: str | Path | None = None, echo: bool = False) -> sa.Engine:
    """Create a SQLAlchemy engine for the history database.

    Args:
        db_path: Override path for the SQLite file. Defaults to
            ``settings.history.sqlite_path``.
        echo: When True, log all SQL statements.
    """
    if db_path is None:
        from addrgen.settings import get_settings

        db_path = get_settings().history.sqlite_path

    resolved = Path(db_path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    url = f"sqlite:///{resolved.as_posix()}"
    return sa.create_engine(
        url,
        echo=echo,
        pool_pre_ping=True,
        connect_args={"check_same_thread": False, "timeout": 30},
    )


def build_session_factory(*, db_path: str | Path | None = None) -> sessionmaker:
    """Return a ``sessionmaker`` bound to the history engine."""
    engine = build_engine(db_path=db_path)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)
