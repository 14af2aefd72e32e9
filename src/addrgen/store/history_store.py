"""History persistence for generated identities.

``HistoryStore`` follows a constructor / session pattern: accept an optional
*db_path* for convenience or a pre-built *session_factory* for shared test
fixtures. Records are returned newest first.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import sqlalchemy as sa
from sqlalchemy.orm import sessionmaker

from addrgen.exceptions import HistoryRecordNotFoundError
from addrgen.models.history import HistoryRecord
from addrgen.models.identity import Address, GeneratedUser
from addrgen.store.sql import METADATA, build_session_factory, history_records

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 100


class HistoryStore:
    """Persist, list and delete ``HistoryRecord`` rows.

    Args:
        db_path: Convenience path for a local SQLite file. Mutually
            exclusive with *session_factory*.
        session_factory: Pre-configured ``sessionmaker``.
        max_records: Cap on stored records; the oldest rows are dropped
            when an insert exceeds it. ``0`` disables the cap.
    """

    def __init__(
        self,
        db_path: str | Path | None = None,
        *,
        session_factory: sessionmaker | None = None,
        max_records: int = DEFAULT_MAX_RECORDS,
    ) -> None:
        if session_factory is not None:
            self._session_factory = session_factory
        else:
            self._session_factory = build_session_factory(db_path=db_path)
        self.max_records = max_records

        # Ensure schema exists
        with self._session_factory() as session:
            METADATA.create_all(session.connection())
            session.commit()

    def add(self, *, user: GeneratedUser, address: Address, ip: str) -> HistoryRecord:
        """Append a record and return it with its freshly assigned id."""
        record = HistoryRecord(user=user, address=address, ip=ip)
        with self._session_factory() as session:
            last_seq = session.execute(
                sa.select(sa.func.coalesce(sa.func.max(history_records.c.seq), 0))
            ).scalar_one()
            next_seq = last_seq + 1
            session.execute(
                sa.insert(history_records).values(
                    record_id=record.id,
                    ip=record.ip,
                    user=record.user.model_dump(mode="json"),
                    address=record.address.model_dump(mode="json"),
                    full_name=record.user.full_name,
                    summary=record.address.one_line(),
                    created_at=record.timestamp,
                    seq=next_seq,
                )
            )
            if self.max_records > 0:
                self._trim(session)
            session.commit()
        logger.debug("Added history record %s (%s)", record.id, record.ip)
        return record

    def list_records(self, *, limit: int | None = None, offset: int = 0) -> list[HistoryRecord]:
        """Return records newest first."""
        stmt = sa.select(history_records).order_by(history_records.c.seq.desc()).offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        with self._session_factory() as session:
            rows = session.execute(stmt).all()
        return [_row_to_record(dict(r._mapping)) for r in rows]

    def get(self, record_id: str) -> HistoryRecord | None:
        """Return a single record, or ``None``."""
        with self._session_factory() as session:
            row = session.execute(
                sa.select(history_records).where(history_records.c.record_id == record_id)
            ).first()
        return _row_to_record(dict(row._mapping)) if row else None

    def require(self, record_id: str) -> HistoryRecord:
        """Like ``get`` but raise ``HistoryRecordNotFoundError`` when absent."""
        record = self.get(record_id)
        if record is None:
            raise HistoryRecordNotFoundError(record_id)
        return record

    def delete(self, record_id: str) -> bool:
        """Delete one record. Returns whether a row was removed."""
        with self._session_factory() as session:
            result = session.execute(sa.delete(history_records).where(history_records.c.record_id == record_id))
            session.commit()
        removed = result.rowcount > 0
        if removed:
            logger.info("Deleted history record %s", record_id)
        return removed

    def delete_all(self) -> int:
        """Delete every record. Returns the number of rows removed."""
        with self._session_factory() as session:
            result = session.execute(sa.delete(history_records))
            session.commit()
        logger.info("Cleared %d history record(s)", result.rowcount)
        return result.rowcount

    def count(self) -> int:
        with self._session_factory() as session:
            return session.execute(sa.select(sa.func.count()).select_from(history_records)).scalar_one()

    def _trim(self, session: Any) -> None:
        keep = (
            sa.select(history_records.c.record_id)
            .order_by(history_records.c.seq.desc())
            .limit(self.max_records)
        )
        result = session.execute(sa.delete(history_records).where(history_records.c.record_id.not_in(keep)))
        if result.rowcount:
            logger.debug("Trimmed %d old history record(s)", result.rowcount)


def _row_to_record(row: dict[str, Any]) -> HistoryRecord:
    created_at: datetime = row["created_at"]
    if created_at.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        created_at = created_at.replace(tzinfo=timezone.utc)
    return HistoryRecord(
        id=row["record_id"],
        user=GeneratedUser.model_validate(row["user"]),
        address=Address.model_validate(row["address"]),
        ip=row["ip"],
        timestamp=created_at,
    )
