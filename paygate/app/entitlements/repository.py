"""Persistence layer for entitlement records."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional, Protocol, Tuple

import psycopg2
import psycopg2.extras
from psycopg2.extensions import connection as PgConnection
from psycopg2.extensions import cursor as PgCursor

from ..errors import StoreUnavailable, StoreWriteFailed
from .models import EntitlementKey, EntitlementRecord, EntitlementStatus

logger = logging.getLogger(__name__)


class EntitlementStore(Protocol):
    """Read/write contract the entitlement flows require from durable storage."""

    def get(self, key: EntitlementKey) -> Optional[EntitlementRecord]:
        """Return the record for ``key`` or ``None``. Raises ``StoreUnavailable``."""

    def put(self, record: EntitlementRecord) -> None:
        """Replace the whole record at ``record.key``. Raises ``StoreWriteFailed``."""


class InMemoryEntitlementStore:
    """Simple in-memory store suitable for tests and local development."""

    def __init__(self) -> None:
        self._records: Dict[Tuple[str, str], EntitlementRecord] = {}

    def get(self, key: EntitlementKey) -> Optional[EntitlementRecord]:
        return self._records.get(key.as_tuple())

    def put(self, record: EntitlementRecord) -> None:
        self._records[record.key.as_tuple()] = record

    def disable(self, key: EntitlementKey) -> Optional[EntitlementRecord]:
        record = self._records.get(key.as_tuple())
        if record is None:
            return None
        updated = record.model_copy(update={"status": EntitlementStatus.DISABLED.value})
        self._records[key.as_tuple()] = updated
        return updated

    def __len__(self) -> int:
        return len(self._records)


_CREATE_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS access_records (
    email TEXT NOT NULL,
    device_id TEXT NOT NULL,
    plan_id TEXT NOT NULL,
    updated_at BIGINT NOT NULL,
    expires_at BIGINT NOT NULL,
    status TEXT NULL,
    PRIMARY KEY (email, device_id)
)
"""


def _row_to_record(row: Dict[str, Any]) -> EntitlementRecord:
    return EntitlementRecord(
        email=row["email"],
        device_id=row["device_id"],
        plan_id=row["plan_id"],
        updated_at=int(row["updated_at"]),
        expires_at=int(row["expires_at"]),
        status=row.get("status"),
    )


@contextmanager
def managed_connection(conn_factory: Callable[[], PgConnection]) -> Iterator[PgConnection]:
    """Open a connection, committing on success and rolling back on failure."""

    connection = conn_factory()
    try:
        yield connection
        connection.commit()
    except Exception:
        connection.rollback()
        raise
    finally:
        connection.close()


class PostgresEntitlementStore:
    """Concrete store persisting entitlement records in PostgreSQL.

    Records are keyed by the ``(email, device_id)`` composite primary key. A
    write is a single upsert statement, so concurrent grants for one identity
    resolve as last-write-wins under PostgreSQL's row locking.
    """

    def __init__(self, conn_factory: Callable[[], PgConnection]) -> None:
        self._conn_factory = conn_factory

    @classmethod
    def from_settings(
        cls,
        *,
        host: str,
        port: int,
        dbname: str,
        user: str,
        password: str,
        connect_timeout: int,
        statement_timeout_ms: int,
    ) -> "PostgresEntitlementStore":
        db_cfg = dict(
            host=host,
            port=port,
            dbname=dbname,
            user=user,
            password=password,
            connect_timeout=connect_timeout,
            options=f"-c statement_timeout={statement_timeout_ms}",
        )

        def connect() -> PgConnection:
            return psycopg2.connect(**db_cfg)

        return cls(connect)

    @contextmanager
    def _cursor(self) -> Iterator[PgCursor]:
        with managed_connection(self._conn_factory) as connection:
            cursor = connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
            try:
                yield cursor
            finally:
                cursor.close()

    def ensure_schema(self) -> None:
        with self._cursor() as cursor:
            cursor.execute(_CREATE_TABLE_SQL)

    def get(self, key: EntitlementKey) -> Optional[EntitlementRecord]:
        try:
            with self._cursor() as cursor:
                cursor.execute(
                    """
                    SELECT email, device_id, plan_id, updated_at, expires_at, status
                    FROM access_records
                    WHERE email = %s AND device_id = %s
                    """,
                    key.as_tuple(),
                )
                row = cursor.fetchone()
        except psycopg2.Error as exc:
            logger.exception("Entitlement lookup failed")
            raise StoreUnavailable() from exc
        if row is None:
            return None
        return _row_to_record(dict(row))

    def put(self, record: EntitlementRecord) -> None:
        try:
            with self._cursor() as cursor:
                cursor.execute(
                    """
                    INSERT INTO access_records (
                        email,
                        device_id,
                        plan_id,
                        updated_at,
                        expires_at,
                        status
                    )
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (email, device_id) DO UPDATE SET
                        plan_id = EXCLUDED.plan_id,
                        updated_at = EXCLUDED.updated_at,
                        expires_at = EXCLUDED.expires_at,
                        status = EXCLUDED.status
                    """,
                    (
                        record.email,
                        record.device_id,
                        record.plan_id,
                        record.updated_at,
                        record.expires_at,
                        record.status,
                    ),
                )
        except psycopg2.Error as exc:
            raise StoreWriteFailed(str(exc) or None) from exc


__all__ = [
    "EntitlementStore",
    "InMemoryEntitlementStore",
    "PostgresEntitlementStore",
    "managed_connection",
]
