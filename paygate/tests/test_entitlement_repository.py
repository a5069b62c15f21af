from __future__ import annotations

from typing import Any, List, Optional, Tuple

import psycopg2
import psycopg2.extras
import pytest

from paygate.app.entitlements import EntitlementKey, EntitlementRecord, PostgresEntitlementStore
from paygate.app.entitlements import repository as repository_module
from paygate.app.errors import StoreUnavailable, StoreWriteFailed


class FakeCursor:
    def __init__(self, connection: "FakeConnection") -> None:
        self._connection = connection
        self.closed = False

    def execute(self, sql: str, params: Optional[Tuple[Any, ...]] = None) -> None:
        if self._connection.fail_with is not None:
            raise self._connection.fail_with
        self._connection.statements.append((" ".join(sql.split()), params))

    def fetchone(self):
        return self._connection.row

    def close(self) -> None:
        self.closed = True


class FakeConnection:
    def __init__(self, *, row=None, fail_with: Optional[Exception] = None) -> None:
        self.row = row
        self.fail_with = fail_with
        self.statements: List[Tuple[str, Any]] = []
        self.cursor_factories: List[Any] = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def cursor(self, cursor_factory=None) -> FakeCursor:
        self.cursor_factories.append(cursor_factory)
        return FakeCursor(self)

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.rolled_back = True

    def close(self) -> None:
        self.closed = True


KEY = EntitlementKey(email="a_b@x.com", device_id="d_1")


def _store(connection: FakeConnection) -> PostgresEntitlementStore:
    return PostgresEntitlementStore(lambda: connection)


def test_get_uses_composite_key_and_maps_row():
    connection = FakeConnection(
        row={
            "email": KEY.email,
            "device_id": KEY.device_id,
            "plan_id": "6hrs",
            "updated_at": 10,
            "expires_at": 21_600_010,
            "status": "disabled",
        }
    )

    record = _store(connection).get(KEY)

    assert record == EntitlementRecord(
        email=KEY.email,
        device_id=KEY.device_id,
        plan_id="6hrs",
        updatedAt=10,
        expiresAt=21_600_010,
        status="disabled",
    )
    [(sql, params)] = connection.statements
    assert "WHERE email = %s AND device_id = %s" in sql
    assert params == (KEY.email, KEY.device_id)
    assert connection.cursor_factories == [psycopg2.extras.RealDictCursor]
    assert connection.committed and connection.closed


def test_get_missing_row_returns_none():
    connection = FakeConnection(row=None)

    assert _store(connection).get(KEY) is None
    assert all(not sql.startswith("INSERT") for sql, _ in connection.statements)


def test_get_failure_raises_store_unavailable():
    connection = FakeConnection(fail_with=psycopg2.OperationalError("timeout"))

    with pytest.raises(StoreUnavailable):
        _store(connection).get(KEY)

    assert connection.rolled_back and connection.closed


def test_put_is_full_overwrite_upsert():
    connection = FakeConnection()
    record = EntitlementRecord(
        email=KEY.email,
        device_id=KEY.device_id,
        plan_id="24hrs",
        updatedAt=5,
        expiresAt=86_400_005,
    )

    _store(connection).put(record)

    [(sql, params)] = connection.statements
    assert sql.startswith("INSERT INTO access_records")
    assert "ON CONFLICT (email, device_id) DO UPDATE SET" in sql
    assert "status = EXCLUDED.status" in sql
    assert params == (KEY.email, KEY.device_id, "24hrs", 5, 86_400_005, None)
    assert connection.committed


def test_put_failure_raises_store_write_failed():
    connection = FakeConnection(fail_with=psycopg2.OperationalError("server closed the connection"))
    record = EntitlementRecord(email="a", device_id="b", plan_id="6hrs", updatedAt=0, expiresAt=1)

    with pytest.raises(StoreWriteFailed):
        _store(connection).put(record)

    assert connection.rolled_back and not connection.committed


def test_ensure_schema_creates_table():
    connection = FakeConnection()

    _store(connection).ensure_schema()

    [(sql, _)] = connection.statements
    assert sql.startswith("CREATE TABLE IF NOT EXISTS access_records")
    assert "PRIMARY KEY (email, device_id)" in sql


def test_from_settings_bounds_connections(monkeypatch):
    captured = {}
    connection = FakeConnection()

    def fake_connect(**kwargs):
        captured.update(kwargs)
        return connection

    monkeypatch.setattr(repository_module.psycopg2, "connect", fake_connect)
    store = PostgresEntitlementStore.from_settings(
        host="db",
        port=5433,
        dbname="paygate",
        user="svc",
        password="pw",
        connect_timeout=3,
        statement_timeout_ms=2500,
    )

    store.get(KEY)

    assert captured["connect_timeout"] == 3
    assert captured["options"] == "-c statement_timeout=2500"
    assert captured["host"] == "db" and captured["port"] == 5433


def test_in_memory_store_disable_unknown_key_is_noop(store):
    assert store.disable(KEY) is None
    assert len(store) == 0
