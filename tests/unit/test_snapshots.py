"""Unit tests for readmehub.snapshots."""

from __future__ import annotations

from collections.abc import AsyncGenerator

import aiosqlite
import pytest

from readmehub.errors import ErrorCode, PersistenceError
from readmehub.snapshots import SnapshotStore


@pytest.fixture()
async def snapshot_store() -> AsyncGenerator[SnapshotStore, None]:
    async with aiosqlite.connect(":memory:") as db:
        store = SnapshotStore(db)
        await store.init_db()
        yield store


async def _row_count(store: SnapshotStore) -> int:
    cursor = await store._db.execute("SELECT COUNT(*) FROM snapshots")
    row = await cursor.fetchone()
    return row[0]


class TestSave:
    async def test_returns_record_with_id(self, snapshot_store: SnapshotStore) -> None:
        record = await snapshot_store.save("readme-1.json", '{"a": 1}')
        assert record.id
        assert record.filename == "readme-1.json"
        assert record.file == '{"a": 1}'
        assert record.created_at is not None

    async def test_append_only(self, snapshot_store: SnapshotStore) -> None:
        first = await snapshot_store.save("readme-1.json", "{}")
        second = await snapshot_store.save("readme-1.json", "{}")
        assert first.id != second.id
        assert await _row_count(snapshot_store) == 2

    async def test_write_failure_raises_persistence_error(
        self, snapshot_store: SnapshotStore
    ) -> None:
        original_execute = snapshot_store._db.execute

        async def failing_execute(*args, **kwargs):
            raise aiosqlite.OperationalError("disk I/O error")

        snapshot_store._db.execute = failing_execute  # type: ignore[assignment]
        with pytest.raises(PersistenceError) as exc_info:
            await snapshot_store.save("readme-1.json", "{}")
        snapshot_store._db.execute = original_execute  # type: ignore[assignment]

        assert exc_info.value.code == ErrorCode.PERSISTENCE_FAILED


class TestLatest:
    async def test_empty_store(self, snapshot_store: SnapshotStore) -> None:
        assert await snapshot_store.latest() is None

    async def test_returns_newest(self, snapshot_store: SnapshotStore) -> None:
        await snapshot_store.save("readme-1.json", "{}")
        newest = await snapshot_store.save("readme-2.json", "{}")
        latest = await snapshot_store.latest()
        assert latest is not None
        assert latest.id == newest.id
        assert latest.filename == "readme-2.json"

    async def test_read_failure_returns_none(self, snapshot_store: SnapshotStore) -> None:
        original_execute = snapshot_store._db.execute

        async def failing_execute(*args, **kwargs):
            raise aiosqlite.OperationalError("disk I/O error")

        snapshot_store._db.execute = failing_execute  # type: ignore[assignment]
        assert await snapshot_store.latest() is None
        snapshot_store._db.execute = original_execute  # type: ignore[assignment]
