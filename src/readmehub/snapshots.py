"""SQLite snapshot store.

Append-only record of every completed refresh. A snapshot is written once and
never updated or deleted. Unlike a cache, a failed write here is fatal for the
refresh attempt: ``save`` raises ``PersistenceError`` and the orchestrator
leaves the in-memory cache untouched.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

import aiosqlite
import structlog

from readmehub.errors import PersistenceError
from readmehub.models.snapshot import PersistedSnapshot

log = structlog.get_logger()

_CREATE_SNAPSHOT_TABLE = """
CREATE TABLE IF NOT EXISTS snapshots (
    id         TEXT PRIMARY KEY,
    filename   TEXT NOT NULL,
    file       TEXT NOT NULL,
    created_at TEXT NOT NULL
)
"""

_CREATE_SNAPSHOT_INDEX = (
    "CREATE INDEX IF NOT EXISTS idx_snapshots_created ON snapshots(created_at)"
)


class SnapshotStore:
    """aiosqlite-backed snapshot store implementing SnapshotStoreProtocol."""

    def __init__(self, db: aiosqlite.Connection) -> None:
        self._db = db

    async def init_db(self) -> None:
        """Create tables and set WAL mode. Called once at startup."""
        await self._db.execute("PRAGMA journal_mode = WAL")
        await self._db.execute(_CREATE_SNAPSHOT_TABLE)
        await self._db.execute(_CREATE_SNAPSHOT_INDEX)
        await self._db.commit()

    async def save(self, filename: str, file: str) -> PersistedSnapshot:
        """Append one snapshot and return the stored record."""
        snapshot_id = uuid.uuid4().hex
        created_at = datetime.now(UTC)
        try:
            await self._db.execute(
                "INSERT INTO snapshots (id, filename, file, created_at) VALUES (?, ?, ?, ?)",
                (snapshot_id, filename, file, created_at.isoformat()),
            )
            await self._db.commit()
        except aiosqlite.Error as exc:
            log.warning("snapshot_write_error", filename=filename, exc_info=True)
            raise PersistenceError(f"Failed to store snapshot {filename}: {exc}") from exc

        log.info("snapshot_saved", id=snapshot_id, filename=filename, size=len(file))
        return PersistedSnapshot(
            id=snapshot_id,
            filename=filename,
            file=file,
            created_at=created_at,
        )

    async def latest(self) -> PersistedSnapshot | None:
        """Return the most recent snapshot. Returns ``None`` when empty or on read failure."""
        try:
            cursor = await self._db.execute(
                "SELECT id, filename, file, created_at FROM snapshots "
                "ORDER BY created_at DESC, rowid DESC LIMIT 1"
            )
            row = await cursor.fetchone()
        except aiosqlite.Error:
            log.warning("snapshot_read_error", exc_info=True)
            return None

        if row is None:
            return None
        return PersistedSnapshot(
            id=row[0],
            filename=row[1],
            file=row[2],
            created_at=datetime.fromisoformat(row[3]),
        )
