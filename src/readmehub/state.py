"""Application state container.

AppState is created once at startup (inside the Starlette lifespan) and handed
to every read operation and to the refresh scheduler.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from readmehub.store import FreshnessCache

if TYPE_CHECKING:
    import httpx

    from readmehub.config import Settings
    from readmehub.protocols import SnapshotStoreProtocol
    from readmehub.refresh import RefreshOrchestrator


@dataclass
class AppState:
    """Holds all shared runtime state."""

    settings: Settings
    cache: FreshnessCache = field(default_factory=FreshnessCache)
    http_client: httpx.AsyncClient | None = None
    snapshots: SnapshotStoreProtocol | None = None
    orchestrator: RefreshOrchestrator | None = None
