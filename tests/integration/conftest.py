"""Integration test fixtures.

Provides a fully wired AppState: in-memory SQLite snapshot store, a real
httpx client (mocked at the transport layer by respx in each test), the real
enricher and orchestrator, and a freshness cache driven by a fake clock.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import TYPE_CHECKING

import aiosqlite
import httpx
import pytest

from readmehub.config import Settings
from readmehub.enrichment import Enricher, GraphQLClient
from readmehub.fetcher import ReadmeFetcher
from readmehub.refresh import RefreshOrchestrator
from readmehub.snapshots import SnapshotStore
from readmehub.state import AppState
from readmehub.store import FreshnessCache

if TYPE_CHECKING:
    from tests.conftest import FakeClock

README_URL = "https://raw.example.com/awesome/README.md"
GRAPHQL_URL = "https://api.example.com/graphql"


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        source={"readme_url": README_URL},
        github={"graphql_url": GRAPHQL_URL, "token": "test-token"},
        enrichment={"max_concurrency": 4, "request_timeout_seconds": 5},
        scheduler={"enabled": False},
    )


@pytest.fixture()
async def app_state(settings: Settings, clock: FakeClock) -> AsyncGenerator[AppState, None]:
    """Full AppState wired for pipeline integration tests."""
    async with aiosqlite.connect(":memory:") as db:
        snapshots = SnapshotStore(db)
        await snapshots.init_db()

        async with httpx.AsyncClient() as client:
            state = AppState(
                settings=settings,
                cache=FreshnessCache(clock=clock),
                http_client=client,
                snapshots=snapshots,
            )
            state.orchestrator = RefreshOrchestrator(
                cache=state.cache,
                fetcher=ReadmeFetcher(client, settings.source.readme_url),
                enricher=Enricher(
                    GraphQLClient(client, settings.github.graphql_url, settings.github.token),
                    settings.enrichment,
                ),
                snapshots=snapshots,
                host=settings.source.host,
                max_age_days=settings.cache.max_age_days,
            )
            yield state
