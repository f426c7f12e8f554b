"""Refresh orchestrator.

State machine for one refresh attempt:

    CHECK_CACHE ──fresh──▶ return cached aggregates
         │
       stale
         ▼
    FETCH_DOC ▶ PARSE ▶ ENRICH ▶ PERSIST ▶ REPOPULATE_CACHE ▶ return fresh aggregates

Any stage failure ends the attempt: the error is logged, the cache is left as
it was, and ``refresh()`` returns ``None``. There is no retry here; the next
reader or the next scheduler tick tries again.

At most one pipeline run is in flight. Callers arriving while one is running
await that same run instead of starting another.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from readmehub.errors import PersistenceError, ReadmeHubError
from readmehub.models.snapshot import SnapshotPayload
from readmehub.parser import parse_readme
from readmehub.store import COMPANIES_KEY, JSON_DATA_KEY, PROJECTS_KEY

if TYPE_CHECKING:
    from readmehub.models.github import EnrichedCompany, EnrichedProject
    from readmehub.models.snapshot import PersistedSnapshot
    from readmehub.protocols import EnricherProtocol, FetcherProtocol, SnapshotStoreProtocol
    from readmehub.store import FreshnessCache

log = structlog.get_logger()


@dataclass
class RefreshResult:
    """Aggregates served after a refresh attempt."""

    companies: list[EnrichedCompany]
    projects: list[EnrichedProject]
    snapshot: PersistedSnapshot
    from_cache: bool


def snapshot_filename(now: datetime) -> str:
    return f"readme-{int(now.timestamp() * 1000)}.json"


class RefreshOrchestrator:
    """Coordinates fetch, parse, enrichment, persistence and cache repopulation."""

    def __init__(
        self,
        *,
        cache: FreshnessCache,
        fetcher: FetcherProtocol,
        enricher: EnricherProtocol,
        snapshots: SnapshotStoreProtocol,
        host: str,
        max_age_days: float,
    ) -> None:
        self.cache = cache
        self.fetcher = fetcher
        self.enricher = enricher
        self.snapshots = snapshots
        self.host = host
        self.max_age_days = max_age_days
        self._inflight: asyncio.Task[RefreshResult | None] | None = None

    async def refresh(self) -> RefreshResult | None:
        """Serve fresh cached data, or run the pipeline (once) to repopulate it."""
        if self.cache.is_fresh(self.max_age_days):
            log.debug("refresh_cache_fresh", last_updated=self.cache.last_updated)
            return self._cached_result()

        task = self._inflight
        if task is None:
            task = asyncio.create_task(self._run_pipeline())
            task.add_done_callback(self._clear_inflight)
            self._inflight = task
        else:
            log.info("refresh_joined_inflight")

        # Shielded so one cancelled caller does not cancel the shared run
        return await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task[RefreshResult | None]) -> None:
        if self._inflight is task:
            self._inflight = None

    def _cached_result(self) -> RefreshResult:
        return RefreshResult(
            companies=self.cache.get(COMPANIES_KEY),
            projects=self.cache.get(PROJECTS_KEY),
            snapshot=self.cache.get(JSON_DATA_KEY),
            from_cache=True,
        )

    async def _run_pipeline(self) -> RefreshResult | None:
        run_log = log.bind(run_id=uuid.uuid4().hex[:8])
        run_log.info("refresh_started", last_updated=self.cache.last_updated)
        try:
            result = await self._run_stages(run_log)
        except ReadmeHubError as exc:
            run_log.error(
                "refresh_failed",
                code=exc.code,
                message=exc.message,
                recoverable=exc.recoverable,
            )
            return None
        except Exception:
            run_log.error("refresh_unexpected_error", exc_info=True)
            return None

        run_log.info(
            "refresh_complete",
            companies=len(result.companies),
            projects=len(result.projects),
            snapshot_id=result.snapshot.id,
        )
        return result

    async def _run_stages(self, run_log: structlog.typing.FilteringBoundLogger) -> RefreshResult:
        # FETCH_DOC
        document = await self.fetcher.fetch()

        # PARSE
        parsed = parse_readme(document, self.host)
        run_log.info(
            "readme_parsed",
            companies=len(parsed.companies),
            projects=len(parsed.projects),
            languages=len(parsed.languages),
        )

        # ENRICH
        companies = await self.enricher.enrich_companies(parsed.companies)
        projects = await self.enricher.enrich_projects(parsed.projects)

        # PERSIST
        payload = SnapshotPayload(
            companies=parsed.companies,
            projects=parsed.projects,
            languages=parsed.languages,
            enriched_companies=companies,
            enriched_projects=projects,
        )
        snapshot = await self.snapshots.save(
            snapshot_filename(datetime.now(UTC)), payload.model_dump_json()
        )
        if snapshot is None or not snapshot.id or not snapshot.file:
            raise PersistenceError("Snapshot store returned a record without id or file")

        # REPOPULATE_CACHE
        self.cache.set(JSON_DATA_KEY, snapshot)
        self.cache.set(PROJECTS_KEY, projects)
        self.cache.set(COMPANIES_KEY, companies)

        return RefreshResult(
            companies=companies,
            projects=projects,
            snapshot=snapshot,
            from_cache=False,
        )
