"""Protocol interfaces for swappable components.

The orchestrator and AppState reference these protocols, not the concrete
implementations. Tests substitute lightweight in-memory stubs, and another
snapshot backend can be dropped in without touching the pipeline.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from readmehub.models.github import EnrichedCompany, EnrichedProject
    from readmehub.models.readme import CompanyRef, ProjectRef
    from readmehub.models.snapshot import PersistedSnapshot


class FetcherProtocol(Protocol):
    """Interface for the README fetcher."""

    async def fetch(self) -> str: ...


class EnricherProtocol(Protocol):
    """Interface for the GraphQL enrichment client."""

    async def enrich_companies(self, refs: list[CompanyRef]) -> list[EnrichedCompany]: ...

    async def enrich_projects(self, refs: list[ProjectRef]) -> list[EnrichedProject]: ...


class SnapshotStoreProtocol(Protocol):
    """Interface for the durable snapshot collaborator."""

    async def save(self, filename: str, file: str) -> PersistedSnapshot: ...

    async def latest(self) -> PersistedSnapshot | None: ...
