from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from readmehub.models.github import EnrichedCompany, EnrichedProject
from readmehub.models.readme import CompanyRef, ProjectRef


class SnapshotPayload(BaseModel):
    """Everything one completed refresh produced, serialised into a snapshot."""

    companies: list[CompanyRef]
    projects: list[ProjectRef]
    languages: list[str]
    enriched_companies: list[EnrichedCompany]
    enriched_projects: list[EnrichedProject]


class PersistedSnapshot(BaseModel):
    """Durable record of one refresh. Append-only."""

    id: str
    filename: str
    file: str  # SnapshotPayload as JSON
    created_at: datetime | None = None
