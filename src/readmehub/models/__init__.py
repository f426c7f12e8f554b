from __future__ import annotations

from readmehub.models.github import EnrichedCompany, EnrichedProject, LanguageShare
from readmehub.models.readme import (
    CompanyRef,
    LanguageGroup,
    ParsedReadme,
    ProjectRef,
    Sections,
)
from readmehub.models.snapshot import PersistedSnapshot, SnapshotPayload

__all__ = [
    # readme
    "CompanyRef",
    "ProjectRef",
    "Sections",
    "LanguageGroup",
    "ParsedReadme",
    # github
    "LanguageShare",
    "EnrichedProject",
    "EnrichedCompany",
    # snapshot
    "SnapshotPayload",
    "PersistedSnapshot",
]
