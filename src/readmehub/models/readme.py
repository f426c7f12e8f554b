from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, field_validator


class CompanyRef(BaseModel):
    """An organization login parsed from the README, before enrichment."""

    name: str


class ProjectRef(BaseModel):
    """A ``owner/repo`` link parsed from the README, before enrichment."""

    name: str
    description: str = ""

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        owner, sep, repo = v.partition("/")
        if not sep or not owner or not repo or "/" in repo:
            raise ValueError(f"Project name must be 'owner/repo': {v!r}")
        return v

    @property
    def owner(self) -> str:
        return self.name.split("/")[0]

    @property
    def repo(self) -> str:
        return self.name.split("/")[1]


@dataclass(frozen=True)
class Sections:
    """Raw text of the two README sections the pipeline reads."""

    companies_text: str
    projects_text: str


@dataclass(frozen=True)
class LanguageGroup:
    """One ``### <Language>`` block of the projects section."""

    label: str
    text: str


@dataclass
class ParsedReadme:
    """Classified output of one README parse.

    ``companies`` holds entries from the companies section first, followed by
    organization-root links reclassified out of the projects section.
    Duplicates are kept.
    """

    companies: list[CompanyRef] = field(default_factory=list)
    projects: list[ProjectRef] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
