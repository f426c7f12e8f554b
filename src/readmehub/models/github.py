from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class LanguageShare(BaseModel):
    name: str
    size: int  # Bytes of source in this language


class EnrichedProject(BaseModel):
    """Repository metadata returned by the GraphQL API."""

    name_with_owner: str
    description: str | None = None
    stargazer_count: int = 0
    open_issues: int = 0
    languages: list[LanguageShare] = []  # Top 3 by size, descending
    languages_total_size: int = 0
    open_graph_image_url: str | None = None
    last_commit_at: datetime | None = None
    listed_description: str | None = None  # Description text from the README entry

    @classmethod
    def from_node(
        cls, node: dict[str, Any], *, listed_description: str | None = None
    ) -> EnrichedProject:
        """Build from a GraphQL ``Repository`` node.

        Raises KeyError, TypeError or pydantic.ValidationError on a malformed node.
        """
        languages = node.get("languages") or {}
        branch = node.get("defaultBranchRef") or {}
        target = branch.get("target") or {}
        return cls(
            name_with_owner=node["nameWithOwner"],
            description=node.get("description"),
            stargazer_count=node.get("stargazerCount") or 0,
            open_issues=(node.get("openIssues") or {}).get("totalCount") or 0,
            languages=[
                LanguageShare(name=edge["node"]["name"], size=edge["size"])
                for edge in languages.get("edges") or []
            ],
            languages_total_size=languages.get("totalSize") or 0,
            open_graph_image_url=node.get("openGraphImageUrl"),
            last_commit_at=target.get("committedDate"),
            listed_description=listed_description,
        )


class EnrichedCompany(BaseModel):
    """Organization metadata plus its most-starred public repositories."""

    login: str
    name: str | None = None
    avatar_url: str | None = None
    repositories: list[EnrichedProject] = []

    @classmethod
    def from_node(cls, node: dict[str, Any]) -> EnrichedCompany:
        """Build from a GraphQL ``Organization`` node."""
        repositories = node.get("repositories") or {}
        return cls(
            login=node["login"],
            name=node.get("name"),
            avatar_url=node.get("avatarUrl"),
            repositories=[
                EnrichedProject.from_node(repo) for repo in repositories.get("nodes") or [] if repo
            ],
        )
