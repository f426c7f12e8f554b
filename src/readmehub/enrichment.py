"""GitHub GraphQL enrichment.

One GraphQL request per parsed ref. A batch fans out every request at once,
bounded by a semaphore and a per-request timeout, and fans back in only after
every request has settled. A failed request drops its slot; the batch fails
only when nothing at all comes back.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeVar

import httpx
import structlog

from readmehub.errors import EnrichmentError, ErrorCode
from readmehub.models.github import EnrichedCompany, EnrichedProject

if TYPE_CHECKING:
    from readmehub.config import EnrichmentSettings
    from readmehub.models.readme import CompanyRef, ProjectRef

log = structlog.get_logger()

RefT = TypeVar("RefT", bound="CompanyRef | ProjectRef")
ResultT = TypeVar("ResultT")

_REPOSITORY_FIELDS = """
      openIssues: issues(states: OPEN) {
        totalCount
      }
      stargazerCount
      nameWithOwner
      languages(first: 3, orderBy: {field: SIZE, direction: DESC}) {
        totalSize
        edges {
          size
          node {
            name
          }
        }
      }
      openGraphImageUrl
      description
      defaultBranchRef {
        target {
          ... on Commit {
            committedDate
          }
        }
      }
"""

ORGANIZATION_QUERY = (
    """query ($login: String!, $first: Int!) {
  organization(login: $login) {
    name
    avatarUrl
    login
    repositories(
      first: $first
      isLocked: false
      isFork: false
      privacy: PUBLIC
      orderBy: {direction: DESC, field: STARGAZERS}
    ) {
      nodes {"""
    + _REPOSITORY_FIELDS
    + """      }
    }
  }
}"""
)

REPOSITORY_QUERY = (
    """query ($repoOwner: String!, $repoName: String!) {
  repository(owner: $repoOwner, name: $repoName) {"""
    + _REPOSITORY_FIELDS
    + """  }
}"""
)


def _request_failed(message: str, *, recoverable: bool = True) -> EnrichmentError:
    return EnrichmentError(
        message, code=ErrorCode.ENRICHMENT_REQUEST_FAILED, recoverable=recoverable
    )


class GraphQLClient:
    """Posts GraphQL documents to the GitHub API."""

    def __init__(self, client: httpx.AsyncClient, url: str, token: str | None) -> None:
        self._client = client
        self.url = url
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "*/*", "Content-Type": "application/json"}
        if self._token:
            headers["Authorization"] = f"bearer {self._token}"
        return headers

    async def execute(self, query: str, variables: dict[str, Any]) -> dict[str, Any]:
        """Run one query and return its ``data`` object.

        Raises EnrichmentError on network errors, non-2xx responses, undecodable
        bodies, and responses carrying ``errors`` without ``data``.
        """
        try:
            response = await self._client.post(
                self.url,
                json={"query": query, "variables": variables},
                headers=self._headers(),
            )
        except httpx.HTTPError as exc:
            raise _request_failed(f"Network error calling {self.url}: {exc}") from exc

        if not response.is_success:
            raise _request_failed(
                f"HTTP {response.status_code} calling {self.url}",
                recoverable=response.status_code >= 500 or response.status_code in {408, 429},
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise _request_failed(f"Invalid JSON from {self.url}", recoverable=False) from exc

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            errors = body.get("errors") if isinstance(body, dict) else None
            raise _request_failed(f"GraphQL errors: {errors!r}", recoverable=False)

        if body.get("errors"):
            log.debug("graphql_partial_errors", errors=body["errors"])

        return data


class Enricher:
    """Enriches parsed refs with live repository and organization metadata."""

    def __init__(self, graphql: GraphQLClient, settings: EnrichmentSettings) -> None:
        self._graphql = graphql
        self._settings = settings
        self._semaphore = asyncio.Semaphore(settings.max_concurrency)

    async def enrich_companies(self, refs: list[CompanyRef]) -> list[EnrichedCompany]:
        return await self._fan_out("company", refs, self._fetch_company)

    async def enrich_projects(self, refs: list[ProjectRef]) -> list[EnrichedProject]:
        return await self._fan_out("project", refs, self._fetch_project)

    async def _fetch_company(self, ref: CompanyRef) -> EnrichedCompany:
        data = await self._graphql.execute(
            ORGANIZATION_QUERY,
            {"login": ref.name, "first": self._settings.repositories_per_company},
        )
        node = data.get("organization")
        if not node:
            raise _request_failed(f"Organization not found: {ref.name}", recoverable=False)
        return EnrichedCompany.from_node(node)

    async def _fetch_project(self, ref: ProjectRef) -> EnrichedProject:
        data = await self._graphql.execute(
            REPOSITORY_QUERY,
            {"repoOwner": ref.owner, "repoName": ref.repo},
        )
        node = data.get("repository")
        if not node:
            raise _request_failed(f"Repository not found: {ref.name}", recoverable=False)
        return EnrichedProject.from_node(node, listed_description=ref.description or None)

    async def _bounded(
        self, fetch_one: Callable[[RefT], Awaitable[ResultT]], ref: RefT
    ) -> ResultT:
        # The timeout starts once a concurrency slot is held
        async with self._semaphore:
            return await asyncio.wait_for(
                fetch_one(ref), timeout=self._settings.request_timeout_seconds
            )

    async def _fan_out(
        self,
        kind: str,
        refs: list[RefT],
        fetch_one: Callable[[RefT], Awaitable[ResultT]],
    ) -> list[ResultT]:
        results = await asyncio.gather(
            *(self._bounded(fetch_one, ref) for ref in refs),
            return_exceptions=True,
        )

        enriched: list[ResultT] = []
        for ref, result in zip(refs, results, strict=True):
            if isinstance(result, Exception):
                log.warning(
                    "enrichment_request_failed",
                    kind=kind,
                    ref=ref.name,
                    error_type=type(result).__name__,
                    error=str(result),
                )
                continue
            if isinstance(result, BaseException):
                raise result
            enriched.append(result)

        log.info(
            "enrichment_batch_complete",
            kind=kind,
            requested=len(refs),
            succeeded=len(enriched),
        )

        if not enriched:
            raise EnrichmentError(f"No {kind} could be enriched ({len(refs)} requested)")
        return enriched
