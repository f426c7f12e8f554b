"""Read operations served to request handlers.

Each read first asks the orchestrator to refresh (a no-op while the cache is
fresh), then answers from the cache. Pipeline failures never reach the caller:
a failed refresh leaves whatever was cached before, possibly nothing.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from readmehub.store import COMPANIES_KEY, PROJECTS_KEY

if TYPE_CHECKING:
    from readmehub.models.github import EnrichedCompany, EnrichedProject
    from readmehub.state import AppState


async def _ensure_refreshed(state: AppState) -> None:
    if state.orchestrator is None:
        raise RuntimeError("Refresh orchestrator not initialized")
    await state.orchestrator.refresh()


async def fetch_company(company_id: str, state: AppState) -> EnrichedCompany | None:
    """Return the enriched company whose login matches ``company_id`` (case-insensitive)."""
    log = structlog.get_logger().bind(reader="fetch_company", company_id=company_id)
    await _ensure_refreshed(state)

    wanted = company_id.casefold()
    for company in state.cache.get(COMPANIES_KEY) or []:
        if company.login.casefold() == wanted:
            return company

    log.info("company_not_found")
    return None


async def fetch_all_companies(state: AppState) -> list[EnrichedCompany]:
    await _ensure_refreshed(state)
    return list(state.cache.get(COMPANIES_KEY) or [])


async def fetch_all_repositories(state: AppState) -> list[EnrichedProject]:
    await _ensure_refreshed(state)
    return list(state.cache.get(PROJECTS_KEY) or [])
