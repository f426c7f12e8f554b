"""HTTP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the Starlette lifespan context manager
- Start the refresh scheduler
- Expose the read operations as JSON routes
"""

from __future__ import annotations

import asyncio
import logging
import sys
from contextlib import AsyncExitStack, asynccontextmanager, suppress
from pathlib import Path
from typing import TYPE_CHECKING

import aiosqlite
import structlog
import uvicorn
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route

from readmehub import __version__
from readmehub.config import Settings
from readmehub.enrichment import Enricher, GraphQLClient
from readmehub.fetcher import ReadmeFetcher, build_http_client
from readmehub.readers import fetch_all_companies, fetch_all_repositories, fetch_company
from readmehub.refresh import RefreshOrchestrator
from readmehub.schedulers import run_refresh_scheduler
from readmehub.snapshots import SnapshotStore
from readmehub.state import AppState

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


def _state(request: Request) -> AppState:
    return request.app.state.readmehub


async def list_companies(request: Request) -> JSONResponse:
    companies = await fetch_all_companies(_state(request))
    return JSONResponse([company.model_dump(mode="json") for company in companies])


async def get_company(request: Request) -> JSONResponse:
    login = request.path_params["login"]
    company = await fetch_company(login, _state(request))
    if company is None:
        return JSONResponse(
            {"error": {"code": "COMPANY_NOT_FOUND", "message": f"Unknown company '{login}'"}},
            status_code=404,
        )
    return JSONResponse(company.model_dump(mode="json"))


async def list_repositories(request: Request) -> JSONResponse:
    projects = await fetch_all_repositories(_state(request))
    return JSONResponse([project.model_dump(mode="json") for project in projects])


async def status(request: Request) -> JSONResponse:
    state = _state(request)
    last_updated = state.cache.last_updated
    snapshot = await state.snapshots.latest() if state.snapshots is not None else None
    return JSONResponse(
        {
            "version": __version__,
            "fresh": state.cache.is_fresh(state.settings.cache.max_age_days),
            "last_updated": last_updated.isoformat() if last_updated else None,
            "latest_snapshot": (
                snapshot.model_dump(mode="json", exclude={"file"}) if snapshot else None
            ),
        }
    )


ROUTES = [
    Route("/api/companies", list_companies),
    Route("/api/companies/{login}", get_company),
    Route("/api/repositories", list_repositories),
    Route("/api/status", status),
]


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: Starlette) -> AsyncGenerator[None, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings: Settings = app.state.settings
    _setup_logging(settings)

    log.info("server_starting", version=__version__, readme_url=settings.source.readme_url)
    if not settings.github.token:
        log.warning("github_token_missing", hint="Set READMEHUB__GITHUB__TOKEN")

    # Resources are closed in reverse order, including when startup fails part-way
    async with AsyncExitStack() as stack:
        stack.callback(log.info, "server_stopping")
        http_client = await stack.enter_async_context(build_http_client(settings.enrichment))

        db_path = Path(settings.snapshots.db_path).expanduser()
        db_path.parent.mkdir(parents=True, exist_ok=True)
        db = await stack.enter_async_context(aiosqlite.connect(str(db_path)))
        snapshots = SnapshotStore(db)
        await snapshots.init_db()

        state = AppState(settings=settings, http_client=http_client, snapshots=snapshots)
        state.orchestrator = RefreshOrchestrator(
            cache=state.cache,
            fetcher=ReadmeFetcher(http_client, settings.source.readme_url),
            enricher=Enricher(
                GraphQLClient(http_client, settings.github.graphql_url, settings.github.token),
                settings.enrichment,
            ),
            snapshots=snapshots,
            host=settings.source.host,
            max_age_days=settings.cache.max_age_days,
        )
        app.state.readmehub = state

        if settings.scheduler.enabled:
            scheduler_task = asyncio.create_task(run_refresh_scheduler(state))
            stack.push_async_callback(_cancel_task, scheduler_task)

        log.info("server_started", scheduler_enabled=settings.scheduler.enabled)
        yield


async def _cancel_task(task: asyncio.Task[None]) -> None:
    task.cancel()
    with suppress(asyncio.CancelledError):
        await task


def create_app(settings: Settings | None = None) -> Starlette:
    app = Starlette(routes=ROUTES, lifespan=lifespan)
    app.state.settings = settings or Settings()
    return app


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()
    uvicorn.run(
        create_app(settings),
        host=settings.server.host,
        port=settings.server.port,
        log_config=None,  # Disable uvicorn's default logging; structlog handles it
    )


if __name__ == "__main__":
    main()
