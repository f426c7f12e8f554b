"""Background scheduler coroutine for periodic refreshes."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from readmehub.state import AppState

log = structlog.get_logger()


async def run_refresh_scheduler(state: AppState) -> None:
    """Trigger a refresh at startup and then every ``scheduler.interval_hours``.

    The orchestrator decides whether a trigger does any work: while the cache
    is fresh a tick is a no-op.
    """
    if state.orchestrator is None:
        log.warning("refresh_scheduler_skipped", reason="orchestrator_not_initialized")
        return

    interval_seconds = state.settings.scheduler.interval_hours * 3600

    while True:
        try:
            await state.orchestrator.refresh()
        except Exception:
            log.warning("refresh_scheduler_error", exc_info=True)
        await asyncio.sleep(interval_seconds)
