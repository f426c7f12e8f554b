"""In-memory freshness cache.

Holds the three aggregates produced by a refresh under fixed keys, plus one
``last_updated`` timestamp shared by all of them. Any ``set`` moves the shared
timestamp, so the aggregates go stale together.

One instance is built by the application lifespan and injected wherever it is
needed; tests build their own and call ``clear()`` between cases.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

JSON_DATA_KEY = "jsonData"
COMPANIES_KEY = "companies"
PROJECTS_KEY = "projects"

CACHE_KEYS: tuple[str, ...] = (JSON_DATA_KEY, COMPANIES_KEY, PROJECTS_KEY)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class FreshnessCache:
    """Process-local key/value store with a single shared write timestamp."""

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._values: dict[str, Any] = {}
        self._last_updated: datetime | None = None

    @property
    def last_updated(self) -> datetime | None:
        return self._last_updated

    def get(self, key: str) -> Any | None:
        return self._values.get(key)

    def set(self, key: str, value: Any) -> None:
        self._last_updated = self._clock()
        self._values[key] = value

    def is_fresh(self, max_age_days: float) -> bool:
        """True iff every cache key is populated and the data is young enough.

        The boundary is inclusive: data exactly ``max_age_days`` old is fresh.
        """
        if self._last_updated is None:
            return False
        if any(self._values.get(key) is None for key in CACHE_KEYS):
            return False
        return self._clock() - self._last_updated <= timedelta(days=max_age_days)

    def clear(self) -> None:
        self._values.clear()
        self._last_updated = None
