"""Shared test fixtures for the readmehub test suite."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from readmehub.store import FreshnessCache

T0 = datetime(2026, 1, 1, tzinfo=UTC)

FULL_README = """\
# Awesome Open Source Israel

A curated list of open source projects made in Israel.

## Projects by main language

### JavaScript

* [lirantal/dockly](https://github.com/lirantal/dockly) - ![GitHub stars](https://img.shields.io/github/stars/lirantal/dockly?style=social) Immersive terminal interface for managing docker containers
* [snyk](https://github.com/snyk) - Security tooling organization
* [website](https://example.com/thing) - Not hosted on GitHub

### Python

* [wix/pyuv](https://github.com/wix/pyuv/tree/main) - Python interface for libuv
- [not a link] - dropped

## Companies

* [Wix](https://github.com/wix)
* [Monday](https://monday.com)
* [Snyk](https://github.com/snyk)

## License

* [CC0](https://github.com/cc0)
"""

MINIMAL_README = """\
## Projects by main language

### Go

* [acme/rocket](https://github.com/acme/rocket) - Launches things

## Companies

* [Acme](https://github.com/acme)
"""


@pytest.fixture()
def full_readme() -> str:
    return FULL_README


@pytest.fixture()
def minimal_readme() -> str:
    return MINIMAL_README


@pytest.fixture()
def cache() -> FreshnessCache:
    return FreshnessCache()


@pytest.fixture()
def repository_node() -> Callable[..., dict[str, Any]]:
    """Factory for GraphQL ``Repository`` nodes."""

    def _make(name_with_owner: str, stars: int = 42, issues: int = 3) -> dict[str, Any]:
        return {
            "openIssues": {"totalCount": issues},
            "stargazerCount": stars,
            "nameWithOwner": name_with_owner,
            "languages": {
                "totalSize": 1500,
                "edges": [
                    {"size": 1000, "node": {"name": "Go"}},
                    {"size": 400, "node": {"name": "Shell"}},
                    {"size": 100, "node": {"name": "Makefile"}},
                ],
            },
            "openGraphImageUrl": f"https://opengraph.githubassets.com/1/{name_with_owner}",
            "description": f"{name_with_owner} description",
            "defaultBranchRef": {"target": {"committedDate": "2026-10-01T12:00:00Z"}},
        }

    return _make


@pytest.fixture()
def organization_node(
    repository_node: Callable[..., dict[str, Any]],
) -> Callable[..., dict[str, Any]]:
    """Factory for GraphQL ``Organization`` nodes."""

    def _make(login: str, repos: tuple[str, ...] = ()) -> dict[str, Any]:
        return {
            "name": login.title(),
            "avatarUrl": f"https://avatars.githubusercontent.com/{login}",
            "login": login,
            "repositories": {"nodes": [repository_node(f"{login}/{repo}") for repo in repos]},
        }

    return _make


class FakeClock:
    """Manually advanced clock for FreshnessCache."""

    def __init__(self, now: datetime = T0) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()
