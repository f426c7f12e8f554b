"""List-item classifier.

Turns one README bullet into a ``CompanyRef``, a ``ProjectRef`` or ``None``.
Classification is best-effort over a loosely structured document: an item that
does not match is dropped, never raised.
"""

from __future__ import annotations

import re
from urllib.parse import urlparse

from readmehub.models.readme import CompanyRef, ProjectRef

_BADGE = r"!\[[^\]]*\]\([^)]*\)"
# A link label may itself hold one image, e.g. a stars badge
_LINK = rf"\[(?P<label>(?:{_BADGE}|[^\]])+)\]\((?P<url>[^)\s]+)\)"

_LINK_RE = re.compile(_LINK)
_PROJECT_RE = re.compile(rf"{_LINK}\s+-\s+(?P<description>.+)")
_BADGE_RE = re.compile(_BADGE)


def _path_segments(url: str, host: str) -> list[str] | None:
    """Return the non-empty path segments of ``url``, or None when off-host."""
    parsed = urlparse(url)
    hostname = (parsed.hostname or "").lower().removeprefix("www.")
    if hostname != host.lower():
        return None
    return [segment for segment in parsed.path.split("/") if segment]


def strip_badges(text: str) -> str:
    """Remove inline image markup (shields.io badges and the like)."""
    return _BADGE_RE.sub("", text).strip()


def classify_company_item(item: str, host: str) -> CompanyRef | None:
    """Classify a bullet from the companies section."""
    match = _LINK_RE.search(item)
    if match is None:
        return None

    segments = _path_segments(match.group("url"), host)
    if not segments:
        return None

    return CompanyRef(name=segments[0])


def classify_project_item(item: str, host: str) -> ProjectRef | CompanyRef | None:
    """Classify a bullet from the projects section.

    A link to an organization root (owner only, no repository) is reclassified
    as a ``CompanyRef``. Anything deeper than ``owner/repo`` is truncated to it.
    """
    match = _PROJECT_RE.search(item)
    if match is None:
        return None

    segments = _path_segments(match.group("url"), host)
    if not segments:
        return None

    if len(segments) == 1:
        return CompanyRef(name=segments[0])

    owner, repo = segments[0], segments[1].removesuffix(".git")
    if not repo:
        return CompanyRef(name=owner)

    return ProjectRef(
        name=f"{owner}/{repo}",
        description=strip_badges(match.group("description")),
    )


def classify_items(
    company_items: list[str],
    project_items: list[str],
    host: str,
) -> tuple[list[CompanyRef], list[ProjectRef]]:
    """Classify both sections into one company list and one project list.

    Companies from the companies section come first, in source order, followed
    by organization links reclassified out of the projects section.
    """
    company_results = [classify_company_item(item, host) for item in company_items]
    project_results = [classify_project_item(item, host) for item in project_items]

    # Drop unclassifiable items
    companies = [ref for ref in company_results if ref is not None]
    companies.extend(ref for ref in project_results if isinstance(ref, CompanyRef))
    projects = [ref for ref in project_results if isinstance(ref, ProjectRef)]

    return companies, projects
