"""README parser.

A pipeline of pure functions over the awesome-list markdown:

    document -> sections -> language groups -> list items -> classified refs

The companies section is a flat bullet list. The projects section is grouped
under one level-3 heading per main language. Bullets inside fenced code blocks
are ignored.
"""

from __future__ import annotations

import re

from readmehub.classifier import classify_items
from readmehub.errors import ParseError, StructureError
from readmehub.models.readme import LanguageGroup, ParsedReadme, Sections

COMPANIES_HEADING = "Companies"
PROJECTS_HEADING = "Projects by main language"

_LIST_ITEM_RE = re.compile(r"^[ \t]*[*-][ \t]+(.+?)[ \t]*$")
_LANGUAGE_HEADING_RE = re.compile(r"^\s?###(?!#)[ \t]*(\S.*?)\s*$")


def _section_re(title: str) -> re.Pattern[str]:
    # A section runs until the next level-1 or level-2 heading, or end of input.
    return re.compile(
        rf"(?:^|\n)## {re.escape(title)}[^\n]*(.*?)(?=\n##?\s|\Z)",
        re.DOTALL,
    )


_COMPANIES_RE = _section_re(COMPANIES_HEADING)
_PROJECTS_RE = _section_re(PROJECTS_HEADING)


def extract_sections(doc: str) -> Sections:
    """Return the raw text of the companies and projects sections.

    Raises StructureError when either heading is missing.
    """
    companies = _COMPANIES_RE.search(doc)
    if companies is None:
        raise StructureError(f"README has no '## {COMPANIES_HEADING}' section")

    projects = _PROJECTS_RE.search(doc)
    if projects is None:
        raise StructureError(f"README has no '## {PROJECTS_HEADING}' section")

    return Sections(
        companies_text=companies.group(1).strip("\n"),
        projects_text=projects.group(1).strip("\n"),
    )


def _iter_unfenced_lines(text: str):
    """Yield lines outside fenced code blocks."""
    in_code_block = False
    fence: str | None = None

    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("```") or stripped.startswith("~~~"):
            current_fence = stripped[:3]
            if not in_code_block:
                in_code_block = True
                fence = current_fence
            elif current_fence == fence:
                in_code_block = False
                fence = None
            continue

        if not in_code_block:
            yield line


def split_list_items(section_text: str) -> list[str]:
    """Return the text of every bullet line, bullet marker removed, in order."""
    items: list[str] = []
    for line in _iter_unfenced_lines(section_text):
        match = _LIST_ITEM_RE.match(line)
        if match:
            items.append(match.group(1))
    return items


def split_language_groups(projects_text: str) -> list[LanguageGroup]:
    """Split the projects section into one block per ``### <Language>`` heading.

    Text before the first language heading belongs to no group and is dropped.
    """
    groups: list[LanguageGroup] = []
    label: str | None = None
    body: list[str] = []

    for line in _iter_unfenced_lines(projects_text):
        match = _LANGUAGE_HEADING_RE.match(line)
        if match:
            if label is not None:
                groups.append(LanguageGroup(label=label, text="\n".join(body)))
            label = match.group(1)
            body = []
            continue
        if label is not None:
            body.append(line)

    if label is not None:
        groups.append(LanguageGroup(label=label, text="\n".join(body)))

    return groups


def parse_readme(doc: str, host: str) -> ParsedReadme:
    """Run the full parsing pipeline over a README document.

    Raises StructureError for a missing section and ParseError when the
    companies, projects or language groups come out empty.
    """
    sections = extract_sections(doc)

    company_items = split_list_items(sections.companies_text)
    groups = split_language_groups(sections.projects_text)
    project_items = [item for group in groups for item in split_list_items(group.text)]

    companies, projects = classify_items(company_items, project_items, host)

    if not groups:
        raise ParseError("Projects section has no language groups")
    if not companies:
        raise ParseError("README yielded no companies")
    if not projects:
        raise ParseError("README yielded no projects")

    return ParsedReadme(
        companies=companies,
        projects=projects,
        languages=[group.label for group in groups],
    )
