"""
Render changelog entries as markdown.

Breaking changes always come first under their own heading. Everything
else is grouped by category in a fixed canonical order, with categories
the model invented appended in the order they were first seen. Large
categories are split into scope sub-sections.

Rendering is deterministic: the version and date are passed in, so the
same entries always produce the same text.
"""

from __future__ import annotations

import datetime
import re
from typing import Dict, List, Optional, Sequence

from .config import PlatformConfig
from .domain import ChangelogEntry

BREAKING_CATEGORY = "💥 Breaking Changes"
OTHER_CATEGORY = "📝 Other Changes"

TYPE_CATEGORIES: Dict[str, str] = {
    "breaking": BREAKING_CATEGORY,
    "feat": "🚀 Features",
    "improve": "⚡ Improvements",
    "fix": "🐛 Bug Fixes",
    "refactor": "♻️ Refactoring",
    "docs": "📚 Documentation",
    "test": "🧪 Tests",
}

CANONICAL_ORDER: List[str] = list(TYPE_CATEGORIES.values())

SCOPE_GROUP_THRESHOLD = 5

DEFAULT_VERSION = "0.0.1"

PR_PATHS: Dict[str, str] = {
    "github": "/pull/{number}",
    "gitlab": "/-/merge_requests/{number}",
    "bitbucket": "/pull-requests/{number}",
    "azure": "/pullrequest/{number}",
}

_VERSION_HEADER_RE = re.compile(r"^## \[(\d+)\.(\d+)\.(\d+)\]", re.MULTILINE)


def latest_version(existing: str) -> Optional[str]:
    """
    Return the newest ``## [X.Y.Z]`` version in a changelog.

    Changelogs list the newest release first, so this is the first
    version header in the text.
    """

    match = _VERSION_HEADER_RE.search(existing)
    if match is None:
        return None
    return ".".join(match.groups())


def next_version(existing: str, auto_increment: bool = True) -> str:
    """
    Derive the version for the section about to be written.

    With auto_increment the patch number of the latest version is
    bumped; without it the latest version is reused. A changelog with
    no versions starts at 0.0.1.
    """

    latest = latest_version(existing)
    if latest is None:
        return DEFAULT_VERSION
    if not auto_increment:
        return latest
    major, minor, patch = (int(part) for part in latest.split("."))
    return f"{major}.{minor}.{patch + 1}"


def category_for(entry: ChangelogEntry) -> str:
    if entry.is_breaking:
        return BREAKING_CATEGORY
    if entry.category:
        return entry.category
    return TYPE_CATEGORIES.get(entry.type, OTHER_CATEGORY)


def group_by_category(entries: Sequence[ChangelogEntry]) -> Dict[str, List[ChangelogEntry]]:
    """
    Group entries into categories in rendering order.

    Breaking entries are collected first regardless of any category
    they declare. Known categories follow in canonical order, then any
    other categories in encounter order, then Other Changes.
    """

    buckets: Dict[str, List[ChangelogEntry]] = {}
    for entry in entries:
        buckets.setdefault(category_for(entry), []).append(entry)

    ordered: Dict[str, List[ChangelogEntry]] = {}
    for name in CANONICAL_ORDER:
        if name in buckets:
            ordered[name] = buckets[name]
    for name, items in buckets.items():
        if name not in ordered and name != OTHER_CATEGORY:
            ordered[name] = items
    if OTHER_CATEGORY in buckets:
        ordered[OTHER_CATEGORY] = buckets[OTHER_CATEGORY]
    return ordered


def format_pr_link(number: str, platform: PlatformConfig) -> str:
    if not platform.repo_url:
        return f"#{number}"
    path = PR_PATHS.get(platform.name, PR_PATHS["github"]).format(number=number)
    return f"[#{number}]({platform.repo_url.rstrip('/')}{path})"


def format_ticket(ticket_id: str, platform: PlatformConfig) -> str:
    if platform.ticket_url_template:
        url = platform.ticket_url_template.replace("${ticketId}", ticket_id)
        return f"[{ticket_id}]({url})"
    return f"`{ticket_id}`"


def format_entry(
    entry: ChangelogEntry,
    platform: PlatformConfig,
    include_scope: bool = True,
) -> str:
    text = entry.description
    if include_scope and not entry.has_general_scope:
        text = f"**{entry.scope}**: {text}"

    refs = []
    if entry.pr_number:
        refs.append(format_pr_link(entry.pr_number, platform))
    if entry.ticket_id:
        refs.append(format_ticket(entry.ticket_id, platform))
    if refs:
        text = f"{text} ({', '.join(refs)})"

    lines = [f"- {text}"]
    lines.extend(f"  - {detail}" for detail in entry.details)
    return "\n".join(lines)


def _format_category(
    name: str,
    entries: Sequence[ChangelogEntry],
    platform: PlatformConfig,
) -> List[str]:
    lines = [f"### {name}", ""]

    if len(entries) <= SCOPE_GROUP_THRESHOLD:
        lines.extend(format_entry(entry, platform) for entry in entries)
        lines.append("")
        return lines

    general = [entry for entry in entries if entry.has_general_scope]
    scoped: Dict[str, List[ChangelogEntry]] = {}
    for entry in entries:
        if not entry.has_general_scope:
            scoped.setdefault(entry.scope, []).append(entry)

    if general:
        lines.extend(format_entry(entry, platform, include_scope=False) for entry in general)
        lines.append("")
    for scope, items in scoped.items():
        lines.append(f"#### {scope}")
        lines.append("")
        lines.extend(format_entry(entry, platform, include_scope=False) for entry in items)
        lines.append("")
    return lines


def format_entries(entries: Sequence[ChangelogEntry], platform: PlatformConfig) -> str:
    """
    Render the category sections for entries, without a version header.
    """

    lines: List[str] = []
    for name, items in group_by_category(entries).items():
        lines.extend(_format_category(name, items, platform))
    return "\n".join(lines).rstrip() + "\n"


def format_section(
    entries: Sequence[ChangelogEntry],
    platform: PlatformConfig,
    version: str,
    date: Optional[datetime.date] = None,
) -> str:
    """
    Render a complete versioned changelog section.
    """

    if date is None:
        date = datetime.date.today()
    header = f"## [{version}] - {date.isoformat()}"
    return f"{header}\n\n{format_entries(entries, platform)}"


def compare_url(base: str, head: str, platform: PlatformConfig) -> Optional[str]:
    """
    Return a web URL comparing base to head on the hosting platform.
    """

    if not platform.repo_url:
        return None
    repo = platform.repo_url.rstrip("/")
    if platform.name == "gitlab":
        return f"{repo}/-/compare/{base}...{head}"
    if platform.name == "bitbucket":
        return f"{repo}/branches/compare/{head}%0D{base}"
    if platform.name == "azure":
        return f"{repo}/branchCompare?baseVersion=GB{base}&targetVersion=GB{head}"
    return f"{repo}/compare/{base}...{head}"
