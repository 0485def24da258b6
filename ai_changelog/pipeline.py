"""
High-level orchestration for ai-changelog.

The pipeline is responsible for:
  - resolving the git range (explicit, interactive, or auto-detected),
  - dropping noise files and building the prompt payload,
  - asking the language model for entries,
  - enforcing the breaking-change policy, and
  - rendering, previewing and writing the changelog section.

Everything runs in the current working directory, one step after the
other; any failure aborts the run.
"""

from __future__ import annotations

import datetime
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from . import git_adapter
from .ai.gemini_client import GeminiClient
from .ai.interface import AIClient
from .config import Config
from .domain import GENERAL_SCOPE, ChangelogEntry
from .errors import BreakingChangesBlocked, ChangelogError, ConfigurationError, NoBaseBranchError
from .formatter import format_section, next_version
from .output import read_existing, write_output
from .selector_ui import select_branch
from .summarizer import build_payload, filter_relevant_files

LOG = logging.getLogger(__name__)

RULER = "=" * 50


def detect_base(config: Config) -> str:
    """
    Return the upstream of the current branch, else the remote's
    main/master branch, else "".
    """

    upstream = git_adapter.get_upstream()
    if upstream:
        return upstream
    for name in ("main", "master"):
        ref = f"{config.platform.remote}/{name}"
        if git_adapter.ref_exists(ref):
            return ref
    return ""


def resolve_range(config: Config, interactive: Optional[bool] = None) -> str:
    """
    Work out which commits to describe.

    An explicit range wins, then an explicit base. Otherwise the user
    picks a base branch when running in a terminal, and the base is
    auto-detected when not.
    """

    if config.range:
        return config.range
    if config.base:
        return f"{config.base}..HEAD"

    if interactive is None:
        interactive = sys.stdin.isatty() and sys.stdout.isatty()

    if interactive:
        if config.fetch:
            git_adapter.fetch_remote(config.platform.remote)
        base = select_branch(config.ui)
    else:
        base = detect_base(config)

    if not base:
        raise NoBaseBranchError(
            "could not determine a base branch; pass --base <ref> or --range <from>..<to>"
        )
    return f"{base}..HEAD"


def check_breaking_policy(entries: Sequence[ChangelogEntry], config: Config) -> None:
    """
    Stop the run if breaking changes are present and blocking is enabled.
    """

    breaking = [entry for entry in entries if entry.is_breaking]
    if not breaking or not config.block_breaking or config.breaking_ok:
        return

    print("\nBREAKING CHANGES DETECTED:")
    for entry in breaking:
        print(f"   - {entry.scope or GENERAL_SCOPE}: {entry.description}")
    raise BreakingChangesBlocked(
        f"{len(breaking)} breaking change(s) detected; "
        "re-run with BREAKING_OK=1 to write the changelog anyway"
    )


def render_changelog(
    entries: Sequence[ChangelogEntry],
    config: Config,
    today: Optional[datetime.date] = None,
) -> str:
    existing = read_existing(config.output.changelog_path)
    version = next_version(existing, auto_increment=config.output.auto_increment)
    LOG.info("Rendering %d entries as version %s", len(entries), version)
    return format_section(entries, config.platform, version, date=today)


def run_changelog(
    config: Config,
    ai_client: Optional[AIClient] = None,
    interactive: Optional[bool] = None,
    today: Optional[datetime.date] = None,
) -> Optional[Path]:
    """
    Entry point for the main CLI command.

    Returns the path written, or None when nothing was written (no
    relevant changes, no user-facing entries, or a dry run).
    """

    LOG.debug("Starting ai-changelog with config: %s", config)

    if not git_adapter.is_inside_work_tree():
        raise ConfigurationError("not inside a git repository")

    # Fail on a missing credential before doing any git work.
    client = ai_client or GeminiClient(config.ai)

    print("Analyzing changes...")
    range_ = resolve_range(config, interactive=interactive)
    all_files = git_adapter.get_changed_files(range_)
    relevant: List[str] = filter_relevant_files(all_files, config)

    commits = git_adapter.count_commits(range_)
    print(f"Range: {range_} ({commits} commits)")
    print(f"Files: {len(all_files)} total, {len(relevant)} relevant")

    if not relevant:
        print("No relevant changes found")
        return None

    payload = build_payload(range_, relevant, config)

    print("Calling AI...")
    entries = client.generate_entries(payload)
    if not entries:
        print("No user-facing changes detected")
        return None
    print(f"Generated {len(entries)} entries")

    check_breaking_policy(entries, config)

    section = render_changelog(entries, config, today=today)

    print("\nPREVIEW:")
    print(RULER)
    print(section.rstrip())
    print(RULER)

    if config.dry_run:
        print("\nDRY RUN - no files written")
        return None

    try:
        path = write_output(section, config, range_, date=today)
    except OSError as exc:
        raise ChangelogError(f"failed to write {config.output.path}: {exc}") from exc

    print(f"\nWritten to: {path}")
    return path
