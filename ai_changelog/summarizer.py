"""
Build the prompt payload describing a git range.

For every relevant file the summarizer pulls a capped diff and the
commit subjects that touched it, then prepends a summary of the whole
range. The resulting text is sent to the model verbatim.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from . import git_adapter
from .analysis.classifier import get_scope, should_ignore
from .config import Config
from .diff_parser import capture_hunks, count_hunks
from .domain import FileChange

LOG = logging.getLogger(__name__)

BLOCK_SEPARATOR = "\n\n---\n\n"


def filter_relevant_files(files: Sequence[str], config: Config) -> List[str]:
    """
    Drop files matching the configured ignore patterns.
    """

    relevant = [path for path in files if not should_ignore(path, config.ignore)]
    LOG.debug("Ignored %d of %d changed files", len(files) - len(relevant), len(files))
    return relevant


def collect_file_changes(
    range_: str,
    files: Sequence[str],
    config: Config,
    cwd: Optional[str] = None,
) -> List[FileChange]:
    """
    Gather scope, commit subjects and capped diff for each file.
    """

    scope_mapping = config.scope_mapping
    changes: List[FileChange] = []
    for path in files:
        diff = capture_hunks(git_adapter.get_file_diff(range_, path, cwd=cwd))
        LOG.debug("%s: kept %d hunk(s)", path, count_hunks(diff))
        changes.append(
            FileChange(
                path=path,
                scope=get_scope(path, scope_mapping),
                diff=diff,
                commit_subjects=git_adapter.get_commit_subjects(range_, path, cwd=cwd),
            )
        )
    return changes


def render_file_block(change: FileChange) -> str:
    lines = [f"FILE: {change.path}", f"SCOPE: {change.scope}"]
    if change.commit_subjects:
        lines.append("COMMITS:")
        lines.extend(f"- {subject}" for subject in change.commit_subjects)
    lines.append("CHANGES:")
    lines.append(change.diff)
    return "\n".join(lines)


def render_summary_block(range_: str, subjects: Sequence[str]) -> str:
    """
    Describe the whole range: the newest subject doubles as a PR title.
    """

    title = subjects[0] if subjects else ""
    lines = [f"PR TITLE: {title}", f"RANGE: {range_}", "COMMITS:"]
    lines.extend(f"- {subject}" for subject in subjects)
    return "\n".join(lines)


def build_payload(
    range_: str,
    files: Sequence[str],
    config: Config,
    cwd: Optional[str] = None,
) -> str:
    """
    Return the complete change description for the model.
    """

    changes = collect_file_changes(range_, files, config, cwd=cwd)
    subjects = git_adapter.get_commit_subjects(range_, cwd=cwd)
    blocks = [render_summary_block(range_, subjects)]
    blocks.extend(render_file_block(change) for change in changes)
    payload = BLOCK_SEPARATOR.join(blocks)
    LOG.info("Built prompt payload for %d files (%d chars)", len(changes), len(payload))
    return payload
