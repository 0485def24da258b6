"""
Git integration for ai-changelog.

Every interaction with the git CLI goes through _run_git. The query
helpers built on top of it are read-only and deliberately soft: a
failing git command (no upstream, unknown ref, not fetched yet) yields
an empty result and a debug log line so the pipeline can degrade
gracefully. Callers that genuinely need a value check for emptiness
and raise their own error.
"""

from __future__ import annotations

import logging
import re
import subprocess
from typing import List, Optional

from .errors import GitError

LOG = logging.getLogger(__name__)

_REFLOG_CHECKOUT_RE = re.compile(r"^checkout: moving from (?P<src>\S+) to (?P<dst>\S+)$")
_REFLOG_DEPTH = 200


def _run_git(
    args: list[str],
    cwd: Optional[str] = None,
    input_text: Optional[str] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command and return the completed process.

    Raises GitError when git cannot be executed or exits non-zero; the
    error message carries the command line and git's stderr.
    """

    cmd = ["git", *args]
    LOG.debug("Running git command: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            # Non-UTF-8 file contents decode with replacement characters.
            encoding="utf-8",
            errors="replace",
            capture_output=True,
            input=input_text,
        )
    except OSError as exc:
        raise GitError(f"failed to execute git: {exc}") from exc

    if completed.returncode != 0:
        stderr = (completed.stderr or "").strip()
        LOG.debug("git stderr: %s", stderr)
        message = f"git command failed: {' '.join(cmd)}"
        if stderr:
            message = f"{message}: {stderr}"
        raise GitError(message)

    return completed


def _git_output(args: list[str], cwd: Optional[str] = None) -> str:
    """
    Return the stripped stdout of a git command, or "" if it fails.
    """

    try:
        return _run_git(args, cwd=cwd).stdout.strip()
    except GitError as exc:
        LOG.debug("Ignoring git failure: %s", exc)
        return ""


def _lines(output: str) -> List[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def is_inside_work_tree(cwd: Optional[str] = None) -> bool:
    return _git_output(["rev-parse", "--is-inside-work-tree"], cwd=cwd) == "true"


def get_repo_root(cwd: Optional[str] = None) -> str:
    return _git_output(["rev-parse", "--show-toplevel"], cwd=cwd)


def get_current_branch(cwd: Optional[str] = None) -> str:
    """
    Return the checked-out branch name, or "" when HEAD is detached.
    """

    return _git_output(["symbolic-ref", "--quiet", "--short", "HEAD"], cwd=cwd)


def list_local_branches(cwd: Optional[str] = None) -> List[str]:
    return _lines(
        _git_output(["for-each-ref", "--format=%(refname:short)", "refs/heads"], cwd=cwd)
    )


def list_remote_branches(cwd: Optional[str] = None) -> List[str]:
    """
    Return remote-tracking branches as ``<remote>/<branch>``.

    Symbolic ``<remote>/HEAD`` entries are skipped.
    """

    names = _lines(
        _git_output(["for-each-ref", "--format=%(refname:short)", "refs/remotes"], cwd=cwd)
    )
    return [name for name in names if "/" in name and not name.endswith("/HEAD")]


def list_remotes(cwd: Optional[str] = None) -> List[str]:
    return _lines(_git_output(["remote"], cwd=cwd))


def get_remote_url(remote: str = "origin", cwd: Optional[str] = None) -> str:
    return _git_output(["remote", "get-url", remote], cwd=cwd)


def get_upstream(cwd: Optional[str] = None) -> str:
    return _git_output(["rev-parse", "--abbrev-ref", "@{upstream}"], cwd=cwd)


def ref_exists(ref: str, cwd: Optional[str] = None) -> bool:
    return bool(_git_output(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"], cwd=cwd))


def get_recent_checkouts(cwd: Optional[str] = None) -> List[str]:
    """
    Return branch names recently checked out, most recent first.

    Names come from the destination of ``checkout: moving from A to B``
    reflog records and are de-duplicated keeping the newest occurrence.
    """

    output = _git_output(
        ["reflog", "show", "--format=%gs", "-n", str(_REFLOG_DEPTH), "HEAD"],
        cwd=cwd,
    )
    seen: set[str] = set()
    recent: List[str] = []
    for line in _lines(output):
        match = _REFLOG_CHECKOUT_RE.match(line)
        if not match:
            continue
        name = match.group("dst")
        if name not in seen:
            seen.add(name)
            recent.append(name)
    return recent


def count_commits(range_: str, cwd: Optional[str] = None) -> int:
    output = _git_output(["rev-list", "--count", range_], cwd=cwd)
    try:
        return int(output)
    except ValueError:
        return 0


def get_changed_files(range_: str, cwd: Optional[str] = None) -> List[str]:
    return _lines(_git_output(["diff", "--name-only", range_], cwd=cwd))


def get_file_diff(range_: str, path: str, cwd: Optional[str] = None) -> str:
    # Not stripped: leading blank lines belong to the diff text.
    try:
        return _run_git(["diff", range_, "--", path], cwd=cwd).stdout
    except GitError as exc:
        LOG.debug("Ignoring git failure: %s", exc)
        return ""


def get_commit_subjects(
    range_: str,
    path: Optional[str] = None,
    cwd: Optional[str] = None,
) -> List[str]:
    """
    Return commit subject lines in the range, newest first.

    When path is given only commits touching that file are listed.
    """

    args = ["log", "--format=%s", range_]
    if path is not None:
        args.extend(["--", path])
    return _lines(_git_output(args, cwd=cwd))


def fetch_remote(remote: str = "origin", cwd: Optional[str] = None) -> bool:
    """
    Fetch from the remote so remote-tracking branches are current.

    Returns False (after logging) if the fetch fails, e.g. offline.
    """

    try:
        _run_git(["fetch", "--quiet", remote], cwd=cwd)
    except GitError as exc:
        LOG.debug("Fetch from %s failed: %s", remote, exc)
        return False
    return True


def get_hooks_dir(cwd: Optional[str] = None) -> str:
    return _git_output(["rev-parse", "--git-path", "hooks"], cwd=cwd)
