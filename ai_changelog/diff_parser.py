"""
Bounded hunk capture for ai-changelog.

The model only needs a taste of each file's changes, so a per-file diff
is reduced to its first few hunks and, within those, to the lines that
were actually added or removed. Context lines and file metadata never
reach the prompt.
"""

from __future__ import annotations

from typing import List

MAX_HUNKS_PER_FILE = 3


def capture_hunks(raw_diff: str, max_hunks: int = MAX_HUNKS_PER_FILE) -> str:
    """
    Return the first max_hunks hunks of a single-file unified diff.

    Each retained hunk keeps its ``@@`` header plus its added, removed
    and blank lines. Context lines are dropped. Any other line (a new
    file header, ``\\ No newline at end of file``) ends capture until the
    next ``@@`` header.
    """

    kept: List[str] = []
    hunks = 0
    in_hunk = False

    for line in raw_diff.splitlines():
        if line.startswith("@@"):
            if hunks >= max_hunks:
                break
            hunks += 1
            in_hunk = True
            kept.append(line)
            continue

        if not in_hunk:
            continue

        if line.startswith(("+", "-")) or line == "":
            kept.append(line)
        elif line.startswith(" "):
            continue
        else:
            in_hunk = False

    return "\n".join(kept)


def count_hunks(captured: str) -> int:
    return sum(1 for line in captured.splitlines() if line.startswith("@@"))
