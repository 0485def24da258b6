"""
Noise filtering and scope assignment for changed files.

Both functions here are pure: they depend only on the path string and
the patterns passed in, never on git or on global configuration.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, Mapping, Optional, Pattern

_CONFIG_FILE_NAMES = {
    "package.json",
    "pyproject.toml",
    "setup.cfg",
    "setup.py",
    "tsconfig.json",
    "dockerfile",
    "makefile",
}
_CONFIG_DIRS = {"config", "configs", ".github", ".circleci"}
_TEST_DIRS = {"test", "tests", "__tests__", "spec", "specs"}
_DOC_DIRS = {"doc", "docs", "documentation"}
_DOC_SUFFIXES = (".md", ".rst", ".adoc")


@lru_cache(maxsize=256)
def _ignore_regex(pattern: str) -> Pattern[str]:
    # '*' matches any run of characters, including '/'; unanchored.
    return re.compile(".*".join(re.escape(part) for part in pattern.split("*")))


@lru_cache(maxsize=256)
def _scope_regex(pattern: str) -> Pattern[str]:
    parts = []
    for chunk in re.split(r"(\*\*|\*)", pattern):
        if chunk == "**":
            parts.append(".*")
        elif chunk == "*":
            parts.append("[^/]*")
        else:
            parts.append(re.escape(chunk))
    return re.compile("".join(parts))


def should_ignore(path: str, patterns: Iterable[str]) -> bool:
    """
    Return True if the path matches any ignore pattern.

    A trailing '/' makes a pattern a directory prefix. Patterns with '*'
    are loose unanchored wildcards. Anything else matches when it occurs
    anywhere in the path.
    """

    for pattern in patterns:
        if not pattern:
            continue
        if pattern.endswith("/"):
            if path.startswith(pattern):
                return True
        elif "*" in pattern:
            if _ignore_regex(pattern).search(path):
                return True
        elif pattern in path or path.endswith(pattern):
            return True
    return False


def get_scope(path: str, scope_mapping: Mapping[str, str]) -> str:
    """
    Return the logical scope for a changed file.

    Explicit mapping rules are tried first, in mapping order. Without a
    match the scope comes from path heuristics: config, test and doc
    hints, then the package under src/, then the top-level directory,
    and finally "core" for files at the repository root.
    """

    for pattern, scope in scope_mapping.items():
        if _scope_regex(pattern).search(path):
            return scope

    hint = _hinted_scope(path)
    if hint:
        return hint

    parts = [p for p in path.split("/") if p]
    if len(parts) >= 3 and parts[0] == "src":
        return parts[1]
    if len(parts) > 1:
        return parts[0]
    return "core"


def _hinted_scope(path: str) -> Optional[str]:
    parts = [p.lower() for p in path.split("/") if p]
    if not parts:
        return None
    name = parts[-1]
    dirs = parts[:-1]

    if name in _CONFIG_FILE_NAMES or ".config." in name or (dirs and dirs[0] in _CONFIG_DIRS):
        return "config"
    if (
        any(d in _TEST_DIRS for d in dirs)
        or ".test." in name
        or ".spec." in name
        or name.startswith("test_")
    ):
        return "tests"
    if (dirs and dirs[0] in _DOC_DIRS) or name.endswith(_DOC_SUFFIXES):
        return "docs"
    return None
