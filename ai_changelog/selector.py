"""
Branch selection state for the interactive base-branch picker.

This module owns the branch list, fuzzy filtering, selection and
scrolling, and renders the screen as prompt_toolkit style fragments. It
does not own an Application; selector_ui wires key bindings to
BranchSelectorSession.handle_key and redraws after every keystroke.
"""

from __future__ import annotations

import enum
import logging
import re
from typing import List, Optional, Sequence, Tuple

from . import git_adapter
from .config import UIConfig
from .domain import BranchCandidate

LOG = logging.getLogger(__name__)

DEFAULT_BRANCH_NAMES: Tuple[str, ...] = ("master", "main")

SCORE_EXACT = 4000
SCORE_PREFIX = 3000
SCORE_SEGMENT_PREFIX = 2000
SCORE_SUBSTRING = 1000

KEY_UP = "up"
KEY_DOWN = "down"
KEY_ENTER = "enter"
KEY_ESCAPE = "escape"
KEY_BACKSPACE = "backspace"
KEY_CANCEL = "cancel"
KEY_QUIT = "q"

StyleFragment = Tuple[str, str]

_SEGMENT_SPLIT_RE = re.compile(r"[/-]")


class SelectorAction(enum.Enum):
    CONTINUE = "continue"
    SELECT = "select"
    CANCEL = "cancel"


def build_branch_list(
    local: Sequence[str],
    remote: Sequence[str],
    recent: Sequence[str],
    current: str = "",
    recent_limit: int = 10,
) -> List[BranchCandidate]:
    """
    Merge local and remote branches into one prioritized list.

    Remote names are compared with their ``<remote>/`` prefix stripped,
    so a branch present both locally and on a remote appears once. The
    order is: the default branch (first of master/main that exists),
    up to recent_limit recently checked-out branches other than the
    current one, then everything else alphabetically.
    """

    remote_of: dict[str, str] = {}
    for full_name in remote:
        remote_name, _, name = full_name.partition("/")
        if name:
            remote_of.setdefault(name, remote_name)

    local_names = set(local)
    known = local_names | set(remote_of)

    def candidate(name: str, is_default: bool = False, is_recent: bool = False) -> BranchCandidate:
        return BranchCandidate(
            name=name,
            is_local=name in local_names,
            remote=remote_of.get(name),
            is_default=is_default,
            is_recent=is_recent,
        )

    ordered: List[BranchCandidate] = []
    seen: set[str] = set()

    default = next((name for name in DEFAULT_BRANCH_NAMES if name in known), None)
    if default is not None:
        ordered.append(candidate(default, is_default=True))
        seen.add(default)

    recent_names = [name for name in recent if name != current and name in known]
    for name in recent_names[:recent_limit]:
        if name not in seen:
            ordered.append(candidate(name, is_recent=True))
            seen.add(name)

    for name in sorted(known - seen):
        ordered.append(candidate(name))

    return ordered


def score_branch(name: str, query: str) -> int:
    """
    Return how well name matches query; 0 means no match.

    Exact, prefix, path-segment prefix and substring matches each form a
    tier that outranks every plain subsequence match. A subsequence
    match scores the number of query characters matched in order.
    """

    lowered = name.lower()
    q = query.lower()
    if not q:
        return 0
    if lowered == q:
        return SCORE_EXACT
    if lowered.startswith(q):
        return SCORE_PREFIX
    if any(segment.startswith(q) for segment in _SEGMENT_SPLIT_RE.split(lowered)):
        return SCORE_SEGMENT_PREFIX
    if q in lowered:
        return SCORE_SUBSTRING

    matched = 0
    for char in lowered:
        if matched < len(q) and char == q[matched]:
            matched += 1
    return matched if matched == len(q) else 0


def filter_branches(
    branches: Sequence[BranchCandidate],
    query: str,
) -> List[BranchCandidate]:
    """
    Return branches matching query, best matches first.

    An empty query returns the list unchanged. Equal scores keep their
    original relative order.
    """

    if not query:
        return list(branches)

    scored = [(score_branch(branch.name, query), branch) for branch in branches]
    matching = [item for item in scored if item[0] > 0]
    matching.sort(key=lambda item: -item[0])
    return [branch for _, branch in matching]


class BranchSelectorSession:
    """
    State of one branch-picking session.

    The reflog-derived recent branch list is computed at most once per
    session.
    """

    def __init__(self, config: UIConfig, git=git_adapter, cwd: Optional[str] = None) -> None:
        self._config = config
        self._git = git
        self._cwd = cwd
        self._recent: Optional[List[str]] = None

        self.current_branch = git.get_current_branch(cwd=cwd)
        self.all_branches: List[BranchCandidate] = build_branch_list(
            git.list_local_branches(cwd=cwd),
            git.list_remote_branches(cwd=cwd),
            self.recent_branches,
            current=self.current_branch,
            recent_limit=config.recent_branch_limit,
        )
        self.filtered: List[BranchCandidate] = list(self.all_branches)
        self.query = ""
        self.selected_index = 0
        self.scroll_offset = 0
        LOG.debug("Branch selector loaded %d branches", len(self.all_branches))

    @property
    def recent_branches(self) -> List[str]:
        if self._recent is None:
            self._recent = self._git.get_recent_checkouts(cwd=self._cwd)
        return self._recent

    @property
    def window_size(self) -> int:
        return max(1, self._config.max_branches_display)

    @property
    def selected(self) -> Optional[BranchCandidate]:
        if not self.filtered:
            return None
        return self.filtered[self.selected_index]

    def set_query(self, query: str) -> None:
        self.query = query
        self.filtered = filter_branches(self.all_branches, query)
        self.selected_index = 0
        self.scroll_offset = 0

    def move(self, delta: int) -> None:
        if not self.filtered:
            return
        index = max(0, min(self.selected_index + delta, len(self.filtered) - 1))
        self.selected_index = index
        if index < self.scroll_offset:
            self.scroll_offset = index
        elif index >= self.scroll_offset + self.window_size:
            self.scroll_offset = index - self.window_size + 1

    def handle_key(self, key: str) -> SelectorAction:
        """
        Apply one keystroke and report whether the session is over.
        """

        if key in (KEY_CANCEL, KEY_QUIT):
            return SelectorAction.CANCEL
        if key == KEY_UP:
            self.move(-1)
        elif key == KEY_DOWN:
            self.move(1)
        elif key == KEY_ENTER:
            if self.selected is not None:
                return SelectorAction.SELECT
        elif key == KEY_ESCAPE:
            self.set_query("")
        elif key == KEY_BACKSPACE:
            if self.query:
                self.set_query(self.query[:-1])
        elif len(key) == 1 and key.isprintable():
            self.set_query(self.query + key)
        return SelectorAction.CONTINUE

    def visible_branches(self) -> List[Tuple[int, BranchCandidate]]:
        start = self.scroll_offset
        end = start + self.window_size
        return list(enumerate(self.filtered[start:end], start=start))

    def render(self) -> List[StyleFragment]:
        """
        Return the whole screen as style fragments.
        """

        frags: List[StyleFragment] = [
            ("class:title", "Select base branch\n"),
            ("class:search", f"Search: {self.query}\n\n"),
        ]

        if not self.filtered:
            if self.query:
                frags.append(("class:empty", f"  No branches match '{self.query}'\n"))
            else:
                frags.append(("class:empty", "  No branches found\n"))
        else:
            for index, branch in self.visible_branches():
                frags.extend(self._render_row(branch, index == self.selected_index))

            total = len(self.filtered)
            if total > self.window_size:
                first = self.scroll_offset + 1
                last = min(self.scroll_offset + self.window_size, total)
                frags.append(("class:scroll", f"\n  {first}-{last} of {total}\n"))

        frags.append(
            (
                "class:help",
                "\n  ↑/↓ move  Enter select  Esc clear  Backspace delete  q quit\n",
            )
        )
        return frags

    def _render_row(self, branch: BranchCandidate, is_selected: bool) -> List[StyleFragment]:
        label = ""
        if branch.is_default:
            label = " (default)"
        elif branch.is_recent:
            label = " (recent)"
        if not branch.is_local and branch.remote:
            label = f"{label} [{branch.remote}]"

        if is_selected:
            return [("class:selected", f"> {branch.name}{label}\n")]

        frags: List[StyleFragment] = [("", "  ")]
        frags.extend(highlight_matches(branch.name, self.query))
        if label:
            frags.append(("class:label", label))
        frags.append(("", "\n"))
        return frags


def highlight_matches(text: str, query: str) -> List[StyleFragment]:
    """
    Split text into fragments, marking case-insensitive occurrences of
    query with the ``class:match`` style.
    """

    if not query:
        return [("", text)]

    frags: List[StyleFragment] = []
    position = 0
    for match in re.finditer(re.escape(query), text, flags=re.IGNORECASE):
        if match.start() > position:
            frags.append(("", text[position : match.start()]))
        frags.append(("class:match", match.group(0)))
        position = match.end()
    if position < len(text):
        frags.append(("", text[position:]))
    return frags
