"""
Write rendered changelog sections to disk.

In append mode the section is merged into an existing changelog right
below its title (and description paragraph, if any). In standalone mode
the target is overwritten with a self-contained preview document.
"""

from __future__ import annotations

import datetime
import logging
import re
from pathlib import Path
from typing import List, Optional, Tuple

from .config import Config, PlatformConfig
from .formatter import compare_url

LOG = logging.getLogger(__name__)

DEFAULT_TITLE = "# Changelog"
PREVIEW_TITLE = "# Changelog Preview"

_EXCESS_BLANK_LINES_RE = re.compile(r"\n{4,}")


def split_range(range_: str) -> Tuple[str, str]:
    """
    Split ``base..head`` or ``base...head`` into its two refs.

    A missing head defaults to HEAD.
    """

    separator = "..." if "..." in range_ else ".."
    base, _, head = range_.partition(separator)
    return base, head or "HEAD"


def _insertion_index(lines: List[str]) -> Optional[int]:
    """
    Return the line index after the title and its description
    paragraph, or None if the document has no first-level title.
    """

    title = next((i for i, line in enumerate(lines) if line.startswith("# ")), None)
    if title is None:
        return None

    index = title + 1
    while index < len(lines) and not lines[index].strip():
        index += 1
    if index < len(lines) and not lines[index].startswith("#"):
        while index < len(lines) and lines[index].strip():
            index += 1
        return index
    return title + 1


def merge_section(existing: str, section: str) -> str:
    """
    Insert section into an existing changelog after its title.

    Documents without a title get a default one. Runs of three or more
    blank lines are collapsed to a single blank line.
    """

    lines = existing.splitlines()
    index = _insertion_index(lines)
    if index is None:
        head = [DEFAULT_TITLE]
        tail = lines
    else:
        head = lines[:index]
        tail = lines[index:]

    while head and not head[-1].strip():
        head.pop()
    while tail and not tail[0].strip():
        tail.pop(0)

    text = "\n".join(head) + "\n\n" + section.strip("\n") + "\n"
    if tail:
        text += "\n" + "\n".join(tail) + "\n"
    return _EXCESS_BLANK_LINES_RE.sub("\n\n", text)


def standalone_document(
    section: str,
    range_: str,
    platform: PlatformConfig,
    date: Optional[datetime.date] = None,
) -> str:
    """
    Build a preview document with a footer linking to the full comparison.
    """

    if date is None:
        date = datetime.date.today()
    base, head = split_range(range_)
    url = compare_url(base, head, platform)
    if url:
        footer = f"**Full Changelog**: [{base}...{head}]({url})"
    else:
        footer = f"**Range**: `{range_}`"
    return (
        f"{PREVIEW_TITLE}\n\n{section.strip()}\n\n---\n\n{footer}\n\n"
        f"*Generated on {date.isoformat()}*\n"
    )


def read_existing(path: str) -> str:
    target = Path(path)
    if not target.is_file():
        return ""
    return target.read_text(encoding="utf-8")


def write_output(
    section: str,
    config: Config,
    range_: str,
    date: Optional[datetime.date] = None,
) -> Path:
    """
    Write section according to the configured output mode and return
    the path written.
    """

    target = Path(config.output.path)
    if config.output.mode == "append":
        content = merge_section(read_existing(str(target)), section)
    else:
        target.parent.mkdir(parents=True, exist_ok=True)
        content = standalone_document(section, range_, config.platform, date=date)

    target.write_text(content, encoding="utf-8")
    LOG.info("Wrote %d characters to %s", len(content), target)
    return target
