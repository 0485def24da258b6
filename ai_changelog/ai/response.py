"""
Turn raw model text into validated changelog entries.

Models often wrap the JSON they were asked for in prose or markdown
fences, so the first balanced ``{...}`` span is extracted before
parsing. The parsed object must carry an ``entries`` list; each entry is
validated against ChangelogEntry.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from pydantic import ValidationError

from ..domain import ChangelogEntry
from ..errors import ResponseParseError

LOG = logging.getLogger(__name__)


def extract_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` span in text, or None.

    Braces inside JSON string literals are ignored.
    """

    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : index + 1]
        # Unbalanced from this brace; try the next opening brace.
        start = text.find("{", start + 1)
    return None


def parse_entries(text: str) -> List[ChangelogEntry]:
    """
    Parse model output into entries.

    Raises ResponseParseError when no JSON object can be found, the JSON
    is invalid, or ``entries`` is missing or not a list. Individual
    entries that fail validation are skipped with a warning; entries
    with an unrecognized type are kept and flagged.
    """

    span = extract_json_object(text)
    if span is None:
        raise ResponseParseError("no JSON object found in model response", text)

    try:
        data: Any = json.loads(span)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"invalid JSON in model response: {exc}", text) from exc

    raw_entries = data.get("entries") if isinstance(data, dict) else None
    if not isinstance(raw_entries, list):
        raise ResponseParseError("model response has no 'entries' list", text)

    entries: List[ChangelogEntry] = []
    for index, raw in enumerate(raw_entries):
        try:
            entry = ChangelogEntry.model_validate(raw)
        except ValidationError as exc:
            LOG.warning(
                "Skipping malformed entry %d: %s",
                index,
                "; ".join(err["msg"] for err in exc.errors()),
            )
            continue
        if not entry.is_known_type:
            LOG.warning(
                "Entry %d has unrecognized type %r; it will be listed under Other Changes",
                index,
                entry.type,
            )
        entries.append(entry)
    return entries
