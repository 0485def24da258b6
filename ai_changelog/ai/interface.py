"""
Abstract interface for the language-model step of ai-changelog.

The pipeline only needs one call: turn a change description into a
list of validated changelog entries. Keeping this separate from any
specific provider makes it easy to swap backends or fake the model in
tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from ..domain import ChangelogEntry, ENTRY_TYPES

PROMPT_TEMPLATE = """Analyze these code changes and generate changelog entries.

Return ONLY valid JSON with this structure:
{{
  "entries": [
    {{
      "type": "{types}",
      "category": "optional section heading",
      "scope": "string",
      "description": "concise user-facing description",
      "prNumber": "optional pull request number",
      "ticketId": "optional issue tracker id",
      "details": ["optional supporting detail"]
    }}
  ]
}}

Rules:
- Focus on user-visible changes
- Use active voice, be concise
- Use "breaking" only for backward-incompatible changes
- Skip internal refactors unless significant
- Return {{"entries": []}} when nothing is user-facing

Changes:
{payload}"""


def build_prompt(payload: str) -> str:
    return PROMPT_TEMPLATE.format(types="|".join(ENTRY_TYPES), payload=payload)


class AIClient(ABC):
    """
    Abstract interface for AI interactions.
    """

    @abstractmethod
    def generate_entries(self, payload: str) -> List[ChangelogEntry]:
        """
        Given the change description for a range, return the changelog
        entries the model proposes.

        Implementations perform exactly one request and raise a
        ChangelogError subclass on any failure; there are no retries.
        """
