"""
Core domain models for ai-changelog.

BranchCandidate and FileChange are plain dataclasses built from git
state during a single run. ChangelogEntry is the validated shape of a
model-produced entry; it is a pydantic model so malformed responses are
rejected at the parse boundary instead of leaking missing fields into
rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ENTRY_TYPES: Tuple[str, ...] = (
    "feat",
    "fix",
    "breaking",
    "improve",
    "refactor",
    "docs",
    "test",
)

GENERAL_SCOPE = "General"


@dataclass(frozen=True)
class BranchCandidate:
    """
    A branch offered by the selector.

    name is the branch name with any remote prefix stripped. remote is
    set when the branch only exists on a remote and must be resolved as
    ``<remote>/<name>``.
    """

    name: str
    is_local: bool = True
    remote: Optional[str] = None
    is_default: bool = False
    is_recent: bool = False

    @property
    def ref(self) -> str:
        if self.is_local or not self.remote:
            return self.name
        return f"{self.remote}/{self.name}"


@dataclass
class FileChange:
    """
    Everything the summarizer gathered about one changed file.
    """

    path: str
    scope: str
    diff: str
    commit_subjects: List[str] = field(default_factory=list)


class ChangelogEntry(BaseModel):
    """
    A single changelog line produced by the language model.
    """

    model_config = ConfigDict(frozen=True)

    type: str
    category: Optional[str] = None
    scope: str = ""
    description: str = Field(validation_alias=AliasChoices("description", "text"))
    pr_number: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("prNumber", "pr_number", "pr"),
    )
    ticket_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ticketId", "ticket_id", "ticket"),
    )
    details: Tuple[str, ...] = Field(
        default=(),
        validation_alias=AliasChoices("details", "evidence"),
    )

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("description")
    @classmethod
    def _require_description(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("description must not be empty")
        return value

    @field_validator("scope", mode="before")
    @classmethod
    def _strip_scope(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("category", mode="before")
    @classmethod
    def _strip_category(cls, value: Any) -> Any:
        if value is None:
            return None
        return str(value).strip() or None

    @field_validator("pr_number", "ticket_id", mode="before")
    @classmethod
    def _coerce_reference(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip().lstrip("#")
        return text or None

    @field_validator("details", mode="before")
    @classmethod
    def _coerce_details(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return value

    @property
    def is_known_type(self) -> bool:
        return self.type in ENTRY_TYPES

    @property
    def is_breaking(self) -> bool:
        return self.type == "breaking"

    @property
    def has_general_scope(self) -> bool:
        return not self.scope or self.scope.lower() == GENERAL_SCOPE.lower()
