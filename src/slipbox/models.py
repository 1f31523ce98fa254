"""Pydantic models for notes, queries and engine results."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import SlipboxError

RenameFailure = Literal["no-op", "invalid", "duplicate"]


class NoteFrontmatter(BaseModel):
    """Frontmatter block at the head of a note.

    Unknown keys are kept so that rewriting a note never drops metadata
    this package does not know about.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    title: str | None = None
    tags: list[str] = Field(default_factory=list)
    is_private: bool = Field(default=False, alias="isPrivate")
    updated_at: datetime | None = None
    gist_id: str | None = None

    @field_validator("title", "gist_id", mode="before")
    @classmethod
    def _coerce_scalar(cls, value: object) -> object:
        # YAML happily turns `title: 2024` into an int
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: object) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            value = value.split(",")
        if not isinstance(value, (list, tuple)):
            value = [value]
        tags: list[str] = []
        for item in value:
            tag = str(item).strip()
            if tag and tag not in tags:
                tags.append(tag)
        return tags


class Note(BaseModel):
    """A parsed note: raw content plus what was extracted from it."""

    id: str
    content: str
    frontmatter: NoteFrontmatter = Field(default_factory=NoteFrontmatter)
    body: str = ""
    links: list[str] = Field(default_factory=list)

    @property
    def title(self) -> str:
        return self.frontmatter.title or self.id

    @property
    def tags(self) -> list[str]:
        return self.frontmatter.tags


class WriteBatch(BaseModel):
    """A set of file mutations to apply as one atomic unit.

    Keys are storage keys ("<note id>.md"); a None value deletes the file.
    """

    files: dict[str, str | None] = Field(default_factory=dict)
    commit_message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.files

    @property
    def deleted(self) -> list[str]:
        return [key for key, value in self.files.items() if value is None]

    @property
    def written(self) -> list[str]:
        return [key for key, value in self.files.items() if value is not None]


class RenameResult(BaseModel):
    """Outcome of a single-note rename."""

    success: bool
    reason: RenameFailure | None = None
    old_id: str = ""
    new_id: str = ""
    batch: WriteBatch | None = None

    @classmethod
    def failed(cls, reason: RenameFailure, old_id: str, new_id: str) -> RenameResult:
        return cls(success=False, reason=reason, old_id=old_id, new_id=new_id)

    def to_error(self) -> SlipboxError | None:
        """Turn a failed rename into an error suitable for reporting."""
        if self.success:
            return None
        if self.reason == "invalid":
            return SlipboxError.invalid_identifier(self.new_id)
        if self.reason == "duplicate":
            return SlipboxError.duplicate_target(self.new_id)
        return SlipboxError.no_op(self.old_id, self.new_id)


class MoveResult(BaseModel):
    """Outcome of a bulk move. Skips are per item and do not fail the batch."""

    success: bool = True
    moved: int = 0
    moved_ids: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    target_folder: str = ""
    batch: WriteBatch | None = None


class QueryFilter(BaseModel):
    """A `[-]key:value[,value...]` qualifier from a search string."""

    key: str
    values: list[str]
    exclude: bool = False


class Query(BaseModel):
    """Parsed search string."""

    filters: list[QueryFilter] = Field(default_factory=list)
    terms: list[str] = Field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(self.terms)


class TagFrequency(BaseModel):
    """A tag and the number of visible notes carrying it."""

    tag: str
    count: int
