"""Persisted metadata models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Metadata(_SnapshotModel):
    """User-authored metadata for one library document.

    Attributes:
        id: Identifier of the document, shared with its file record.
        title: Display title; the filename is shown when unset.
        authors: Authors in display order.
        year: Publication year.
        tags: Tag names, stripped; blank and duplicate tags are dropped, first order kept.
        notes: Free-form notes.
        date_added: When the document first entered the library.
        card_color: Card palette label.
        pages: Page count, when known.
        last_opened: When the document was last opened through the library.
        is_in_reading_list: Whether the document is on the reading list.
    """

    id: UUID
    title: Optional[str] = None
    authors: List[str] = Field(default_factory=list)
    year: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    date_added: datetime = Field(default_factory=utcnow)
    card_color: str = "cardTan"
    pages: Optional[int] = None
    last_opened: Optional[datetime] = None
    is_in_reading_list: bool = False

    @field_validator("tags")
    @classmethod
    def _clean_tags(cls, values: List[str]) -> List[str]:
        seen: set[str] = set()
        unique: List[str] = []
        for value in values:
            value = value.strip()
            if not value or value in seen:
                continue
            seen.add(value)
            unique.append(value)
        return unique

    @field_validator("date_added", "last_opened")
    @classmethod
    def _assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class LibrarySnapshot(_SnapshotModel):
    """The whole persisted document: every metadata record plus tag colors."""

    metadata: List[Metadata] = Field(default_factory=list)
    tag_colors: Dict[str, str] = Field(default_factory=dict)


__all__ = ["Metadata", "LibrarySnapshot", "utcnow"]
