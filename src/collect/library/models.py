"""In-memory library models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import FrozenSet
from uuid import UUID

from pydantic import BaseModel


class FileRecord(BaseModel):
    """A document file currently present in the library.

    Attributes:
        id: Stable identifier resolved from the file's identity marker.
        path: Current location on disk.
        size_bytes: File size at the last scan.
        date_added: When the file first entered the library.
        date_modified: Filesystem modification time at the last scan.
    """

    id: UUID
    path: Path
    size_bytes: int = 0
    date_added: datetime
    date_modified: datetime

    @property
    def filename(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, file_id: UUID, path: Path, *, date_added: datetime) -> "FileRecord":
        """Build a record from the filesystem attributes of ``path``.

        Raises:
            OSError: If ``path`` cannot be stat'ed.
        """
        stat = path.stat()
        return cls(
            id=file_id,
            path=path,
            size_bytes=stat.st_size,
            date_added=date_added,
            date_modified=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
        )


class Category(BaseModel):
    """A tag grouping (or the synthetic Uncategorized group) with its live count."""

    name: str
    color: str
    item_count: int = 0


class SortOption(str, Enum):
    """Orderings available for the filtered file list."""

    RECENTLY_ADDED = "Recently Added"
    RECENTLY_OPENED = "Recently Opened"
    DATE_MODIFIED = "Date Modified"
    TITLE_AZ = "Title A-Z"
    TITLE_ZA = "Title Z-A"
    AUTHOR_AZ = "Author A-Z"
    AUTHOR_ZA = "Author Z-A"

    @classmethod
    def parse(cls, value: "str | SortOption") -> "SortOption":
        """Accept either the display label or the member name (``title_az``)."""
        if isinstance(value, cls):
            return value
        for option in cls:
            if value == option.value or value.upper() == option.name:
                return option
        raise ValueError(f"Unknown sort option: {value!r}")


class ViewFilter(str, Enum):
    """Top-level views narrowing the file list before other filters apply."""

    ALL = "all"
    RECENT = "recent"
    READING_LIST = "reading_list"


@dataclass(slots=True)
class Selection:
    """Transient browsing state applied by ``LibraryIndex.filtered_files``.

    Attributes:
        categories: Selected category names; empty means no category filter.
        authors: Selected authors; empty means no author filter.
        search_text: Case-insensitive substring matched against title, authors, filename.
        sort: Ordering of the filtered list.
        view: Top-level view.
    """

    categories: FrozenSet[str] = frozenset()
    authors: FrozenSet[str] = frozenset()
    search_text: str = ""
    sort: SortOption = SortOption.RECENTLY_OPENED
    view: ViewFilter = ViewFilter.ALL


@dataclass(slots=True, frozen=True)
class IndexChange:
    """Notification emitted after the index mutates.

    Attributes:
        kind: Mutation name, such as ``files`` or ``metadata``.
        ids: Identifiers affected; empty when the whole library changed.
    """

    kind: str
    ids: FrozenSet[UUID] = field(default_factory=frozenset)


__all__ = [
    "Category",
    "FileRecord",
    "IndexChange",
    "Selection",
    "SortOption",
    "ViewFilter",
]
