"""In-memory join of library files and their metadata."""

from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from uuid import UUID

from collect.palette import (
    CATEGORY_PALETTE,
    UNCATEGORIZED,
    UNCATEGORIZED_COLOR,
    next_category_color,
)
from collect.state import MetadataStore
from collect.state.models import Metadata, utcnow

from .errors import CategoryError, LibraryError
from .models import Category, FileRecord, IndexChange, Selection, SortOption, ViewFilter

LOGGER = logging.getLogger(__name__)

Listener = Callable[[IndexChange], None]


class LibraryIndex:
    """Hold the live file set and metadata, and derive views from them.

    Queries are pure reads of the current state. Mutations update memory first,
    recompute categories, write through to the ``MetadataStore``, and notify
    subscribers. A failed write leaves memory updated and propagates the error.
    All mutations are expected to run on a single control thread.
    """

    def __init__(
        self,
        store: MetadataStore,
        *,
        metadata: Optional[Dict[UUID, Metadata]] = None,
        tag_colors: Optional[Dict[str, str]] = None,
        recent_days: int = 7,
        palette: Sequence[str] = CATEGORY_PALETTE,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self._palette = tuple(palette)
        self._clock = clock
        self._listeners: List[Listener] = []
        self.recent_days = recent_days
        self.files: Dict[UUID, FileRecord] = {}
        self.metadata: Dict[UUID, Metadata] = dict(metadata or {})
        self.tag_colors: Dict[str, str] = dict(tag_colors or {})
        self.categories: List[Category] = []
        self.selection = Selection()

    @classmethod
    def from_store(cls, store: MetadataStore, **kwargs) -> "LibraryIndex":
        """Create an index seeded with whatever ``store`` currently holds."""
        metadata, tag_colors = store.load()
        return cls(store, metadata=metadata, tag_colors=tag_colors, **kwargs)

    @property
    def store(self) -> MetadataStore:
        return self._store

    # ------------------------------------------------------------------ #
    # Change notification                                                #
    # ------------------------------------------------------------------ #

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for change events and return an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _emit(self, kind: str, *ids: UUID) -> None:
        change = IndexChange(kind=kind, ids=frozenset(ids))
        for listener in list(self._listeners):
            listener(change)

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    def get(self, file_id: UUID) -> FileRecord:
        """Return the file record for ``file_id``.

        Raises:
            LibraryError: If no such file is in the library.
        """
        try:
            return self.files[file_id]
        except KeyError:
            raise LibraryError(f"No document with id {file_id} in the library.") from None

    def title_for(self, file_id: UUID) -> str:
        """Return the display title, falling back to the filename."""
        meta = self.metadata.get(file_id)
        if meta is not None and meta.title:
            return meta.title
        return self.get(file_id).filename

    def tags_for(self, file_id: UUID) -> List[str]:
        meta = self.metadata.get(file_id)
        return list(meta.tags) if meta is not None else []

    def filtered_files(self, selection: Optional[Selection] = None) -> List[FileRecord]:
        """Return files passing the view, category, author, and search filters, sorted.

        A file passes the category filter when it matches any selected category,
        and the author filter when it shares any author with the selection. The
        filters themselves combine with AND.
        """
        selection = selection or self.selection
        needle = selection.search_text.casefold()
        recent_cutoff = self._recent_cutoff()

        matched: List[FileRecord] = []
        for record in self.files.values():
            meta = self.metadata.get(record.id)
            if selection.view is ViewFilter.RECENT and record.date_added <= recent_cutoff:
                continue
            if selection.view is ViewFilter.READING_LIST and not (
                meta is not None and meta.is_in_reading_list
            ):
                continue
            if selection.categories and not any(
                _in_category(meta, name) for name in selection.categories
            ):
                continue
            if selection.authors and not (
                meta is not None and selection.authors.intersection(meta.authors)
            ):
                continue
            if needle and not _matches_search(record, meta, needle):
                continue
            matched.append(record)

        return self._sorted(matched, selection.sort)

    def all_authors(self) -> List[str]:
        """Return every author referenced by a live document, deduplicated and sorted."""
        return sorted(self.author_counts())

    def author_counts(self) -> Dict[str, int]:
        """Return the number of live documents referencing each author."""
        return _count_authors(self.metadata.get(file_id) for file_id in self.files)

    def filtered_author_counts(self, selection: Optional[Selection] = None) -> Dict[str, int]:
        """Return ``author_counts`` restricted to ``filtered_files``."""
        return _count_authors(
            self.metadata.get(record.id) for record in self.filtered_files(selection)
        )

    def recent_files(self) -> List[FileRecord]:
        """Return files added within the trailing ``recent_days`` window."""
        cutoff = self._recent_cutoff()
        return [record for record in self.files.values() if record.date_added > cutoff]

    def last_opened_files(self, limit: Optional[int] = None) -> List[FileRecord]:
        """Return files by ``last_opened`` descending; never-opened files come last."""
        ordered = self._sorted(list(self.files.values()), SortOption.RECENTLY_OPENED)
        return ordered[:limit] if limit is not None else ordered

    def last_added_files(self, limit: Optional[int] = None) -> List[FileRecord]:
        """Return files by ``date_added`` descending."""
        ordered = self._sorted(list(self.files.values()), SortOption.RECENTLY_ADDED)
        return ordered[:limit] if limit is not None else ordered

    def reading_list_files(self) -> List[FileRecord]:
        return [
            record
            for record in self.files.values()
            if (meta := self.metadata.get(record.id)) is not None and meta.is_in_reading_list
        ]

    def reading_list_count(self) -> int:
        return len(self.reading_list_files())

    def update_categories(self) -> List[Category]:
        """Recompute ``categories`` from the tags of every live document.

        Tags without a color get the next unused palette color, which is
        recorded in ``tag_colors`` and kept from then on. Categories are sorted by
        name, with Uncategorized first whenever it has members.
        """
        counts: Counter[str] = Counter()
        uncategorized = 0
        for file_id in self.files:
            meta = self.metadata.get(file_id)
            if meta is None or not meta.tags:
                uncategorized += 1
                continue
            counts.update(meta.tags)

        categories: List[Category] = []
        for name in sorted(counts):
            color = self.tag_colors.get(name)
            if color is None:
                color = next_category_color(self.tag_colors, self._palette)
                self.tag_colors[name] = color
            categories.append(Category(name=name, color=color, item_count=counts[name]))

        if uncategorized:
            categories.insert(
                0,
                Category(name=UNCATEGORIZED, color=UNCATEGORIZED_COLOR, item_count=uncategorized),
            )
        self.categories = categories
        return categories

    # ------------------------------------------------------------------ #
    # Mutations                                                          #
    # ------------------------------------------------------------------ #

    def set_files(self, files: Iterable[FileRecord]) -> None:
        """Replace the file set and recompute categories."""
        self.files = {record.id: record for record in files}
        self.update_categories()
        self._emit("files")

    def register(self, record: FileRecord, metadata: Metadata) -> None:
        """Add one file and its metadata without persisting.

        Used by ingestion, which persists before registering.
        """
        self.files[record.id] = record
        self.metadata[record.id] = metadata
        self.update_categories()
        self._emit("ingest", record.id)

    def replace_file(self, record: FileRecord) -> None:
        """Swap in an updated record for a file already in the library."""
        self.get(record.id)
        self.files[record.id] = record
        self._emit("files", record.id)

    def remove_file(self, file_id: UUID) -> None:
        """Drop a file from the live set, leaving its metadata untouched."""
        if self.files.pop(file_id, None) is not None:
            self.update_categories()
            self._emit("files", file_id)

    def update_metadata(self, file_id: UUID, metadata: Metadata) -> None:
        """Store ``metadata`` for ``file_id`` and write it through.

        Raises:
            StateSaveError: If the snapshot could not be written. Memory keeps the edit.
        """
        self.metadata[file_id] = metadata
        self.update_categories()
        try:
            self._store.update(file_id, metadata, tag_colors=self.tag_colors)
        finally:
            self._emit("metadata", file_id)

    def delete_metadata(self, file_id: UUID) -> None:
        """Remove the metadata for ``file_id`` and write the removal through."""
        self.metadata.pop(file_id, None)
        self.update_categories()
        try:
            self._store.delete(file_id, tag_colors=self.tag_colors)
        finally:
            self._emit("metadata", file_id)

    def edit(self, file_id: UUID, **changes) -> Metadata:
        """Apply field ``changes`` to the document's metadata and persist them.

        Metadata is created with defaults first when the document has none.

        Raises:
            CategoryError: If the tags include the reserved Uncategorized name.
        """
        if UNCATEGORIZED in (tag.strip() for tag in changes.get("tags") or ()):
            raise CategoryError(f"{UNCATEGORIZED} is reserved and cannot be used as a tag.")
        current = self._metadata_or_default(file_id)
        payload = current.model_dump()
        payload.update(changes)
        updated = Metadata.model_validate(payload)
        self.update_metadata(file_id, updated)
        return updated

    def set_reading_list(self, file_id: UUID, value: bool) -> Metadata:
        return self.edit(file_id, is_in_reading_list=value)

    def toggle_reading_list(self, file_id: UUID) -> bool:
        """Flip reading-list membership and return the new state."""
        current = self._metadata_or_default(file_id)
        self.set_reading_list(file_id, not current.is_in_reading_list)
        return not current.is_in_reading_list

    def mark_opened(self, file_id: UUID, when: Optional[datetime] = None) -> Metadata:
        return self.edit(file_id, last_opened=when or self._clock())

    def create_category(self, name: str, color: Optional[str] = None) -> str:
        """Reserve a color for ``name`` before any document carries the tag.

        Returns:
            str: The color assigned to the category.
        """
        name = self._validate_category_name(name)
        self._validate_color(color)
        assigned = color or self.tag_colors.get(name) or next_category_color(
            self.tag_colors, self._palette
        )
        self.tag_colors[name] = assigned
        self.update_categories()
        self._persist_all("categories")
        return assigned

    def rename_category(self, old: str, new: str, color: Optional[str] = None) -> None:
        """Rename tag ``old`` to ``new`` on every document and move its color."""
        if old == UNCATEGORIZED:
            raise CategoryError("The Uncategorized category cannot be renamed.")
        new = self._validate_category_name(new)
        self._validate_color(color)
        if old not in self.tag_colors and not any(
            old in meta.tags for meta in self.metadata.values()
        ):
            raise CategoryError(f"No category named {old!r}.")

        previous_color = self.tag_colors.pop(old, None)
        self.tag_colors[new] = (
            color
            or self.tag_colors.get(new)
            or previous_color
            or next_category_color(self.tag_colors, self._palette)
        )
        for file_id, meta in list(self.metadata.items()):
            if old in meta.tags:
                tags = [new if tag == old else tag for tag in meta.tags]
                payload = {**meta.model_dump(), "tags": tags}
                self.metadata[file_id] = Metadata.model_validate(payload)

        if old in self.selection.categories:
            self.selection.categories = (self.selection.categories - {old}) | {new}
        self.update_categories()
        self._persist_all("categories")

    def delete_category(self, name: str) -> None:
        """Remove tag ``name`` from every document that carries it and drop its color."""
        if name == UNCATEGORIZED:
            raise CategoryError("The Uncategorized category cannot be deleted.")

        self.tag_colors.pop(name, None)
        for file_id, meta in list(self.metadata.items()):
            if name in meta.tags:
                self.metadata[file_id] = meta.model_copy(
                    update={"tags": [tag for tag in meta.tags if tag != name]}
                )

        self.selection.categories = self.selection.categories - {name}
        self.update_categories()
        self._persist_all("categories")

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _metadata_or_default(self, file_id: UUID) -> Metadata:
        meta = self.metadata.get(file_id)
        if meta is not None:
            return meta
        record = self.get(file_id)
        return self._store.create_default(file_id, title=record.filename)

    def _validate_category_name(self, name: str) -> str:
        cleaned = name.strip()
        if not cleaned:
            raise CategoryError("Category names cannot be empty.")
        if cleaned == UNCATEGORIZED:
            raise CategoryError("Uncategorized is reserved.")
        return cleaned

    def _validate_color(self, color: Optional[str]) -> None:
        if color is not None and color not in self._palette:
            choices = ", ".join(self._palette)
            raise CategoryError(f"Unknown category color {color!r}; choose from {choices}.")

    def _persist_all(self, kind: str) -> None:
        try:
            self._store.save(self.metadata, self.tag_colors)
        finally:
            self._emit(kind)

    def _recent_cutoff(self) -> datetime:
        return self._clock() - timedelta(days=self.recent_days)

    def _sorted(self, files: List[FileRecord], option: SortOption) -> List[FileRecord]:
        if option is SortOption.RECENTLY_ADDED:
            return sorted(files, key=lambda record: record.date_added, reverse=True)
        if option is SortOption.DATE_MODIFIED:
            return sorted(files, key=lambda record: record.date_modified, reverse=True)
        if option is SortOption.RECENTLY_OPENED:
            opened = [record for record in files if self._last_opened(record.id) is not None]
            never = [record for record in files if self._last_opened(record.id) is None]
            opened.sort(key=lambda record: self._last_opened(record.id), reverse=True)
            return opened + never
        if option in (SortOption.TITLE_AZ, SortOption.TITLE_ZA):
            return sorted(
                files,
                key=lambda record: self.title_for(record.id).casefold(),
                reverse=option is SortOption.TITLE_ZA,
            )
        return sorted(
            files,
            key=lambda record: self._first_author(record.id).casefold(),
            reverse=option is SortOption.AUTHOR_ZA,
        )

    def _last_opened(self, file_id: UUID) -> Optional[datetime]:
        meta = self.metadata.get(file_id)
        return meta.last_opened if meta is not None else None

    def _first_author(self, file_id: UUID) -> str:
        meta = self.metadata.get(file_id)
        return meta.authors[0] if meta is not None and meta.authors else ""


def _in_category(meta: Optional[Metadata], name: str) -> bool:
    if name == UNCATEGORIZED:
        return meta is None or not meta.tags
    return meta is not None and name in meta.tags


def _matches_search(record: FileRecord, meta: Optional[Metadata], needle: str) -> bool:
    if needle in record.filename.casefold():
        return True
    if meta is None:
        return False
    if meta.title and needle in meta.title.casefold():
        return True
    return any(needle in author.casefold() for author in meta.authors)


def _count_authors(records: Iterable[Optional[Metadata]]) -> Dict[str, int]:
    counts: Counter[str] = Counter()
    for meta in records:
        if meta is not None:
            counts.update(set(meta.authors))
    return dict(counts)


__all__ = ["LibraryIndex", "Listener"]
