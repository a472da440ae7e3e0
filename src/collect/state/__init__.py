"""Metadata persistence for a Collect library."""

from __future__ import annotations

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple
from uuid import UUID

from pydantic import ValidationError

from collect.palette import CARD_PALETTE, stable_choice

from .errors import StateError, StateSaveError
from .models import LibrarySnapshot, Metadata, utcnow

LOGGER = logging.getLogger(__name__)

METADATA_FILENAME = "metadata.json"
SOURCES_DIRNAME = "sources"

MetadataMap = Dict[UUID, Metadata]
TagColors = Dict[str, str]


def library_data_dir(data_dir: Path, root: Path) -> Path:
    """Return the per-library directory under ``data_dir`` for ``root``.

    Each library root gets its own folder named after a digest of its resolved
    path, so metadata for different roots never mixes.
    """
    key = str(root.expanduser().resolve())
    digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
    return data_dir.expanduser() / SOURCES_DIRNAME / digest


class MetadataStore:
    """Persist library metadata as a single JSON snapshot.

    Every save rewrites the whole document. Two in-memory copies saving in turn
    will overwrite each other; callers are expected to funnel all writes through
    one control thread.
    """

    def __init__(self, path: Path, *, palette: Sequence[str] = CARD_PALETTE) -> None:
        """Initialize the store.

        Args:
            path: Location of the snapshot file.
            palette: Card colors available to new records.
        """
        self._path = path
        self._palette = tuple(palette)

    @classmethod
    def for_library(cls, data_dir: Path, root: Path) -> "MetadataStore":
        """Return the store that belongs to the library rooted at ``root``."""
        return cls(library_data_dir(data_dir, root) / METADATA_FILENAME)

    @property
    def path(self) -> Path:
        """Return the snapshot file location."""
        return self._path

    def load(self) -> Tuple[MetadataMap, TagColors]:
        """Read the snapshot from disk.

        A missing, unreadable, or malformed file yields two empty mappings. The
        failure is logged; nothing is raised and no partial recovery is tried.

        Returns:
            Tuple[MetadataMap, TagColors]: Records keyed by id, and tag colors.
        """
        if not self._path.exists():
            LOGGER.debug("No metadata snapshot at %s; starting empty.", self._path)
            return {}, {}

        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            snapshot = LibrarySnapshot.model_validate(raw)
        except (OSError, ValueError, ValidationError) as exc:
            LOGGER.warning("Discarding unreadable metadata snapshot %s: %s", self._path, exc)
            return {}, {}

        records = {record.id: record for record in snapshot.metadata}
        return records, dict(snapshot.tag_colors)

    def save(self, metadata: Mapping[UUID, Metadata], tag_colors: Mapping[str, str]) -> None:
        """Replace the snapshot on disk with ``metadata`` and ``tag_colors``.

        Args:
            metadata: Every record to persist.
            tag_colors: Complete tag color assignment.

        Raises:
            StateSaveError: If the file cannot be written.
        """
        records = sorted(metadata.values(), key=lambda item: (item.date_added, str(item.id)))
        snapshot = LibrarySnapshot(metadata=records, tag_colors=dict(tag_colors))
        payload = snapshot.model_dump(mode="json", by_alias=True)
        text = json.dumps(payload, indent=2, ensure_ascii=False)

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(
                prefix=".metadata-", suffix=".json", dir=self._path.parent
            )
            try:
                with os.fdopen(handle, "w", encoding="utf-8") as fh:
                    fh.write(text)
                os.replace(temp_name, self._path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            LOGGER.error("Failed to save metadata snapshot %s: %s", self._path, exc)
            raise StateSaveError(f"Could not write {self._path}: {exc}") from exc

        LOGGER.debug("Saved %d metadata record(s) to %s", len(records), self._path)

    def create_default(
        self,
        file_id: UUID,
        title: Optional[str] = None,
        pages: Optional[int] = None,
    ) -> Metadata:
        """Build a fresh record for ``file_id``.

        The card color is derived from the id alone, so recreating a record for
        the same id (for example after a delete) yields the same color.
        """
        return Metadata(
            id=file_id,
            title=title,
            pages=pages,
            date_added=utcnow(),
            card_color=stable_choice(str(file_id), self._palette),
        )

    def update(
        self,
        file_id: UUID,
        metadata: Metadata,
        tag_colors: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Load the snapshot, replace one record, and save it back.

        Args:
            file_id: Identifier of the record to replace.
            metadata: New record contents.
            tag_colors: Tag colors to persist; the stored assignment is kept when omitted.
        """
        current, stored_colors = self.load()
        current[file_id] = metadata
        self.save(current, stored_colors if tag_colors is None else tag_colors)

    def delete(self, file_id: UUID, tag_colors: Optional[Mapping[str, str]] = None) -> None:
        """Load the snapshot, drop one record, and save it back."""
        current, stored_colors = self.load()
        current.pop(file_id, None)
        self.save(current, stored_colors if tag_colors is None else tag_colors)


__all__ = [
    "METADATA_FILENAME",
    "LibrarySnapshot",
    "Metadata",
    "MetadataMap",
    "MetadataStore",
    "StateError",
    "StateSaveError",
    "TagColors",
    "library_data_dir",
]
