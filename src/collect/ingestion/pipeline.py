"""Coordinate identity, metadata, and index updates when documents enter a library."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple
from uuid import UUID

from collect.identity import IdentityStore
from collect.library import FileRecord, LibraryIndex
from collect.state import MetadataStore, StateError
from collect.state.models import Metadata

from .download import Downloader
from .errors import DownloadFailed, IngestError
from .files import copy_into_library
from .models import IngestReport
from .pages import PageCounter

LOGGER = logging.getLogger(__name__)


class IngestCoordinator:
    """Add documents to a library as a single unit of work.

    A successful ingest resolves the file's identifier, persists its metadata
    and registers it with the index, in that order. When any step fails an
    ``IngestError`` is raised and the index is left as it was.
    """

    def __init__(
        self,
        identity: IdentityStore,
        store: MetadataStore,
        index: LibraryIndex,
        page_counter: Optional[PageCounter] = None,
    ) -> None:
        self.identity = identity
        self.store = store
        self.index = index
        self.page_counter = page_counter or PageCounter()

    def ingest(self, path: Path) -> Tuple[FileRecord, Metadata]:
        """Ingest a single file already inside the library.

        Args:
            path: Document to add.

        Returns:
            Tuple[FileRecord, Metadata]: The registered record and its metadata.

        Raises:
            IngestError: If the file cannot be read or its metadata cannot be saved.
        """
        path = path.expanduser().resolve()
        if not path.is_file():
            raise IngestError(f"{path} is not a file.")

        file_id = self.identity.resolve(path)
        try:
            record, metadata, _ = self._prepare(file_id, path)
            self.store.update(file_id, metadata, tag_colors=self.index.tag_colors)
        except (OSError, StateError) as exc:
            raise IngestError(f"Could not ingest {path}: {exc}") from exc

        self.index.register(record, metadata)
        LOGGER.info("Ingested %s as %s", path, file_id)
        return record, metadata

    def ingest_many(self, paths: Iterable[Path]) -> IngestReport:
        """Rebuild the index file set from scanned ``paths``.

        Files that fail are reported and skipped. New metadata is persisted in a
        single save before the index is updated.

        Raises:
            IngestError: If the merged metadata snapshot cannot be saved.
        """
        report = IngestReport()
        seen: Dict[UUID, Path] = {}
        created: Dict[UUID, Metadata] = {}

        for path in paths:
            try:
                file_id = self.identity.resolve(path)
                if file_id in seen:
                    # Copies made outside the library can carry the original's marker.
                    LOGGER.warning(
                        "%s shares id %s with %s; assigning a new id.", path, file_id, seen[file_id]
                    )
                    self.identity.forget(path)
                    file_id = self.identity.resolve(path)
                    if file_id in seen:
                        report.errors.append(f"{path}: duplicate identifier {file_id}")
                        continue
                record, metadata, is_new = self._prepare(file_id, path)
            except OSError as exc:
                report.errors.append(f"{path}: {exc}")
                continue

            seen[file_id] = path
            report.records.append(record)
            if is_new:
                created[file_id] = metadata
                report.created.append(file_id)

        if created:
            merged = dict(self.index.metadata)
            merged.update(created)
            try:
                self.store.save(merged, self.index.tag_colors)
            except StateError as exc:
                raise IngestError(f"Could not save metadata for scanned files: {exc}") from exc
            self.index.metadata.update(created)

        colors_before = dict(self.index.tag_colors)
        self.index.set_files(report.records)
        if self.index.tag_colors != colors_before:
            try:
                self.store.save(self.index.metadata, self.index.tag_colors)
            except StateError as exc:
                LOGGER.warning("Tag colors not saved after scan: %s", exc)

        for message in report.errors:
            LOGGER.warning("Skipped during scan: %s", message)
        return report

    def adopt(self, path: Path) -> Tuple[FileRecord, Metadata]:
        """Ingest a file this library just created, deleting it if that fails.

        Any identity marker the file carries is dropped first so a copy never
        shares an identifier with its source.
        """
        path = path.expanduser().resolve()
        self.identity.forget(path)
        try:
            return self.ingest(path)
        except IngestError:
            path.unlink(missing_ok=True)
            raise

    def ingest_copy(self, source: Path, library_root: Path) -> Tuple[FileRecord, Metadata]:
        """Copy ``source`` into ``library_root`` under a free name and ingest the copy."""
        try:
            target = copy_into_library(source.expanduser(), library_root)
        except OSError as exc:
            raise IngestError(f"Could not copy {source}: {exc}") from exc
        return self.adopt(target)

    def ingest_download(
        self, url: str, library_root: Path, downloader: Downloader
    ) -> Tuple[FileRecord, Metadata]:
        """Download ``url`` into ``library_root`` and ingest the result.

        Raises:
            DownloadFailed: If the downloader reports anything other than success.
            IngestError: If the downloaded file cannot be ingested.
        """
        result = downloader.download(url, library_root)
        if not result.ok or result.path is None:
            raise DownloadFailed(result)
        return self.adopt(result.path)

    def _prepare(self, file_id: UUID, path: Path) -> Tuple[FileRecord, Metadata, bool]:
        metadata = self.index.metadata.get(file_id)
        is_new = metadata is None
        if metadata is None:
            metadata = self.store.create_default(
                file_id, title=path.name, pages=self.page_counter.count(path)
            )
        record = FileRecord.from_path(file_id, path, date_added=metadata.date_added)
        return record, metadata, is_new


__all__ = ["IngestCoordinator"]
