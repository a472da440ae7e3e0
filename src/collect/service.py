"""Library service wiring scanner, identity, metadata, and index for one root."""

from __future__ import annotations

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Optional
from uuid import UUID

from collect.config import CollectConfig, ConfigError
from collect.identity import IdentityStore, build_identity_store
from collect.ingestion import (
    DownloadFailed,
    Downloader,
    IngestCoordinator,
    IngestError,
    IngestReport,
    LibraryScanner,
    PageCounter,
    copy_into_library,
)
from collect.library import FileRecord, LibraryError, LibraryIndex, SortOption
from collect.state import METADATA_FILENAME, MetadataStore, library_data_dir
from collect.state.models import Metadata

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class TaskOutcome:
    """Result of a background task once it has been applied to the index.

    Attributes:
        kind: Task type (``scan``, ``copy`` or ``download``).
        label: Source path or URL the task was submitted with.
        record: Ingested file for copy and download tasks.
        report: Scan report for scan tasks.
        error: Failure raised by the worker or while applying the result.
    """

    kind: str
    label: str
    record: Optional[FileRecord] = None
    report: Optional[IngestReport] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class LibraryService:
    """Operate on the library rooted at ``root``.

    All index mutations happen on the thread that calls the service. Slow work
    submitted with ``submit_*`` runs on a small thread pool and its results wait
    in a queue until ``drain`` applies them.
    """

    def __init__(
        self,
        root: Path,
        *,
        config: CollectConfig,
        identity: Optional[IdentityStore] = None,
        store: Optional[MetadataStore] = None,
        page_counter: Optional[PageCounter] = None,
        downloader: Optional[Downloader] = None,
        max_workers: int = 2,
    ) -> None:
        """Initialize the service.

        Args:
            root: Library root directory.
            config: Effective configuration.
            identity: Identity store override; built from ``config`` when omitted.
            store: Metadata store override; the per-library store when omitted.
            page_counter: Page counter used for new documents.
            downloader: Downloader used for URL ingestion.
            max_workers: Size of the background thread pool.

        Raises:
            ConfigError: If the configured default sort option is unknown.
        """
        self._config = config
        self._root = root.expanduser().resolve()
        self._data_dir = library_data_dir(Path(config.library.data_dir), self._root)
        self._store = store or MetadataStore(self._data_dir / METADATA_FILENAME)
        self._identity = identity or build_identity_store(
            config.identity,
            self._data_dir,
            check_dir=self._root if self._root.is_dir() else None,
        )
        self._scanner = LibraryScanner(
            extension=config.library.extension,
            follow_symlinks=config.library.follow_symlinks,
        )
        self._downloader = downloader or Downloader(
            timeout=config.download.timeout_seconds,
            user_agent=config.download.user_agent,
        )
        self._index = LibraryIndex.from_store(self._store, recent_days=config.index.recent_days)
        try:
            self._index.selection.sort = SortOption.parse(config.index.default_sort)
        except ValueError as exc:
            raise ConfigError(f"index.default_sort: {exc}") from exc
        self._coordinator = IngestCoordinator(
            self._identity, self._store, self._index, page_counter=page_counter
        )
        self._max_workers = max(1, max_workers)
        self._executor: ThreadPoolExecutor | None = None
        self._results: queue.Queue[tuple[str, str, Any, Optional[Exception]]] = queue.Queue()
        self._pending = 0

    @classmethod
    def from_config(
        cls, config: CollectConfig, root: Path | str | None = None, **kwargs: Any
    ) -> "LibraryService":
        """Build a service for ``root`` or the configured source directory.

        Raises:
            ConfigError: If no root is given and none is configured.
        """
        chosen = root or config.library.source_directory
        if not chosen:
            raise ConfigError(
                "No library directory configured. Pass --root or run "
                "`collect config set library.source_directory --value PATH`."
            )
        return cls(Path(chosen), config=config, **kwargs)

    @property
    def root(self) -> Path:
        return self._root

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def index(self) -> LibraryIndex:
        return self._index

    @property
    def coordinator(self) -> IngestCoordinator:
        return self._coordinator

    @property
    def scanner(self) -> LibraryScanner:
        return self._scanner

    @property
    def identity(self) -> IdentityStore:
        return self._identity

    # ------------------------------------------------------------------ #
    # Foreground operations                                              #
    # ------------------------------------------------------------------ #

    def refresh(self) -> IngestReport:
        """Scan the root and rebuild the index file set.

        Raises:
            LibraryError: If the root is not a directory.
            IngestError: If new metadata could not be saved.
        """
        self._require_root()
        return self._coordinator.ingest_many(self._scanner.scan(self._root))

    def add_file(self, source: Path) -> FileRecord:
        """Copy ``source`` into the library and ingest it."""
        self._require_root()
        record, _ = self._coordinator.ingest_copy(source, self._root)
        return record

    def download(self, url: str) -> FileRecord:
        """Download ``url`` into the library and ingest it."""
        self._require_root()
        record, _ = self._coordinator.ingest_download(url, self._root, self._downloader)
        return record

    def open_document(
        self, file_id: UUID, opener: Optional[Callable[[Path], Any]] = None
    ) -> Metadata:
        """Open the document with ``opener`` and record the time it was opened."""
        record = self._index.get(file_id)
        if opener is not None:
            opener(record.path)
        return self._index.mark_opened(file_id)

    def rename_file(self, file_id: UUID, new_name: str) -> FileRecord:
        """Rename a document within its directory.

        The document extension is appended when missing. A title equal to the
        old filename follows the rename.

        Raises:
            LibraryError: If the name is invalid, taken, or the rename fails.
        """
        record = self._index.get(file_id)
        name = new_name.strip()
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            raise LibraryError(f"Invalid file name: {new_name!r}")
        if not self._scanner.matches(Path(name)):
            name = f"{name}{self._scanner.suffix}"

        target = record.path.with_name(name)
        if target == record.path:
            return record
        if target.exists():
            raise LibraryError(f"{target.name} already exists.")
        try:
            record.path.rename(target)
        except OSError as exc:
            raise LibraryError(f"Could not rename {record.filename}: {exc}") from exc

        self._identity.moved(record.path, target, file_id)
        renamed = record.model_copy(update={"path": target})
        self._index.replace_file(renamed)

        metadata = self._index.metadata.get(file_id)
        if metadata is not None and metadata.title == record.filename:
            self._index.edit(file_id, title=target.name)
        LOGGER.info("Renamed %s to %s", record.path, target)
        return renamed

    def delete_file(self, file_id: UUID) -> None:
        """Delete the document from disk and drop its metadata.

        Raises:
            LibraryError: If the file cannot be removed.
        """
        record = self._index.get(file_id)
        try:
            record.path.unlink(missing_ok=True)
        except OSError as exc:
            raise LibraryError(f"Could not delete {record.filename}: {exc}") from exc

        self._identity.forget(record.path)
        self._index.remove_file(file_id)
        self._index.delete_metadata(file_id)
        LOGGER.info("Deleted %s (%s)", record.path, file_id)

    # ------------------------------------------------------------------ #
    # Background work                                                    #
    # ------------------------------------------------------------------ #

    def submit_scan(self) -> Future:
        """Walk the root on the pool; ``drain`` applies the scan."""
        return self._submit("scan", str(self._root), lambda: list(self._scanner.scan(self._root)))

    def submit_copy(self, source: Path) -> Future:
        """Copy ``source`` into the library on the pool; ``drain`` ingests the copy."""
        return self._submit(
            "copy", str(source), lambda: copy_into_library(source.expanduser(), self._root)
        )

    def submit_download(self, url: str) -> Future:
        """Download ``url`` on the pool; ``drain`` ingests the file."""
        return self._submit("download", url, lambda: self._downloader.download(url, self._root))

    @property
    def pending(self) -> int:
        """Return the number of submitted tasks not yet applied."""
        return self._pending

    def drain(self, *, wait: bool = False, timeout: float | None = None) -> List[TaskOutcome]:
        """Apply finished background results in the order they completed.

        Args:
            wait: Block until every submitted task has been applied.
            timeout: Maximum seconds to wait for each result when ``wait`` is set.

        Returns:
            List[TaskOutcome]: One entry per applied task.
        """
        outcomes: List[TaskOutcome] = []
        while self._pending:
            try:
                if wait:
                    item = self._results.get(timeout=timeout)
                else:
                    item = self._results.get_nowait()
            except queue.Empty:
                break
            self._pending -= 1
            outcomes.append(self._apply(*item))
        return outcomes

    def close(self) -> None:
        """Wait for running tasks and shut the pool down."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "LibraryService":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _submit(self, kind: str, label: str, work: Callable[[], Any]) -> Future:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self._max_workers, thread_name_prefix="collect-worker"
            )

        def _run() -> None:
            try:
                payload = work()
            except Exception as exc:  # handed back to the control thread
                self._results.put((kind, label, None, exc))
                return
            self._results.put((kind, label, payload, None))

        self._pending += 1
        return self._executor.submit(_run)

    def _apply(
        self, kind: str, label: str, payload: Any, error: Optional[Exception]
    ) -> TaskOutcome:
        outcome = TaskOutcome(kind=kind, label=label)
        if error is not None:
            LOGGER.warning("Background %s of %s failed: %s", kind, label, error)
            outcome.error = error
            return outcome

        try:
            if kind == "scan":
                outcome.report = self._coordinator.ingest_many(payload)
            elif kind == "copy":
                outcome.record, _ = self._coordinator.adopt(payload)
            else:
                if not payload.ok or payload.path is None:
                    raise DownloadFailed(payload)
                outcome.record, _ = self._coordinator.adopt(payload.path)
        except IngestError as exc:
            LOGGER.warning("Could not apply %s of %s: %s", kind, label, exc)
            outcome.error = exc
        return outcome

    def _require_root(self) -> None:
        if not self._root.is_dir():
            raise LibraryError(f"Library directory {self._root} does not exist.")


__all__ = ["LibraryService", "TaskOutcome"]
