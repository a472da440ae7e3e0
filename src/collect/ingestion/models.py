"""Ingestion result models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional
from uuid import UUID

from collect.library.models import FileRecord


class DownloadOutcome(str, Enum):
    """How a download attempt ended."""

    OK = "ok"
    SOURCE_UNAVAILABLE = "source_unavailable"
    TRANSFER_FAILED = "transfer_failed"
    WRONG_FILE_TYPE = "wrong_file_type"


@dataclass(slots=True)
class DownloadResult:
    """Outcome of ``Downloader.download``.

    Attributes:
        outcome: Result category.
        path: Local file on success.
        detail: Human-readable reason on failure.
    """

    outcome: DownloadOutcome
    path: Optional[Path] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.outcome is DownloadOutcome.OK


@dataclass(slots=True)
class IngestReport:
    """Summary of a batch ingest over scanned paths.

    Attributes:
        records: File records now in the library.
        created: Identifiers that received new default metadata.
        errors: Per-path failures that were skipped.
    """

    records: List[FileRecord] = field(default_factory=list)
    created: List[UUID] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def counts(self) -> dict[str, int]:
        return {
            "files": len(self.records),
            "new": len(self.created),
            "errors": len(self.errors),
        }


__all__ = ["DownloadOutcome", "DownloadResult", "IngestReport"]
