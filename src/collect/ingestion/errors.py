"""Ingestion errors."""

from __future__ import annotations

from .models import DownloadResult


class IngestError(Exception):
    """Raised when a file could not be added; nothing was registered."""


class DownloadFailed(IngestError):
    """Raised when a download did not produce a usable document."""

    def __init__(self, result: DownloadResult) -> None:
        self.result = result
        detail = f": {result.detail}" if result.detail else ""
        super().__init__(f"Download failed ({result.outcome.value}){detail}")
