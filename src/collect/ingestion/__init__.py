"""Document discovery and ingestion."""

from .discovery import LibraryScanner
from .download import Downloader, filename_from_url
from .errors import DownloadFailed, IngestError
from .files import copy_into_library, reserve_destination, unique_destination
from .models import DownloadOutcome, DownloadResult, IngestReport
from .pages import PageCounter
from .pipeline import IngestCoordinator

__all__ = [
    "DownloadFailed",
    "DownloadOutcome",
    "DownloadResult",
    "Downloader",
    "IngestCoordinator",
    "IngestError",
    "IngestReport",
    "LibraryScanner",
    "PageCounter",
    "copy_into_library",
    "filename_from_url",
    "reserve_destination",
    "unique_destination",
]
