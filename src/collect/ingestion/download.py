"""HTTP downloader producing local PDF files."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import unquote, urlsplit

import httpx

from .files import reserve_destination
from .models import DownloadOutcome, DownloadResult

LOGGER = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF-"
_DEFAULT_FILENAME = "download.pdf"


def filename_from_url(url: str) -> str:
    """Derive a local ``.pdf`` filename from the last segment of ``url``'s path."""
    segment = unquote(urlsplit(url).path.rstrip("/").rsplit("/", 1)[-1]).strip()
    segment = segment.replace("\\", "_")
    if not segment or segment in (".", ".."):
        return _DEFAULT_FILENAME
    if not segment.lower().endswith(".pdf"):
        segment = f"{segment}.pdf"
    return segment


class Downloader:
    """Fetch a URL into a directory and check that the body is a PDF.

    Every failure is reported as a ``DownloadResult``; nothing is raised and no
    partial file is left behind.
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        user_agent: str = "collect/0.1",
        client: httpx.Client | None = None,
    ) -> None:
        self._timeout = timeout
        self._user_agent = user_agent
        self._client = client

    def download(self, url: str, destination_dir: Path) -> DownloadResult:
        """Download ``url`` into ``destination_dir``.

        Args:
            url: HTTP or HTTPS address of the document.
            destination_dir: Directory receiving the file.

        Returns:
            DownloadResult: ``OK`` with the local path, or the failure category.
        """
        scheme = urlsplit(url).scheme.lower()
        if scheme not in ("http", "https"):
            return DownloadResult(
                DownloadOutcome.SOURCE_UNAVAILABLE, detail=f"Unsupported URL: {url!r}"
            )

        client = self._client or httpx.Client(
            timeout=self._timeout,
            follow_redirects=True,
            headers={"User-Agent": self._user_agent},
        )
        target: Path | None = None
        try:
            with client.stream("GET", url, follow_redirects=True) as response:
                if response.is_error:
                    return DownloadResult(
                        DownloadOutcome.SOURCE_UNAVAILABLE,
                        detail=f"HTTP {response.status_code} from {url}",
                    )
                target = reserve_destination(destination_dir, filename_from_url(url))
                with target.open("wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
        except (httpx.ConnectError, httpx.ConnectTimeout, httpx.UnsupportedProtocol) as exc:
            _discard(target)
            return DownloadResult(DownloadOutcome.SOURCE_UNAVAILABLE, detail=str(exc))
        except (httpx.HTTPError, OSError) as exc:
            _discard(target)
            LOGGER.warning("Transfer from %s failed: %s", url, exc)
            return DownloadResult(DownloadOutcome.TRANSFER_FAILED, detail=str(exc))
        finally:
            if self._client is None:
                client.close()

        try:
            is_pdf = _looks_like_pdf(target)
        except OSError as exc:
            _discard(target)
            LOGGER.warning("Could not read back %s: %s", target, exc)
            return DownloadResult(DownloadOutcome.TRANSFER_FAILED, detail=str(exc))
        if not is_pdf:
            _discard(target)
            return DownloadResult(
                DownloadOutcome.WRONG_FILE_TYPE, detail=f"{url} did not return a PDF document"
            )

        LOGGER.info("Downloaded %s to %s", url, target)
        return DownloadResult(DownloadOutcome.OK, path=target)


def _looks_like_pdf(path: Path) -> bool:
    with path.open("rb") as fh:
        return fh.read(len(PDF_MAGIC)) == PDF_MAGIC


def _discard(path: Path | None) -> None:
    if path is not None:
        path.unlink(missing_ok=True)


__all__ = ["Downloader", "PDF_MAGIC", "filename_from_url"]
