"""Page counts for PDF documents via pypdf."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pypdf

LOGGER = logging.getLogger(__name__)


class PageCounter:
    """Report how many pages a PDF has.

    ``None`` means the count could not be determined (encrypted, damaged, or
    not a PDF at all); it is never an error.
    """

    def count(self, path: Path) -> Optional[int]:
        try:
            reader = pypdf.PdfReader(str(path))
            return len(reader.pages)
        except Exception as exc:  # pypdf raises a wide range of parse errors
            LOGGER.debug("Could not count pages of %s: %s", path, exc)
            return None


__all__ = ["PageCounter"]
