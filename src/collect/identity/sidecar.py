"""Portable identity store backed by a side-car index file."""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Dict, Optional
from uuid import UUID

from .base import IdentityStore, parse_identifier

LOGGER = logging.getLogger(__name__)

SIDECAR_FILENAME = "identities.json"


def path_key(path: Path) -> str:
    """Return the index key for ``path``: a digest of its absolute form."""
    absolute = str(path.expanduser().absolute())
    return hashlib.sha256(absolute.encode("utf-8")).hexdigest()


class SidecarIdentityStore(IdentityStore):
    """Map path digests to identifiers in a JSON file kept beside the metadata.

    Works on any filesystem, but the mapping is keyed by path: a file renamed
    outside the library receives a new identifier on the next scan.
    """

    def __init__(self, index_path: Path) -> None:
        self._index_path = index_path
        self._entries: Dict[str, str] | None = None

    @property
    def index_path(self) -> Path:
        return self._index_path

    def read_marker(self, path: Path) -> Optional[UUID]:
        return parse_identifier(self._load().get(path_key(path)))

    def write_marker(self, path: Path, file_id: UUID) -> bool:
        entries = self._load()
        entries[path_key(path)] = str(file_id)
        return self._flush()

    def forget(self, path: Path) -> None:
        entries = self._load()
        if entries.pop(path_key(path), None) is not None:
            self._flush()

    def moved(self, source: Path, destination: Path, file_id: UUID) -> None:
        entries = self._load()
        entries.pop(path_key(source), None)
        entries[path_key(destination)] = str(file_id)
        self._flush()

    def _load(self) -> Dict[str, str]:
        if self._entries is not None:
            return self._entries

        entries: Dict[str, str] = {}
        if self._index_path.exists():
            try:
                raw = json.loads(self._index_path.read_text(encoding="utf-8"))
            except (OSError, ValueError) as exc:
                LOGGER.warning("Ignoring unreadable identity index %s: %s", self._index_path, exc)
            else:
                if isinstance(raw, dict):
                    entries = {str(key): str(value) for key, value in raw.items()}
        self._entries = entries
        return entries

    def _flush(self) -> bool:
        try:
            self._index_path.parent.mkdir(parents=True, exist_ok=True)
            self._index_path.write_text(
                json.dumps(self._entries or {}, indent=2, sort_keys=True), encoding="utf-8"
            )
        except OSError as exc:
            LOGGER.debug("Could not write identity index %s: %s", self._index_path, exc)
            return False
        return True


__all__ = ["SIDECAR_FILENAME", "SidecarIdentityStore", "path_key"]
