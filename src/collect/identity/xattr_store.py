"""Identity markers stored as extended file attributes."""

from __future__ import annotations

import logging
import sys
import tempfile
from pathlib import Path
from typing import Optional
from uuid import UUID

import xattr

from .base import IdentityStore, parse_identifier

LOGGER = logging.getLogger(__name__)

DEFAULT_MARKER_NAME = "com.collect.fileid"


def attribute_name(marker_name: str, platform: str | None = None) -> str:
    """Return the attribute name to use on ``platform``.

    Linux only exposes unprivileged attributes under the ``user.`` namespace.
    """
    platform = platform or sys.platform
    if platform.startswith("linux") and not marker_name.startswith("user."):
        return f"user.{marker_name}"
    return marker_name


class XattrIdentityStore(IdentityStore):
    """Keep each file's identifier in an extended attribute on the file itself.

    The marker survives renames and moves within the same volume.
    """

    def __init__(self, marker_name: str = DEFAULT_MARKER_NAME) -> None:
        self._attribute = attribute_name(marker_name)

    @property
    def attribute(self) -> str:
        return self._attribute

    def read_marker(self, path: Path) -> Optional[UUID]:
        try:
            raw = xattr.getxattr(str(path), self._attribute)
        except OSError:
            return None
        file_id = parse_identifier(raw)
        if file_id is None:
            LOGGER.debug("Ignoring malformed identity marker on %s", path)
        return file_id

    def write_marker(self, path: Path, file_id: UUID) -> bool:
        try:
            xattr.setxattr(str(path), self._attribute, str(file_id).encode("utf-8"))
        except OSError as exc:
            LOGGER.debug("setxattr failed for %s: %s", path, exc)
            return False
        return True

    def forget(self, path: Path) -> None:
        try:
            xattr.removexattr(str(path), self._attribute)
        except OSError:
            # no marker to remove
            return

    def supports_markers(self, directory: Path) -> bool:
        """Return whether a new file in ``directory`` accepts the marker attribute.

        Filesystems such as FAT, exFAT and some network mounts reject user
        attributes, in which case every marker write would fail.
        """
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(dir=directory, prefix=".collect-xattr-") as handle:
                xattr.setxattr(handle.name, self._attribute, b"check")
        except OSError as exc:
            LOGGER.debug("Extended attributes unavailable in %s: %s", directory, exc)
            return False
        return True


__all__ = ["DEFAULT_MARKER_NAME", "XattrIdentityStore", "attribute_name"]
