"""Stable file identity for library documents."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from collect.config.models import IdentitySettings

from .base import IdentityStore, parse_identifier
from .sidecar import SIDECAR_FILENAME, SidecarIdentityStore
from .xattr_store import XattrIdentityStore

LOGGER = logging.getLogger(__name__)


def build_identity_store(
    settings: IdentitySettings,
    data_dir: Path,
    *,
    check_dir: Path | None = None,
    platform: str | None = None,
) -> IdentityStore:
    """Return the identity store selected by ``settings``.

    With the ``auto`` backend, extended attributes are used on Linux and macOS
    only when a marker can actually be written in ``check_dir`` (the library
    root, or ``data_dir`` when omitted); otherwise the side-car index is used.

    Args:
        settings: Identity configuration.
        data_dir: Per-library data directory used by the side-car index.
        check_dir: Directory on the filesystem that will carry the markers.
        platform: Platform string override; defaults to ``sys.platform``.
    """
    sidecar_path = data_dir / SIDECAR_FILENAME
    if settings.backend == "sidecar":
        return SidecarIdentityStore(sidecar_path)

    store = XattrIdentityStore(settings.marker_name)
    if settings.backend == "xattr":
        return store

    current = platform or sys.platform
    if not current.startswith(("linux", "darwin")):
        return SidecarIdentityStore(sidecar_path)
    target = check_dir or data_dir
    if not store.supports_markers(target):
        LOGGER.info("%s does not support extended attributes; using %s", target, sidecar_path)
        return SidecarIdentityStore(sidecar_path)
    return store


__all__ = [
    "IdentityStore",
    "SidecarIdentityStore",
    "XattrIdentityStore",
    "build_identity_store",
    "parse_identifier",
]
