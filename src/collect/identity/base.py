"""Identity store interface."""

from __future__ import annotations

import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional
from uuid import UUID

LOGGER = logging.getLogger(__name__)


def parse_identifier(raw: bytes | str | None) -> Optional[UUID]:
    """Return the UUID encoded in a marker value, or ``None`` if it is not one."""
    if raw is None:
        return None
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return None
    try:
        return UUID(raw.strip())
    except ValueError:
        return None


class IdentityStore(ABC):
    """Resolve filesystem paths to stable identifiers.

    Subclasses only implement reading and writing the marker; ``resolve``
    supplies the shared read-or-assign behaviour. A marker that cannot be
    written still produces an identifier for the current session, but that
    identifier will not be found again on a later run and any metadata saved
    under it becomes orphaned.
    """

    def resolve(self, path: Path) -> UUID:
        """Return the identifier for ``path``, assigning one on first encounter.

        Never raises for unreadable or unsupported filesystems.
        """
        existing = self.read_marker(path)
        if existing is not None:
            return existing

        new_id = uuid.uuid4()
        if not self.write_marker(path, new_id):
            LOGGER.warning(
                "Could not persist identity marker for %s; using ephemeral id %s.",
                path,
                new_id,
            )
        return new_id

    @abstractmethod
    def read_marker(self, path: Path) -> Optional[UUID]:
        """Return the identifier stored for ``path``, or ``None``."""

    @abstractmethod
    def write_marker(self, path: Path, file_id: UUID) -> bool:
        """Store ``file_id`` for ``path``; return whether it was persisted."""

    def forget(self, path: Path) -> None:
        """Drop any marker stored for ``path``."""

    def moved(self, source: Path, destination: Path, file_id: UUID) -> None:
        """Record that the file carrying ``file_id`` moved from ``source``.

        Markers attached to the file itself travel with it, so the default is a
        no-op.
        """


__all__ = ["IdentityStore", "parse_identifier"]
