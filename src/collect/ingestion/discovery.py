"""Document discovery."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Iterator


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


class LibraryScanner:
    """Find library documents below a root directory.

    Hidden files and anything inside hidden directories are skipped, as are
    entries that are not regular files. Symlinked files and directories are
    only followed with ``follow_symlinks``. Every call to ``scan`` walks the tree
    again; ordering follows the filesystem and is not stable.
    """

    def __init__(self, *, extension: str = "pdf", follow_symlinks: bool = False) -> None:
        self.suffix = "." + extension.lower().lstrip(".")
        self.follow_symlinks = follow_symlinks

    def matches(self, path: Path) -> bool:
        """Return whether ``path`` carries the document extension (any case)."""
        return path.suffix.lower() == self.suffix

    def scan(self, root: Path) -> Iterator[Path]:
        """Yield absolute paths of documents under ``root``."""
        root = root.expanduser().resolve()
        if not root.exists():
            return

        for path in self._iter_paths(root):
            if not self.matches(path):
                continue
            try:
                relative = path.relative_to(root)
            except ValueError:
                relative = Path(path.name)
            if _is_hidden(relative):
                continue
            if path.is_symlink() and not self.follow_symlinks:
                continue
            if not path.is_file():
                continue
            yield path

    def _iter_paths(self, root: Path) -> Iterable[Path]:
        if root.is_file():
            yield root
            return

        # followlinks can revisit a directory through a link cycle
        visited: set[str] = set()
        for dirpath, dirnames, filenames in os.walk(root, followlinks=self.follow_symlinks):
            real = os.path.realpath(dirpath)
            if real in visited:
                dirnames[:] = []
                continue
            visited.add(real)
            dirnames[:] = [name for name in dirnames if not name.startswith(".")]
            for name in filenames:
                yield Path(dirpath) / name


__all__ = ["LibraryScanner"]
