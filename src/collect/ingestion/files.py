"""Filesystem helpers for bringing documents into a library folder."""

from __future__ import annotations

import shutil
from pathlib import Path


def unique_destination(directory: Path, filename: str) -> Path:
    """Return a path in ``directory`` for ``filename`` that does not exist yet.

    Collisions are resolved Finder-style: ``paper.pdf``, ``paper (1).pdf``,
    ``paper (2).pdf`` and so on.
    """
    candidate = directory / filename
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


def reserve_destination(directory: Path, filename: str) -> Path:
    """Claim a free name in ``directory`` by creating an empty file there.

    Concurrent copies and downloads racing for the same name each get their own.
    """
    directory.mkdir(parents=True, exist_ok=True)
    while True:
        candidate = unique_destination(directory, filename)
        try:
            candidate.open("xb").close()
        except FileExistsError:
            continue
        return candidate


def copy_into_library(source: Path, library_root: Path) -> Path:
    """Copy ``source`` into ``library_root`` under a free name and return the copy.

    Raises:
        OSError: If the source cannot be read or the copy cannot be written.
    """
    if not source.is_file():
        raise FileNotFoundError(f"No such file: {source}")
    target = reserve_destination(library_root, source.name)
    try:
        shutil.copy2(source, target)
    except OSError:
        target.unlink(missing_ok=True)
        raise
    return target


__all__ = ["copy_into_library", "reserve_destination", "unique_destination"]
