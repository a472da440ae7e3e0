"""Shared fixtures for the Collect test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pypdf
import pytest

from collect.identity import SidecarIdentityStore
from collect.identity import xattr_store
from collect.state import MetadataStore


class FakeXattr:
    """Dict-backed stand-in for the ``xattr`` module functions."""

    def __init__(self) -> None:
        self.attributes: dict[tuple[str, str], bytes] = {}
        self.fail_writes = False

    def getxattr(self, path: str, name: str) -> bytes:
        try:
            return self.attributes[(path, name)]
        except KeyError:
            raise OSError(61, "No data available") from None

    def setxattr(self, path: str, name: str, value: bytes) -> None:
        if self.fail_writes:
            raise OSError(95, "Operation not supported")
        self.attributes[(path, name)] = value

    def removexattr(self, path: str, name: str) -> None:
        if self.attributes.pop((path, name), None) is None:
            raise OSError(61, "No data available")


@pytest.fixture
def fake_xattr(monkeypatch: pytest.MonkeyPatch) -> FakeXattr:
    fake = FakeXattr()
    monkeypatch.setattr(xattr_store, "xattr", fake)
    return fake


@pytest.fixture
def make_pdf() -> Callable[..., Path]:
    """Return a helper writing a blank PDF with the requested page count."""

    def _make(path: Path, pages: int = 1) -> Path:
        writer = pypdf.PdfWriter()
        for _ in range(pages):
            writer.add_blank_page(width=612, height=792)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("wb") as fh:
            writer.write(fh)
        return path

    return _make


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def store(tmp_path: Path) -> MetadataStore:
    return MetadataStore(tmp_path / "data" / "metadata.json")


@pytest.fixture
def sidecar(tmp_path: Path) -> SidecarIdentityStore:
    return SidecarIdentityStore(tmp_path / "data" / "identities.json")
