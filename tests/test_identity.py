"""Tests for identity resolution."""

import json
import uuid
from pathlib import Path

import pytest

from collect.config.models import IdentitySettings
from collect.identity import (
    SidecarIdentityStore,
    XattrIdentityStore,
    build_identity_store,
    parse_identifier,
)
from collect.identity.xattr_store import attribute_name


def _touch(path: Path) -> Path:
    path.write_bytes(b"%PDF-1.4\n")
    return path


def test_parse_identifier_accepts_bytes_and_rejects_garbage() -> None:
    file_id = uuid.uuid4()

    assert parse_identifier(str(file_id).encode("utf-8")) == file_id
    assert parse_identifier(f" {file_id}\n") == file_id
    assert parse_identifier(b"\xff\xfe") is None
    assert parse_identifier("not-a-uuid") is None
    assert parse_identifier(None) is None


def test_attribute_name_is_namespaced_on_linux() -> None:
    assert attribute_name("com.collect.fileid", "linux") == "user.com.collect.fileid"
    assert attribute_name("user.custom", "linux") == "user.custom"
    assert attribute_name("com.collect.fileid", "darwin") == "com.collect.fileid"


def test_xattr_resolve_is_idempotent(tmp_path: Path, fake_xattr) -> None:
    store = XattrIdentityStore()
    path = _touch(tmp_path / "paper.pdf")

    first = store.resolve(path)
    second = store.resolve(path)

    assert first == second
    assert fake_xattr.attributes[(str(path), store.attribute)] == str(first).encode("utf-8")


def test_xattr_existing_marker_is_returned_unchanged(tmp_path: Path, fake_xattr) -> None:
    store = XattrIdentityStore()
    path = _touch(tmp_path / "paper.pdf")
    existing = uuid.uuid4()
    fake_xattr.attributes[(str(path), store.attribute)] = str(existing).encode("utf-8")

    assert store.resolve(path) == existing


def test_xattr_malformed_marker_is_replaced(tmp_path: Path, fake_xattr) -> None:
    store = XattrIdentityStore()
    path = _touch(tmp_path / "paper.pdf")
    fake_xattr.attributes[(str(path), store.attribute)] = b"garbage"

    file_id = store.resolve(path)

    assert fake_xattr.attributes[(str(path), store.attribute)] == str(file_id).encode("utf-8")


def test_failed_marker_write_still_yields_usable_id(
    tmp_path: Path, fake_xattr, caplog: pytest.LogCaptureFixture
) -> None:
    store = XattrIdentityStore()
    path = _touch(tmp_path / "paper.pdf")
    fake_xattr.fail_writes = True

    with caplog.at_level("WARNING", logger="collect.identity"):
        first = store.resolve(path)
        second = store.resolve(path)

    assert isinstance(first, uuid.UUID)
    assert first != second
    assert "ephemeral" in caplog.text


def test_xattr_forget_removes_marker(tmp_path: Path, fake_xattr) -> None:
    store = XattrIdentityStore()
    path = _touch(tmp_path / "paper.pdf")
    original = store.resolve(path)

    store.forget(path)
    store.forget(path)

    assert store.resolve(path) != original


def test_sidecar_persists_across_instances(tmp_path: Path) -> None:
    index_path = tmp_path / "data" / "identities.json"
    path = _touch(tmp_path / "paper.pdf")

    first = SidecarIdentityStore(index_path).resolve(path)
    second = SidecarIdentityStore(index_path).resolve(path)

    assert first == second
    assert str(first) in json.loads(index_path.read_text(encoding="utf-8")).values()


def test_sidecar_moved_keeps_identifier(sidecar: SidecarIdentityStore, tmp_path: Path) -> None:
    source = _touch(tmp_path / "draft.pdf")
    file_id = sidecar.resolve(source)
    destination = source.rename(tmp_path / "final.pdf")

    sidecar.moved(source, destination, file_id)

    assert sidecar.resolve(destination) == file_id
    assert sidecar.read_marker(source) is None


def test_sidecar_unreadable_index_starts_empty(tmp_path: Path) -> None:
    index_path = tmp_path / "identities.json"
    index_path.write_text("{broken", encoding="utf-8")
    path = _touch(tmp_path / "paper.pdf")

    store = SidecarIdentityStore(index_path)

    assert store.read_marker(path) is None
    assert isinstance(store.resolve(path), uuid.UUID)


def test_sidecar_write_failure_gives_ephemeral_id(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = SidecarIdentityStore(blocker / "identities.json")
    path = _touch(tmp_path / "paper.pdf")

    assert isinstance(store.resolve(path), uuid.UUID)


@pytest.mark.parametrize(
    ("backend", "platform", "expected"),
    [
        ("auto", "linux", XattrIdentityStore),
        ("auto", "darwin", XattrIdentityStore),
        ("auto", "win32", SidecarIdentityStore),
        ("sidecar", "linux", SidecarIdentityStore),
        ("xattr", "win32", XattrIdentityStore),
    ],
)
def test_build_identity_store_selects_backend(
    tmp_path: Path, fake_xattr, backend: str, platform: str, expected: type
) -> None:
    settings = IdentitySettings(backend=backend)

    store = build_identity_store(settings, tmp_path, platform=platform)

    assert isinstance(store, expected)
    if isinstance(store, SidecarIdentityStore):
        assert store.index_path == tmp_path / "identities.json"


def test_auto_backend_falls_back_without_xattr_support(tmp_path: Path, fake_xattr) -> None:
    library = tmp_path / "library"
    library.mkdir()
    fake_xattr.fail_writes = True

    store = build_identity_store(
        IdentitySettings(backend="auto"), tmp_path / "data", check_dir=library, platform="linux"
    )

    assert isinstance(store, SidecarIdentityStore)
    assert list(library.iterdir()) == []


def test_auto_backend_checks_the_library_directory(tmp_path: Path, fake_xattr) -> None:
    library = tmp_path / "library"
    library.mkdir()

    store = build_identity_store(
        IdentitySettings(backend="auto"), tmp_path / "data", check_dir=library, platform="linux"
    )

    assert isinstance(store, XattrIdentityStore)
    checked = {Path(path).parent for path, _ in fake_xattr.attributes}
    assert checked == {library}
    assert list(library.iterdir()) == []


def test_explicit_xattr_backend_is_not_checked(tmp_path: Path, fake_xattr) -> None:
    fake_xattr.fail_writes = True

    store = build_identity_store(IdentitySettings(backend="xattr"), tmp_path, platform="linux")

    assert isinstance(store, XattrIdentityStore)
