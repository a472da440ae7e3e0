"""Tests for the library service."""

from pathlib import Path

import httpx
import pytest

from collect.config import CollectConfig, ConfigError
from collect.identity import SidecarIdentityStore
from collect.ingestion import DownloadFailed, DownloadOutcome, Downloader
from collect.library import LibraryError, SortOption
from collect.service import LibraryService

PDF_BODY = b"%PDF-1.4\n%%EOF\n"


def _config(tmp_path: Path, **index) -> CollectConfig:
    config = CollectConfig()
    config.library.data_dir = str(tmp_path / "data")
    config.identity.backend = "sidecar"
    for key, value in index.items():
        setattr(config.index, key, value)
    return config


def _service(tmp_path: Path, root: Path, **kwargs) -> LibraryService:
    return LibraryService(root, config=_config(tmp_path), **kwargs)


def test_from_config_requires_root(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        LibraryService.from_config(_config(tmp_path))


def test_invalid_default_sort_is_config_error(tmp_path: Path, library_root: Path) -> None:
    with pytest.raises(ConfigError):
        LibraryService(library_root, config=_config(tmp_path, default_sort="random"))


def test_service_wires_per_library_state(tmp_path: Path, library_root: Path) -> None:
    service = LibraryService.from_config(
        _config(tmp_path, default_sort="Title A-Z"), str(library_root)
    )

    assert service.root == library_root.resolve()
    assert service.data_dir.parent == tmp_path / "data" / "sources"
    assert isinstance(service.identity, SidecarIdentityStore)
    assert service.index.selection.sort is SortOption.TITLE_AZ


def test_refresh_registers_documents_and_survives_restart(
    tmp_path: Path, library_root: Path, make_pdf
) -> None:
    make_pdf(library_root / "a.pdf")
    make_pdf(library_root / "topic" / "b.pdf")

    first = _service(tmp_path, library_root)
    report = first.refresh()
    file_id = report.created[0]
    first.index.edit(file_id, tags=["kept"])

    second = _service(tmp_path, library_root)
    again = second.refresh()

    assert report.counts["new"] == 2
    assert again.created == []
    assert second.index.tags_for(file_id) == ["kept"]


def test_refresh_requires_existing_root(tmp_path: Path) -> None:
    with pytest.raises(LibraryError):
        _service(tmp_path, tmp_path / "missing").refresh()


def test_open_document_records_time(tmp_path: Path, library_root: Path, make_pdf) -> None:
    make_pdf(library_root / "a.pdf")
    service = _service(tmp_path, library_root)
    file_id = service.refresh().created[0]
    opened: list[Path] = []

    metadata = service.open_document(file_id, opener=opened.append)

    assert opened == [service.index.get(file_id).path]
    assert metadata.last_opened is not None
    assert service.index.last_opened_files(1)[0].id == file_id


def test_rename_file_keeps_identity_and_title(
    tmp_path: Path, library_root: Path, make_pdf
) -> None:
    make_pdf(library_root / "draft.pdf")
    service = _service(tmp_path, library_root)
    file_id = service.refresh().created[0]

    renamed = service.rename_file(file_id, "final")

    assert renamed.path == library_root.resolve() / "final.pdf"
    assert not (library_root / "draft.pdf").exists()
    assert service.index.title_for(file_id) == "final.pdf"

    restarted = _service(tmp_path, library_root)
    restarted.refresh()
    assert file_id in restarted.index.files


def test_rename_keeps_custom_title(tmp_path: Path, library_root: Path, make_pdf) -> None:
    make_pdf(library_root / "draft.pdf")
    service = _service(tmp_path, library_root)
    file_id = service.refresh().created[0]
    service.index.edit(file_id, title="A Real Title")

    service.rename_file(file_id, "renamed.PDF")

    assert service.index.get(file_id).filename == "renamed.PDF"
    assert service.index.title_for(file_id) == "A Real Title"


@pytest.mark.parametrize("name", ["", "  ", "../escape", "taken"])
def test_rename_rejects_bad_names(
    tmp_path: Path, library_root: Path, make_pdf, name: str
) -> None:
    make_pdf(library_root / "draft.pdf")
    make_pdf(library_root / "taken.pdf")
    service = _service(tmp_path, library_root)
    report = service.refresh()
    draft_id = next(r.id for r in report.records if r.filename == "draft.pdf")

    with pytest.raises(LibraryError):
        service.rename_file(draft_id, name)

    assert (library_root / "draft.pdf").exists()


def test_delete_file_removes_file_and_metadata(
    tmp_path: Path, library_root: Path, make_pdf
) -> None:
    path = make_pdf(library_root / "a.pdf")
    service = _service(tmp_path, library_root)
    file_id = service.refresh().created[0]

    service.delete_file(file_id)

    assert not path.exists()
    assert file_id not in service.index.files
    assert file_id not in service.index.metadata
    assert file_id not in service.index.store.load()[0]
    with pytest.raises(LibraryError):
        service.delete_file(file_id)


def test_add_file_copies_into_library(tmp_path: Path, library_root: Path, make_pdf) -> None:
    source = make_pdf(tmp_path / "downloads" / "paper.pdf")
    service = _service(tmp_path, library_root)

    record = service.add_file(source)

    assert record.path.parent == library_root.resolve()
    assert source.exists()
    assert service.index.files == {record.id: record}


def test_background_tasks_apply_on_drain(tmp_path: Path, library_root: Path, make_pdf) -> None:
    make_pdf(library_root / "existing.pdf")
    source = make_pdf(tmp_path / "incoming" / "copy.pdf")
    client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=PDF_BODY))
    )
    bad_client = httpx.Client(
        transport=httpx.MockTransport(lambda request: httpx.Response(200, content=b"nope"))
    )

    with _service(tmp_path, library_root, downloader=Downloader(client=client)) as service:
        service.submit_scan().result()
        assert service.index.files == {}
        outcomes = service.drain(wait=True, timeout=5)
        assert [outcome.kind for outcome in outcomes] == ["scan"]
        assert len(service.index.files) == 1

        service.submit_copy(source)
        service.submit_download("https://example.org/fetched.pdf")
        outcomes = service.drain(wait=True, timeout=5)

    assert service.pending == 0
    assert sorted(outcome.kind for outcome in outcomes) == ["copy", "download"]
    assert all(outcome.ok for outcome in outcomes)
    assert sorted(record.filename for record in service.index.files.values()) == [
        "copy.pdf",
        "existing.pdf",
        "fetched.pdf",
    ]

    with _service(tmp_path, library_root, downloader=Downloader(client=bad_client)) as failing:
        failing.submit_download("https://example.org/other.pdf")
        failing.submit_copy(tmp_path / "missing.pdf")
        outcomes = failing.drain(wait=True, timeout=5)

    errors = {outcome.kind: outcome.error for outcome in outcomes}
    assert isinstance(errors["download"], DownloadFailed)
    assert errors["download"].result.outcome is DownloadOutcome.WRONG_FILE_TYPE
    assert isinstance(errors["copy"], OSError)
    assert not (library_root / "other.pdf").exists()


def test_drain_without_wait_returns_only_finished(tmp_path: Path, library_root: Path) -> None:
    service = _service(tmp_path, library_root)

    assert service.drain() == []


def test_refresh_keeps_ids_when_filesystem_rejects_xattrs(
    tmp_path: Path, library_root: Path, make_pdf, fake_xattr
) -> None:
    make_pdf(library_root / "a.pdf")
    make_pdf(library_root / "b.pdf")
    fake_xattr.fail_writes = True
    config = _config(tmp_path)
    config.identity.backend = "auto"

    reports = [LibraryService(library_root, config=config).refresh() for _ in range(3)]

    service = LibraryService(library_root, config=config)
    assert isinstance(service.identity, SidecarIdentityStore)
    assert [len(report.created) for report in reports] == [2, 0, 0]
    assert len(service.index.store.load()[0]) == 2
