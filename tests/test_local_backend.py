from datetime import timedelta
from pathlib import Path

import pytest
from conftest import T0, set_mtime

from release_artifacts.backends import LocalBackend
from release_artifacts.errors import ArchiveError, NotFound


def test_put_creates_directory_and_writes_bundle(tmp_path: Path) -> None:
    archive = tmp_path / "scratch.tgz"
    archive.write_bytes(b"payload")
    backend = LocalBackend(directory=tmp_path / "store" / "nested")

    backend.put("release-v1.tgz", archive)

    assert (tmp_path / "store" / "nested" / "release-v1.tgz").read_bytes() == b"payload"


def test_fetch_returns_exact_name(tmp_path: Path) -> None:
    store = tmp_path / "store"
    store.mkdir()
    (store / "release-v1.tgz").write_bytes(b"payload")
    backend = LocalBackend(directory=store)

    resolved = backend.fetch("release-v1.tgz", tmp_path / "copy.tgz")

    assert resolved == "release-v1.tgz"
    assert (tmp_path / "copy.tgz").read_bytes() == b"payload"


def test_get_missing_bundle_has_no_fallback(tmp_path: Path) -> None:
    store = tmp_path / "store"
    store.mkdir()
    (store / "release-v0.tgz").write_bytes(b"older")
    backend = LocalBackend(directory=store)

    with pytest.raises(NotFound):
        backend.fetch("release-v1.tgz", tmp_path / "copy.tgz")

    assert not (tmp_path / "copy.tgz").exists()


def test_list_filters_tgz_files_and_sorts_newest_first(tmp_path: Path) -> None:
    store = tmp_path / "store"
    store.mkdir()
    for offset, name in enumerate(["a.tgz", "b.tgz", "c.tgz"]):
        path = store / name
        path.write_bytes(b"x")
        set_mtime(path, T0 + timedelta(hours=offset))
    (store / "notes.txt").write_text("ignored", encoding="utf-8")
    (store / "dir.tgz").mkdir()

    listed = LocalBackend(directory=store).list()

    assert [artifact.key for artifact in listed] == ["c.tgz", "b.tgz", "a.tgz"]
    assert listed[0].modified == T0 + timedelta(hours=2)


def test_list_fails_for_missing_directory(tmp_path: Path) -> None:
    with pytest.raises(ArchiveError) as excinfo:
        LocalBackend(directory=tmp_path / "missing").list()

    assert excinfo.value.phase == "reading directory entries"


def test_delete_removes_file_and_reports_failures(tmp_path: Path) -> None:
    store = tmp_path / "store"
    store.mkdir()
    (store / "a.tgz").write_bytes(b"x")
    backend = LocalBackend(directory=store)

    backend.delete("a.tgz")

    assert not (store / "a.tgz").exists()
    with pytest.raises(ArchiveError) as excinfo:
        backend.delete("a.tgz")
    assert "garbage collection" in excinfo.value.phase
