"""Gzip tarball codec for release artifact bundles.

Archives are rooted at the source directory itself: ``source_dir/a/b`` is stored
as ``a/b``. Symbolic links are stored as links and never followed, so cyclic or
external links cannot inflate an archive.
"""

from __future__ import annotations

import os
import tarfile
from pathlib import Path

from release_artifacts.errors import ArchiveError

COMPRESS_LEVEL = 6


def create_archive(source_dir: str | Path, destination: str | Path) -> Path:
    """Tar and gzip the contents of *source_dir* into *destination*."""
    source = Path(source_dir)
    output = Path(destination)
    if not source.is_dir():
        raise ArchiveError(
            "opening the source directory",
            hint="Pass an existing directory to archive.",
            context={"operation": "create_archive", "path": str(source)},
        ) from FileNotFoundError(str(source))

    try:
        tar = tarfile.open(output, "w:gz", compresslevel=COMPRESS_LEVEL)
    except OSError as exc:
        raise ArchiveError(
            "creating the archive file",
            context={"operation": "create_archive", "path": str(output), "error": str(exc)},
        ) from exc

    try:
        with tar:
            for path in _walk(source):
                tar.add(path, arcname=path.relative_to(source).as_posix(), recursive=False)
    except OSError as exc:
        raise ArchiveError(
            "writing the archive stream",
            context={"operation": "create_archive", "path": str(source), "error": str(exc)},
        ) from exc
    return output


def extract_archive(source: str | Path, destination: str | Path) -> Path:
    """Gunzip and untar *source* into *destination*, creating it if needed."""
    archive_path = Path(source)
    target = Path(destination)
    try:
        tar = tarfile.open(archive_path, "r:gz")
    except (OSError, tarfile.TarError) as exc:
        raise ArchiveError(
            "opening the archive",
            context={"operation": "extract_archive", "path": str(archive_path), "error": str(exc)},
        ) from exc

    try:
        with tar:
            target.mkdir(parents=True, exist_ok=True)
            tar.extractall(target, filter="tar")
    except (OSError, EOFError, tarfile.TarError) as exc:
        raise ArchiveError(
            "unpacking the archive",
            context={"operation": "extract_archive", "path": str(target), "error": str(exc)},
        ) from exc
    return target


def _walk(root: Path) -> list[Path]:
    entries: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_reraise, followlinks=False):
        dirnames.sort()
        current = Path(dirpath)
        for name in sorted([*dirnames, *filenames]):
            entries.append(current / name)
    return entries


def _reraise(exc: OSError) -> None:
    raise exc


__all__ = ["COMPRESS_LEVEL", "create_archive", "extract_archive"]
