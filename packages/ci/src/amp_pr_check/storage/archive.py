from __future__ import annotations

import os
import zipfile
from pathlib import Path
from typing import Iterable

from amp_pr_check.core import (
    ArchiveError,
    get_logger,
    iter_files,
    relpath_posix,
    sha256_file,
)

log = get_logger(__name__)


def _resolve_entry(root: Path, entry: str) -> Path:
    p = root / entry.rstrip("/")
    if not p.exists():
        raise ArchiveError(f"Missing build output: {entry} (under {root})")
    return p


def _iter_dirs(path: Path) -> list[Path]:
    if not path.is_dir():
        return []
    return [path, *sorted(p for p in path.rglob("*") if p.is_dir())]


def pack(archive_path: Path, entries: Iterable[str], *, root: Path) -> Path:
    """
    Compress `entries` (paths relative to `root`) into a fresh zip archive.

    Any existing archive at `archive_path` is replaced; there is no
    incremental update. Every directory gets its own entry, so empty output
    directories are recreated on extract.
    """
    root = Path(root)
    archive_path = Path(archive_path)
    sources = [_resolve_entry(root, e) for e in entries]

    files = 0
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(
            archive_path, mode="w", compression=zipfile.ZIP_DEFLATED
        ) as zf:
            for src in sources:
                for d in _iter_dirs(src):
                    zf.write(d, arcname=relpath_posix(d, root) + "/")
                for f in iter_files(src):
                    zf.write(f, arcname=relpath_posix(f, root))
                    files += 1
    except OSError as e:
        raise ArchiveError(f"Failed to write archive {archive_path}: {e}") from e

    digest = sha256_file(archive_path)
    log.info(
        "archive.packed",
        archive=str(archive_path),
        files=files,
        bytes=digest.bytes,
        sha256=digest.sha256,
    )
    return archive_path


def extract(archive_path: Path, *, root: Path) -> int:
    """
    Extract in place under `root`, overwriting existing files.

    Unix permission bits recorded at pack time are restored on files.
    """
    archive_path = Path(archive_path)
    try:
        with zipfile.ZipFile(archive_path) as zf:
            names = [n for n in zf.namelist() if not n.endswith("/")]
            for info in zf.infolist():
                target = zf.extract(info, path=Path(root))
                mode = (info.external_attr >> 16) & 0o777
                if mode and not info.is_dir():
                    os.chmod(target, mode)
    except (OSError, zipfile.BadZipFile) as e:
        raise ArchiveError(f"Failed to extract {archive_path}: {e}") from e

    log.info("archive.extracted", archive=str(archive_path), files=len(names))
    return len(names)


def verify_entries(entries: Iterable[str], *, root: Path) -> dict[str, int]:
    """
    Recursively list the expected outputs. A missing entry means extraction
    did not produce the expected layout.
    """
    root = Path(root)
    counts: dict[str, int] = {}
    for entry in entries:
        p = _resolve_entry(root, entry)
        counts[entry] = len(iter_files(p))
    log.info("archive.verified", entries=counts)
    return counts
