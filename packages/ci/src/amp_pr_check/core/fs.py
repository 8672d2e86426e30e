import os
import tempfile
from pathlib import Path


def safe_unlink(path: os.PathLike[str] | str) -> None:
    try:
        Path(path).unlink(missing_ok=True)
    except OSError:
        return


def relpath_posix(path: Path, base_dir: Path) -> str:
    return Path(path).relative_to(base_dir).as_posix()


def iter_files(path: Path) -> list[Path]:
    """
    Files under `path` in sorted order. A plain file yields itself.
    """
    path = Path(path)
    if path.is_file():
        return [path]
    return sorted(p for p in path.rglob("*") if p.is_file())


def atomic_write_bytes(path: Path, data: bytes, *, mode: int = 0o644) -> None:
    """
    Atomically write bytes to `path`.

    The temp file lives in the target directory so the final rename is
    atomic; permissions are applied before the rename, so the file never
    appears with a wider mode than requested.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd: int | None = None
    tmp_path: Path | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.",
            suffix=".tmp",
            dir=str(path.parent),
            text=False,
        )
        tmp_path = Path(tmp_name)

        with os.fdopen(fd, "wb") as f:
            fd = None
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    finally:
        if fd is not None:
            os.close(fd)
        if tmp_path is not None and tmp_path.exists():
            safe_unlink(tmp_path)
