from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from amp_pr_check.console import Reporter, cyan
from amp_pr_check.core import get_logger
from amp_pr_check.process import CommandRunner

from .archive import extract, pack, verify_entries
from .credentials import authenticate
from .types import ArtifactKind, ArtifactSpec, StorageTarget

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TransferContext:
    """
    Everything a transfer needs, passed explicitly instead of read from the
    process environment.
    """

    target: StorageTarget
    secret: str
    runner: CommandRunner
    reporter: Reporter
    root: Path
    run_id: str
    archive_prefix: str = "amp"

    def spec(self, kind: ArtifactKind) -> ArtifactSpec:
        return ArtifactSpec.for_kind(kind, self.run_id, prefix=self.archive_prefix)


def _authenticate(ctx: TransferContext) -> None:
    authenticate(ctx.target, secret=ctx.secret, runner=ctx.runner, root=ctx.root)


def upload(spec: ArtifactSpec, ctx: TransferContext, *, label: str) -> str:
    """Pack, authenticate, copy to the bucket. Returns the object URI."""
    rep = ctx.reporter
    archive_path = ctx.root / spec.archive_name
    dest = ctx.target.object_uri(spec.archive_name)

    rep.info(
        label,
        f"Compressing {cyan(', '.join(spec.entries))} into {cyan(spec.archive_name)}...",
        leading_newline=True,
    )
    with rep.fold("zip_results"):
        pack(archive_path, spec.entries, root=ctx.root)

    rep.info(
        label,
        f"Uploading {cyan(spec.archive_name)} to {cyan(ctx.target.bucket)}...",
    )
    with rep.fold("upload_results"):
        _authenticate(ctx)
        ctx.runner.run_or_fail(["gsutil", "-m", "cp", "-r", str(archive_path), dest])

    log.info("transfer.uploaded", kind=spec.kind.value, uri=dest)
    return dest


def download(spec: ArtifactSpec, ctx: TransferContext, *, label: str) -> dict[str, int]:
    """
    Authenticate, copy from the bucket, extract in place, then verify the
    expected outputs exist. Returns file counts per output entry.
    """
    rep = ctx.reporter
    archive_path = ctx.root / spec.archive_name
    src = ctx.target.object_uri(spec.archive_name)

    rep.info(label, f"Downloading build output from {cyan(src)}...")
    with rep.fold("download_results"):
        _authenticate(ctx)
        ctx.runner.run_or_fail(["gsutil", "cp", src, str(archive_path)])

    rep.info(label, f"Extracting {cyan(spec.archive_name)}...")
    with rep.fold("unzip_results"):
        extract(archive_path, root=ctx.root)

    rep.info(label, "Verifying extracted files...")
    with rep.fold("verify_unzip_results"):
        counts = verify_entries(spec.entries, root=ctx.root)
        for entry, n in counts.items():
            rep.raw(f"{entry}: {n} files")

    log.info("transfer.downloaded", kind=spec.kind.value, uri=src)
    return counts
