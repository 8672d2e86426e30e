"""Entry points that move a fixed kind of build output to or from storage."""

from __future__ import annotations

from typing import Protocol

from .transfer import TransferContext, download, upload
from .types import ArtifactKind

# Trees whose HTML must point at the uploaded dist, not the public CDN.
URL_REWRITE_DIRS: tuple[str, ...] = ("test/manual", "examples")


class DistPostProcessor(Protocol):
    def replace_urls(self, directory: str) -> int: ...
    def signal_upload_complete(self) -> None: ...


def download_build_output(ctx: TransferContext, label: str) -> dict[str, int]:
    return download(ctx.spec(ArtifactKind.BUILD), ctx, label=label)


def download_dist_output(ctx: TransferContext, label: str) -> dict[str, int]:
    return download(ctx.spec(ArtifactKind.DIST), ctx, label=label)


def upload_build_output(ctx: TransferContext, label: str) -> str:
    return upload(ctx.spec(ArtifactKind.BUILD), ctx, label=label)


def upload_dist_output(ctx: TransferContext, label: str) -> str:
    return upload(ctx.spec(ArtifactKind.DIST), ctx, label=label)


def process_and_upload_dist_output(
    ctx: TransferContext, label: str, deploy_bot: DistPostProcessor
) -> str:
    # Rewrite before packing so the archive carries the rewritten pages.
    for directory in URL_REWRITE_DIRS:
        deploy_bot.replace_urls(directory)
    uri = upload_dist_output(ctx, label)
    deploy_bot.signal_upload_complete()
    return uri
