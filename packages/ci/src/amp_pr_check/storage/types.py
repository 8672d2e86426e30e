from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from amp_pr_check.core import ConfigError


class ArtifactKind(str, Enum):
    BUILD = "build"
    DIST = "dist"


BUILD_OUTPUT_DIRS: tuple[str, ...] = (
    "build/",
    "dist/",
    "dist.3p/",
    "EXTENSIONS_CSS_MAP",
)

DIST_OUTPUT_DIRS: tuple[str, ...] = (
    "build/",
    "dist/",
    "dist.3p/",
    "dist.tools/",
    "EXTENSIONS_CSS_MAP",
    "examples/",
    "test/manual/",
)

_OUTPUT_DIRS: dict[ArtifactKind, tuple[str, ...]] = {
    ArtifactKind.BUILD: BUILD_OUTPUT_DIRS,
    ArtifactKind.DIST: DIST_OUTPUT_DIRS,
}


def output_dirs(kind: ArtifactKind) -> tuple[str, ...]:
    return _OUTPUT_DIRS[ArtifactKind(kind)]


def archive_name(kind: ArtifactKind, run_id: str, *, prefix: str = "amp") -> str:
    run_id = str(run_id or "").strip()
    if not run_id:
        raise ConfigError(
            "A CI run id is required to name build archives "
            "(set TRAVIS_BUILD_NUMBER or PR_CHECK_RUN_ID)."
        )
    return f"{prefix}_{ArtifactKind(kind).value}_{run_id}.zip"


@dataclass(frozen=True, slots=True)
class ArtifactSpec:
    """
    Which archive to move and which outputs go in it.
    """

    kind: ArtifactKind
    archive_name: str
    entries: tuple[str, ...]

    @classmethod
    def for_kind(
        cls, kind: ArtifactKind, run_id: str, *, prefix: str = "amp"
    ) -> "ArtifactSpec":
        return cls(
            kind=ArtifactKind(kind),
            archive_name=archive_name(kind, run_id, prefix=prefix),
            entries=output_dirs(kind),
        )


@dataclass(frozen=True, slots=True)
class StorageTarget:
    """
    Remote bucket plus the service account allowed to write to it.
    """

    bucket: str
    key_file: Path
    encrypted_key_file: Path
    project_id: str
    service_account: str
    key_digest: str = "sha256"

    def object_uri(self, name: str) -> str:
        return f"{self.bucket.rstrip('/')}/{name}"


@dataclass(frozen=True, slots=True)
class Credential:
    """A decrypted service-account key on local disk."""

    key_file: Path
    service_account: str
