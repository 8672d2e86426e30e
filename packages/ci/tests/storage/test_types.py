from __future__ import annotations

import pytest
from amp_pr_check.core import ConfigError
from amp_pr_check.storage import (
    BUILD_OUTPUT_DIRS,
    DIST_OUTPUT_DIRS,
    ArtifactKind,
    ArtifactSpec,
    archive_name,
    output_dirs,
)


def test_archive_names_for_run() -> None:
    assert archive_name(ArtifactKind.BUILD, "1234") == "amp_build_1234.zip"
    assert archive_name(ArtifactKind.DIST, "1234") == "amp_dist_1234.zip"


def test_build_name_is_dist_name_with_kind_swapped() -> None:
    build = archive_name(ArtifactKind.BUILD, "98765")
    dist = archive_name(ArtifactKind.DIST, "98765")
    assert build == dist.replace("_dist_", "_build_")
    assert "98765" in build and "98765" in dist


def test_archive_name_prefix_and_deterministic() -> None:
    a = archive_name(ArtifactKind.BUILD, "7", prefix="other")
    assert a == "other_build_7.zip"
    assert a == archive_name(ArtifactKind.BUILD, "7", prefix="other")


@pytest.mark.parametrize("run_id", ["", "   ", None])
def test_archive_name_requires_run_id(run_id) -> None:
    with pytest.raises(ConfigError):
        archive_name(ArtifactKind.BUILD, run_id)


def test_dist_dirs_extend_build_dirs() -> None:
    assert set(DIST_OUTPUT_DIRS) == set(BUILD_OUTPUT_DIRS) | {
        "dist.tools/",
        "examples/",
        "test/manual/",
    }
    assert output_dirs(ArtifactKind.BUILD) == BUILD_OUTPUT_DIRS
    assert output_dirs("dist") == DIST_OUTPUT_DIRS


def test_spec_for_kind(storage_target) -> None:
    spec = ArtifactSpec.for_kind(ArtifactKind.BUILD, "1234")
    assert spec.archive_name == "amp_build_1234.zip"
    assert spec.entries == BUILD_OUTPUT_DIRS
    assert (
        storage_target.object_uri(spec.archive_name)
        == "gs://amp-travis-builds/amp_build_1234.zip"
    )
