from __future__ import annotations

import pytest
from amp_pr_check.core import PreconditionError
from amp_pr_check.git import (
    GIT_BRANCH_URL,
    GitInfo,
    print_change_summary,
    short_sha,
    verify_branch_creation_point,
)


def _git(fake_runner, *, merge_base: str | None) -> GitInfo:
    fake_runner.outputs.update(
        {
            ("git", "merge-base"): merge_base,
            ("git", "rev-parse", "--abbrev-ref"): "feature-x",
            ("git", "rev-parse", "HEAD"): "0123456789abcdef",
            ("git", "rev-parse", "origin/master"): "fedcba9876543210",
            ("git", "diff", "--stat"): " src/a.js | 2 +-",
            ("git", "-c"): "* 0123456 Fix thing (dev)",
        }
    )
    return GitInfo(fake_runner)


def test_short_sha() -> None:
    assert short_sha("0123456789abcdef") == "0123456"


def test_branch_creation_point_none_when_merge_base_fails(fake_runner) -> None:
    assert _git(fake_runner, merge_base=None).branch_creation_point() is None


def test_verify_branch_creation_point_ok(fake_runner, reporter, console_buffer) -> None:
    git = _git(fake_runner, merge_base="abc1234abc")
    assert verify_branch_creation_point(git, reporter, "checks") == "abc1234abc"
    assert console_buffer.getvalue() == ""


def test_verify_branch_creation_point_reports_remediation(
    fake_runner, reporter, console_buffer
) -> None:
    git = _git(fake_runner, merge_base=None)
    with pytest.raises(PreconditionError, match="feature-x"):
        verify_branch_creation_point(git, reporter, "checks")

    out = console_buffer.getvalue()
    assert "checks: ERROR: Could not find a common ancestor for feature-x and master." in out
    assert "checks: NOTE: To fix this, rebase your branch on master" in out
    assert GIT_BRANCH_URL in out


def test_change_summary_for_pull_request(fake_runner, reporter, console_buffer) -> None:
    git = _git(fake_runner, merge_base="aaaaaaa111")
    print_change_summary(git, reporter, "checks", pull_request_sha="bbbbbbb222")

    out = console_buffer.getvalue()
    assert "checks: origin/master is currently at commit fedcba9" in out
    assert "Testing the following changes at commit bbbbbbb" in out
    assert "src/a.js | 2 +-" in out
    assert "was forked from master at aaaaaaa:" in out
    assert "* 0123456 Fix thing (dev)" in out


def test_change_summary_for_push_uses_head(fake_runner, reporter, console_buffer) -> None:
    git = _git(fake_runner, merge_base="aaaaaaa111")
    print_change_summary(git, reporter, "checks")

    out = console_buffer.getvalue()
    assert "Testing the following changes at commit 0123456" in out
    assert "currently at commit" not in out
