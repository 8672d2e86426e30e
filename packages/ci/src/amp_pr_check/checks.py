"""
Quick source checks run before unit and integration tests
(CI stage = build, job = checks).
"""

from __future__ import annotations

from typing import AbstractSet, Sequence

from amp_pr_check.console import Reporter
from amp_pr_check.git import GitInfo, print_change_summary, verify_branch_creation_point
from amp_pr_check.process import CommandRunner, timed_run_or_fail

JOB_NAME = "checks"

ALWAYS: tuple[str, ...] = (
    "update-packages",
    "check-exact-versions",
    "lint",
    "presubmit",
)

# Build target -> gulp tasks it gates on PR builds.
TARGETED: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("AVA", ("ava",)),
    ("BABEL_PLUGIN", ("babel-plugin-tests",)),
    ("CACHES_JSON", ("caches-json", "json-syntax")),
    ("DOCS", ("check-links",)),
    ("DEV_DASHBOARD", ("dev-dashboard-tests",)),
    ("RUNTIME", ("dep-check", "check-types")),
)

KNOWN_TARGETS = frozenset(t for t, _ in TARGETED)


def planned_tasks(
    *, is_pull_request: bool, build_targets: AbstractSet[str] = frozenset()
) -> list[str]:
    """
    Gulp tasks for this build. Push builds run everything except link
    checking, which only matters for PRs.
    """
    tasks = list(ALWAYS)
    for target, gated in TARGETED:
        if is_pull_request:
            if target in build_targets:
                tasks.extend(gated)
        elif target != "DOCS":
            tasks.extend(gated)
    return tasks


def run_checks(
    runner: CommandRunner,
    reporter: Reporter,
    git: GitInfo,
    *,
    is_pull_request: bool,
    build_targets: AbstractSet[str] = frozenset(),
    pull_request_sha: str | None = None,
    gulp: Sequence[str] = ("gulp",),
) -> list[str]:
    with reporter.timed(JOB_NAME, JOB_NAME):
        if is_pull_request:
            verify_branch_creation_point(git, reporter, JOB_NAME)
            print_change_summary(
                git, reporter, JOB_NAME, pull_request_sha=pull_request_sha
            )

        tasks = planned_tasks(
            is_pull_request=is_pull_request, build_targets=build_targets
        )
        for task in tasks:
            timed_run_or_fail(runner, reporter, [*gulp, task], label=JOB_NAME)
    return tasks
