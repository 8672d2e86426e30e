from __future__ import annotations

from dataclasses import dataclass

from amp_pr_check.console import Reporter, cyan
from amp_pr_check.core import CommandFailedError, PreconditionError
from amp_pr_check.process import CommandRunner

GIT_BRANCH_URL = (
    "https://github.com/ampproject/amphtml/blob/master/contributing/"
    "getting-started-e2e.md#create-a-git-branch"
)


def short_sha(sha: str) -> str:
    return sha[:7]


@dataclass(slots=True)
class GitInfo:
    runner: CommandRunner
    trunk: str = "master"

    def branch_name(self) -> str:
        return self.runner.capture(["git", "rev-parse", "--abbrev-ref", "HEAD"])

    def commit_hash(self) -> str:
        return self.runner.capture(["git", "rev-parse", "HEAD"])

    def trunk_baseline(self) -> str:
        return self.runner.capture(["git", "rev-parse", f"origin/{self.trunk}"])

    def branch_creation_point(self) -> str | None:
        """Common ancestor of HEAD and the trunk, or None if there is none."""
        try:
            sha = self.runner.capture(["git", "merge-base", self.trunk, "HEAD"])
        except CommandFailedError:
            return None
        return sha or None

    def diff_stat(self) -> str:
        return self.runner.capture(["git", "diff", "--stat", f"{self.trunk}...HEAD"])

    def commit_log(self) -> str:
        return self.runner.capture(
            [
                "git",
                "-c",
                "log.showSignature=false",
                "log",
                "--graph",
                "--pretty=format:%h %s (%an)",
                f"{self.trunk}..HEAD",
            ]
        )


def verify_branch_creation_point(git: GitInfo, reporter: Reporter, label: str) -> str:
    """Raise PreconditionError unless the branch was forked from the trunk."""
    point = git.branch_creation_point()
    if point:
        return point

    branch = git.branch_name()
    reporter.error(
        label,
        f"Could not find a common ancestor for {cyan(branch)} and "
        f"{cyan(git.trunk)}. Was this PR branch properly forked?",
    )
    reporter.note(
        label,
        f"To fix this, rebase your branch on {cyan(git.trunk)}, or recreate it "
        f"by following the instructions at {cyan(GIT_BRANCH_URL)}.",
    )
    raise PreconditionError(
        f"Branch {branch} has no common ancestor with {git.trunk}"
    )


def print_change_summary(
    git: GitInfo,
    reporter: Reporter,
    label: str,
    *,
    pull_request_sha: str | None = None,
) -> None:
    if pull_request_sha:
        reporter.info(
            label,
            f"{cyan('origin/' + git.trunk)} is currently at commit "
            f"{cyan(short_sha(git.trunk_baseline()))}",
        )
        commit_sha = pull_request_sha
    else:
        commit_sha = git.commit_hash()

    reporter.info(
        label, f"Testing the following changes at commit {cyan(short_sha(commit_sha))}"
    )
    reporter.raw(git.diff_stat())

    point = git.branch_creation_point() or ""
    reporter.info(
        label,
        f"Commit log since branch {cyan(git.branch_name())} was forked from "
        f"{cyan(git.trunk)} at {cyan(short_sha(point))}:",
    )
    reporter.raw(git.commit_log() + "\n")
