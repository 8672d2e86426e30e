"""Synchronous external command execution.

Commands are argv sequences, never shell strings. The child inherits this
process's stdout/stderr so tool output streams straight into the CI log.
No timeout and no retry: a hung tool hangs the job until the CI
platform's own job timeout fires.
"""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence

from amp_pr_check.console import Reporter
from amp_pr_check.core import CommandFailedError, get_logger

log = get_logger(__name__)

# Shell conventions for "not found" / "not executable".
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


@dataclass(frozen=True, slots=True)
class CommandResult:
    argv: tuple[str, ...]
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def display(argv: Sequence[str]) -> str:
    return shlex.join([str(a) for a in argv])


class CommandRunner:
    def __init__(self, *, cwd: Path | None = None) -> None:
        self.cwd = Path(cwd) if cwd is not None else None

    def _env(self, env: Mapping[str, str] | None) -> dict[str, str] | None:
        if env is None:
            return None
        return {**os.environ, **env}

    def run(
        self, argv: Sequence[str], *, env: Mapping[str, str] | None = None
    ) -> CommandResult:
        """Run `argv` to completion and return its exit status. Never raises."""
        args = tuple(str(a) for a in argv)
        log.info(
            "command.run",
            command=display(args),
            env_overrides=sorted(env.keys()) if env else [],
        )

        try:
            proc = subprocess.run(
                list(args),
                cwd=str(self.cwd) if self.cwd is not None else None,
                env=self._env(env),
                check=False,
            )
            code = proc.returncode
        except FileNotFoundError:
            code = EXIT_NOT_FOUND
        except PermissionError:
            code = EXIT_NOT_EXECUTABLE

        if code != 0:
            log.warning("command.failed", command=display(args), returncode=code)
        return CommandResult(argv=args, returncode=code)

    def run_or_fail(
        self, argv: Sequence[str], *, env: Mapping[str, str] | None = None
    ) -> CommandResult:
        res = self.run(argv, env=env)
        if not res.ok:
            raise CommandFailedError(res.argv, res.returncode)
        return res

    def capture(self, argv: Sequence[str]) -> str:
        """Run a query command and return its stripped stdout."""
        args = tuple(str(a) for a in argv)
        log.debug("command.capture", command=display(args))
        try:
            proc = subprocess.run(
                list(args),
                cwd=str(self.cwd) if self.cwd is not None else None,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandFailedError(args, EXIT_NOT_FOUND) from e

        if proc.returncode != 0:
            raise CommandFailedError(args, proc.returncode)
        return proc.stdout.strip()


def timed_run(
    runner: CommandRunner,
    reporter: Reporter,
    argv: Sequence[str],
    *,
    label: str,
) -> CommandResult:
    with reporter.timed(display(argv), label):
        return runner.run(argv)


def timed_run_or_fail(
    runner: CommandRunner,
    reporter: Reporter,
    argv: Sequence[str],
    *,
    label: str,
) -> CommandResult:
    with reporter.timed(display(argv), label):
        return runner.run_or_fail(argv)
