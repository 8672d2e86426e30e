from __future__ import annotations

import sys
from pathlib import Path

import pytest
from amp_pr_check.core import CommandFailedError
from amp_pr_check.process import CommandRunner, display, timed_run, timed_run_or_fail


def _py(code: str) -> list[str]:
    return [sys.executable, "-c", code]


def test_run_returns_exit_status_without_raising() -> None:
    res = CommandRunner().run(_py("raise SystemExit(3)"))
    assert res.returncode == 3
    assert not res.ok


def test_run_or_fail_raises_with_child_status() -> None:
    with pytest.raises(CommandFailedError) as ei:
        CommandRunner().run_or_fail(_py("raise SystemExit(4)"))
    assert ei.value.returncode == 4
    assert ei.value.exit_code == 4
    assert "exit status 4" in str(ei.value)


def test_missing_executable_maps_to_127() -> None:
    res = CommandRunner().run(["definitely-not-a-real-binary-amp-pr-check"])
    assert res.returncode == 127


def test_env_overrides_reach_child_and_inherit_rest(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("AMP_PR_CHECK_INHERITED", "yes")
    out = tmp_path / "env.txt"
    code = (
        "import os, pathlib;"
        f"pathlib.Path({str(out)!r}).write_text("
        "os.environ['SAUCE_USERNAME'] + ',' + os.environ['AMP_PR_CHECK_INHERITED'])"
    )
    CommandRunner().run_or_fail(_py(code), env={"SAUCE_USERNAME": "amphtml"})
    assert out.read_text() == "amphtml,yes"


def test_cwd_is_applied(tmp_path: Path) -> None:
    CommandRunner(cwd=tmp_path).run_or_fail(
        _py("import pathlib; pathlib.Path('marker').write_text('x')")
    )
    assert (tmp_path / "marker").read_text() == "x"


def test_capture_returns_stripped_stdout() -> None:
    assert CommandRunner().capture(_py("print('  abc123  ')")) == "abc123"


def test_capture_raises_on_failure() -> None:
    with pytest.raises(CommandFailedError):
        CommandRunner().capture(_py("raise SystemExit(1)"))


def test_display_quotes_arguments() -> None:
    assert display(["gsutil", "cp", "a b.zip", "gs://x"]) == "gsutil cp 'a b.zip' gs://x"


def test_timed_helpers_wrap_command(fake_runner, reporter, clock, console_buffer) -> None:
    fake_runner.fail(["gulp", "lint"], code=2)

    res = timed_run(fake_runner, reporter, ["gulp", "lint"], label="checks")
    assert res.returncode == 2

    with pytest.raises(CommandFailedError):
        timed_run_or_fail(fake_runner, reporter, ["gulp", "lint"], label="checks")

    out = console_buffer.getvalue()
    assert out.count("checks: Running gulp lint...") == 2
    assert out.count("checks: Done running gulp lint Total time: 0m 0s") == 2
