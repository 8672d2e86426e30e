from __future__ import annotations

import argparse
from pathlib import Path
from typing import Callable

from amp_pr_check.checks import KNOWN_TARGETS, run_checks
from amp_pr_check.console import Reporter
from amp_pr_check.core import (
    ConfigError,
    PrCheckError,
    Settings,
    bind,
    configure_logging,
    get_logger,
    load_settings,
)
from amp_pr_check.deploy_bot import DeployBot, dist_host_url
from amp_pr_check.git import GitInfo
from amp_pr_check.http import make_http_client
from amp_pr_check.process import CommandRunner
from amp_pr_check.sauce import (
    SauceCredentials,
    fetch_access_key,
    start_sauce_connect,
    stop_sauce_connect,
)
from amp_pr_check.storage import (
    StorageTarget,
    TransferContext,
    download_build_output,
    download_dist_output,
    process_and_upload_dist_output,
    upload_build_output,
    upload_dist_output,
)
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

Handler = Callable[[argparse.Namespace, Settings, Reporter, CommandRunner], None]


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="amp-pr-check")
    p.add_argument(
        "--root",
        default=None,
        help="Working tree containing build outputs (default: PR_CHECK_ROOT or .)",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    commands: dict[str, str] = {
        "download-build": "Download and unzip build output from storage",
        "download-dist": "Download and unzip dist output from storage",
        "upload-build": "Zip and upload build output to storage",
        "upload-dist": "Zip and upload dist output to storage",
        "process-and-upload-dist": "Rewrite URLs, upload dist output, signal the deploy bot",
        "sauce-start": "Fetch a Sauce Labs access key and start Sauce Connect",
        "sauce-stop": "Stop Sauce Connect",
    }
    for cmd, help_text in commands.items():
        sub.add_parser(cmd, help=help_text)

    checks = sub.add_parser("checks", help="Run quick source checks")
    checks.add_argument(
        "--target",
        action="append",
        dest="targets",
        choices=sorted(KNOWN_TARGETS),
        help="Build target affected by this PR (repeatable).",
    )
    return p


def make_console(s: Settings) -> Console:
    # CI logs are not a tty; keep colour there and never hard-wrap at 80 columns.
    force = True if (s.force_color or s.fold_markers) else None
    return Console(highlight=False, soft_wrap=True, force_terminal=force)


def storage_target(s: Settings) -> StorageTarget:
    return StorageTarget(
        bucket=s.bucket,
        key_file=s.key_file,
        encrypted_key_file=s.encrypted_key_file,
        project_id=s.project_id,
        service_account=s.service_account,
        key_digest=s.key_digest,
    )


def transfer_context(
    s: Settings, reporter: Reporter, runner: CommandRunner, root: Path
) -> TransferContext:
    if not s.run_id:
        raise ConfigError("No CI run id (set TRAVIS_BUILD_NUMBER or PR_CHECK_RUN_ID)")
    if s.decryption_secret is None:
        raise ConfigError("No storage key secret (set GCP_TOKEN)")
    return TransferContext(
        target=storage_target(s),
        secret=s.decryption_secret.get_secret_value(),
        runner=runner,
        reporter=reporter,
        root=root,
        run_id=s.run_id,
        archive_prefix=s.archive_prefix,
    )


def _root(args: argparse.Namespace, s: Settings) -> Path:
    # Absolute, since child commands run with this as their cwd.
    return (Path(args.root) if args.root else s.root).resolve()


def _transfer(fn: Callable[[TransferContext, str], object]) -> Handler:
    def _run(args, s, reporter, runner) -> None:
        fn(transfer_context(s, reporter, runner, _root(args, s)), args.cmd)

    return _run


def _process_and_upload_dist(args, s, reporter, runner) -> None:
    root = _root(args, s)
    ctx = transfer_context(s, reporter, runner, root)
    head_sha = s.pull_request_sha or GitInfo(runner, trunk=s.trunk_branch).commit_hash()
    with make_http_client() as client:
        bot = DeployBot(
            client=client,
            bot_url=s.deploy_bot_url,
            host_url=dist_host_url(s.dist_host_base, ctx.run_id, prefix=s.archive_prefix),
            run_id=ctx.run_id,
            head_sha=head_sha,
            root=root,
        )
        process_and_upload_dist_output(ctx, args.cmd, bot)


def _checks(args, s, reporter, runner) -> None:
    run_checks(
        runner,
        reporter,
        GitInfo(runner, trunk=s.trunk_branch),
        is_pull_request=s.is_pull_request,
        build_targets=frozenset(args.targets or ()),
        pull_request_sha=s.pull_request_sha,
    )


def _sauce_start(args, s, reporter, runner) -> None:
    with make_http_client() as client:
        key = fetch_access_key(client, s.sauce_token_url)
    creds = SauceCredentials(username=s.sauce_username, access_key=key)
    start_sauce_connect(
        runner, reporter, creds, script=s.sauce_start_script, label=args.cmd
    )


def _sauce_stop(args, s, reporter, runner) -> None:
    stop_sauce_connect(runner, reporter, script=s.sauce_stop_script, label=args.cmd)


_HANDLERS: dict[str, Handler] = {
    "download-build": _transfer(download_build_output),
    "download-dist": _transfer(download_dist_output),
    "upload-build": _transfer(upload_build_output),
    "upload-dist": _transfer(upload_dist_output),
    "process-and-upload-dist": _process_and_upload_dist,
    "checks": _checks,
    "sauce-start": _sauce_start,
    "sauce-stop": _sauce_stop,
}


def main(
    argv: list[str] | None = None,
    *,
    settings: Settings | None = None,
    runner: CommandRunner | None = None,
    reporter: Reporter | None = None,
) -> int:
    args = _build_parser().parse_args(argv)
    s = settings or load_settings()
    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("amp_pr_check")
    bind(command=args.cmd, run_id=s.run_id)

    reporter = reporter or Reporter(make_console(s), fold_markers=s.fold_markers)
    runner = runner or CommandRunner(cwd=_root(args, s))

    reporter.console.print(
        Panel.fit(
            Text(f"amp-pr-check - {args.cmd}\nrun_id={s.run_id or '-'}", style="bold"),
            title="Run",
        )
    )

    try:
        with reporter.timed(args.cmd, args.cmd):
            _HANDLERS[args.cmd](args, s, reporter, runner)
    except PrCheckError as e:
        reporter.error(args.cmd, escape(str(e)))
        log.error("command.failed", error=str(e), exit_code=e.exit_code)
        return e.exit_code

    log.info("command.succeeded")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
