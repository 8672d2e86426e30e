"""Sauce Connect proxy lifecycle for browser tests."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import httpx
from amp_pr_check.console import Reporter, cyan
from amp_pr_check.core import SauceConnectError, get_logger
from amp_pr_check.process import CommandRunner

from .http import body_snippet

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SauceCredentials:
    username: str
    access_key: str

    def env(self) -> dict[str, str]:
        return {"SAUCE_USERNAME": self.username, "SAUCE_ACCESS_KEY": self.access_key}


def fetch_access_key(client: httpx.Client, token_url: str) -> str:
    """GET a short-lived access key from the token dealer."""
    try:
        resp = client.get(token_url)
    except httpx.HTTPError as e:
        raise SauceConnectError(f"Token dealer unreachable: {e}") from e

    if resp.status_code >= 400:
        raise SauceConnectError(
            f"Token dealer returned HTTP {resp.status_code}"
            f" (body: {body_snippet(resp)})"
        )

    token = resp.text.strip()
    if not token:
        raise SauceConnectError("Token dealer returned an empty access key")
    log.info("sauce.token_fetched", url=token_url)
    return token


def start_sauce_connect(
    runner: CommandRunner,
    reporter: Reporter,
    credentials: SauceCredentials,
    *,
    script: str,
    label: str,
) -> None:
    reporter.info(
        label, f"Starting Sauce Connect Proxy: {cyan(script)}", leading_newline=True
    )
    runner.run_or_fail([script], env=credentials.env())


def stop_sauce_connect(
    runner: CommandRunner,
    reporter: Reporter,
    *,
    script: str,
    label: str,
) -> None:
    reporter.info(
        label, f"Stopping Sauce Connect Proxy: {cyan(script)}", leading_newline=True
    )
    runner.run_or_fail([script])


@contextmanager
def sauce_connect(
    runner: CommandRunner,
    reporter: Reporter,
    credentials: SauceCredentials,
    *,
    start_script: str,
    stop_script: str,
    label: str,
) -> Iterator[None]:
    start_sauce_connect(runner, reporter, credentials, script=start_script, label=label)
    try:
        yield
    finally:
        stop_sauce_connect(runner, reporter, script=stop_script, label=label)
