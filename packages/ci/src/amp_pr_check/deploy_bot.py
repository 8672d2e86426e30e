"""Hooks for the PR deploy bot, which serves a PR's dist output for manual testing."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import httpx
from amp_pr_check.core import DeployBotError, atomic_write_bytes, get_logger

from .http import body_snippet

log = get_logger(__name__)

CDN_URL_RE = re.compile(r"https://cdn\.ampproject\.org/((?:[\w.-]+/)*[\w.-]+\.js)")


def dist_host_url(base: str, run_id: str, *, prefix: str = "amp") -> str:
    return f"{base.rstrip('/')}/{prefix}_dist_{run_id}"


def rewrite_html(html: str, host_url: str) -> str:
    return CDN_URL_RE.sub(lambda m: f"{host_url}/dist/{m.group(1)}", html)


def replace_urls(directory: Path, host_url: str) -> int:
    """
    Point CDN script URLs in every HTML file under `directory` at `host_url`.
    Returns the number of files changed.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise DeployBotError(f"Cannot rewrite URLs, not a directory: {directory}")

    changed = 0
    for path in sorted(directory.rglob("*.html")):
        original = path.read_text(encoding="utf-8")
        rewritten = rewrite_html(original, host_url)
        if rewritten != original:
            atomic_write_bytes(path, rewritten.encode("utf-8"))
            changed += 1

    log.info("deploy_bot.urls_replaced", directory=str(directory), files=changed)
    return changed


@dataclass(slots=True)
class DeployBot:
    client: httpx.Client
    bot_url: str
    host_url: str
    run_id: str
    head_sha: str
    root: Path = Path(".")

    def replace_urls(self, directory: str) -> int:
        return replace_urls(self.root / directory, self.host_url)

    def signal_url(self) -> str:
        return (
            f"{self.bot_url.rstrip('/')}/v0/pr-deploy/travisbuilds/"
            f"{self.run_id}/headshas/{self.head_sha}/0"
        )

    def signal_upload_complete(self) -> None:
        url = self.signal_url()
        try:
            resp = self.client.post(url)
        except httpx.HTTPError as e:
            raise DeployBotError(f"Deploy bot unreachable: {e}") from e

        if resp.status_code >= 400:
            raise DeployBotError(
                f"Deploy bot returned HTTP {resp.status_code} for {url}"
                f" (body: {body_snippet(resp)})"
            )
        log.info("deploy_bot.signaled", url=url, status=resp.status_code)
