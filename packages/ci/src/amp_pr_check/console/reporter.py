from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from amp_pr_check.core import get_logger, monotonic_ms
from rich.console import Console
from rich.markup import escape

log = get_logger(__name__)


def format_elapsed(ms: int) -> str:
    """Render a duration the way CI progress lines show it: `1m 1s`."""
    ms = max(0, int(ms))
    mins = ms // 60_000
    secs = (ms % 60_000) // 1000
    return f"{mins}m {secs}s"


def cyan(value: object) -> str:
    return f"[cyan]{escape(str(value))}[/cyan]"


def green(value: object) -> str:
    return f"[green]{escape(str(value))}[/green]"


class Reporter:
    """
    Console progress output for a CI job.

    Every line is prefixed with a bold yellow `<label>:` naming the job or
    entry point that produced it. Timing is only exposed as a scope
    (`timed`), so the "done" line is printed on every exit path.
    """

    def __init__(
        self,
        console: Console | None = None,
        *,
        clock: Callable[[], int] = monotonic_ms,
        fold_markers: bool = False,
    ) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.clock = clock
        self.fold_markers = fold_markers

    @staticmethod
    def prefix(label: str) -> str:
        return f"[bold yellow]{escape(label)}:[/bold yellow]"

    def info(self, label: str, message: str, *, leading_newline: bool = False) -> None:
        """Print a prefixed line. `message` may contain rich markup."""
        lead = "\n" if leading_newline else ""
        self.console.print(f"{lead}{self.prefix(label)} {message}", soft_wrap=True)

    def error(self, label: str, message: str) -> None:
        self.console.print(
            f"{self.prefix(label)} [red]ERROR:[/red] {message}", soft_wrap=True
        )

    def note(self, label: str, message: str) -> None:
        self.console.print(
            f"{self.prefix(label)} [yellow]NOTE:[/yellow] {message}", soft_wrap=True
        )

    def raw(self, text: str) -> None:
        """Print tool output verbatim, without re-wrapping long lines."""
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    @contextmanager
    def timed(self, name: str, label: str | None = None) -> Iterator[None]:
        label = label or name
        started = self.clock()
        self.info(label, f"Running {cyan(name)}...", leading_newline=True)
        log.debug("timed.start", name=name, label=label)
        try:
            yield
        finally:
            elapsed = self.clock() - started
            self.info(
                label,
                f"Done running {cyan(name)} Total time: {green(format_elapsed(elapsed))}",
            )
            log.debug("timed.finish", name=name, label=label, duration_ms=elapsed)

    @contextmanager
    def fold(self, name: str) -> Iterator[None]:
        """Group a block of output with Travis fold markers."""
        if not self.fold_markers:
            yield
            return

        self.raw(f"travis_fold:start:{name}\n")
        try:
            yield
        finally:
            self.raw(f"travis_fold:end:{name}")
