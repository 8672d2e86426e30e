from .runner import (
    CommandResult,
    CommandRunner,
    display,
    timed_run,
    timed_run_or_fail,
)

__all__ = [
    "CommandResult",
    "CommandRunner",
    "display",
    "timed_run",
    "timed_run_or_fail",
]
