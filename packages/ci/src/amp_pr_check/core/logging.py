from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from rich.console import Console
from rich.logging import RichHandler
from structlog.contextvars import bind_contextvars, merge_contextvars

_CONFIGURED = False


def _shared_processors() -> list[Any]:
    return [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def configure_logging(*, level: str = "INFO", fmt: str = "console") -> None:
    """
    Route structlog through stdlib logging.

    Logs go to stderr so that progress lines printed on stdout by the
    reporter stay readable in CI output.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())

    handler: logging.Handler
    if fmt == "console":
        handler = RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=False,
            show_path=False,
            console=Console(stderr=True),
        )
        processors = _shared_processors() + [
            structlog.processors.KeyValueRenderer(sort_keys=True),
        ]
    else:
        handler = logging.StreamHandler(stream=sys.stderr)
        processors = _shared_processors() + [structlog.processors.JSONRenderer()]

    handler.setFormatter(logging.Formatter("%(message)s"))
    handler.setLevel(level.upper())
    root.addHandler(handler)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: str = "amp_pr_check") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind(**values: Any) -> None:
    bind_contextvars(**values)
