"""
Structured logging for sweep runs.

Manifesto:
    A sweep touches hundreds of targets concurrently; plain text logs from
    interleaved worker threads are unreadable.  Every log line here is a
    structured event carrying the run id and search module, so a single
    run can be filtered out of an aggregated log stream.

    - **Structured:** key/value events via structlog
    - **Correlated:** ``run_id`` and ``module`` bound once per run
    - **Out of the way:** logs go to stderr so the live record stream on
      stdout can be piped

Pipeline:
    ::

        configure_logging(level="INFO", json_format=None)
            │
            ▼
        merge_contextvars  ─ run_id, module bound by LogContext
        add_log_level
        logger=<name>      ─ initial value bound by get_logger
        TimeStamper(iso)   ─ optional
        _stamp_service     ─ service="sweep"
        JSONRenderer (stderr not a tty) | ConsoleRenderer (tty)

Examples:
    >>> configure_logging(level="DEBUG")
    >>> log = get_logger(__name__)
    >>> with LogContext(run_id="abc123", module="tcp"):
    ...     log.info("queue.dispatch", target="web01", running=3)

Tags:
    logging, structlog, observability, sweep-core
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog
from structlog._config import BoundLoggerLazyProxy
from structlog.types import EventDict, Processor, WrappedLogger

SERVICE = "sweep"


def _stamp_service(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", SERVICE)
    return event_dict


def _resolve_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    return numeric if isinstance(numeric, int) else logging.INFO


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    *,
    timestamps: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Route structlog events to *stream* (stderr by default).

    Args:
        level: DEBUG, INFO, WARNING or ERROR; anything else means INFO
        json_format: JSON lines when True, console when False, and JSON
            whenever the stream is not a terminal when None
        timestamps: Prefix events with an ISO timestamp
        stream: Destination, mainly for tests
    """
    out = stream or sys.stderr
    numeric = _resolve_level(level)
    is_tty = hasattr(out, "isatty") and out.isatty()
    use_json = (not is_tty) if json_format is None else json_format

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
    ]
    if timestamps:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(_stamp_service)
    if use_json:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer(colors=is_tty)]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=False,
    )

    # httpx logs through the stdlib; keep it at the same threshold
    logging.basicConfig(stream=out, level=numeric, format="%(levelname)s %(name)s %(message)s")


def get_logger(name: str | None = None) -> Any:
    """Lazy structlog logger; *name* is carried as the ``logger`` key.

    Bound as an initial value: the PrintLogger underneath has no ``name``.
    """
    if name is None:
        return structlog.get_logger()
    # ``logger=`` collides with wrap_logger's own ``logger`` parameter, so the
    # lazy proxy is built directly with it as an initial value.
    return BoundLoggerLazyProxy(None, initial_values={"logger": name}, logger_factory_args=())


def bind_context(**values: Any) -> None:
    """Attach *values* to every event logged from this context."""
    structlog.contextvars.bind_contextvars(**values)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind run-scoped keys for the duration of a ``with`` block.

    Example:
        with LogContext(run_id=runner.run_id, module="dns"):
            logger.info("sweep.start")
    """

    def __init__(self, **values: Any) -> None:
        self.values = values

    def __enter__(self) -> LogContext:
        bind_context(**self.values)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        unbind_context(*self.values)


__all__ = [
    "SERVICE",
    "LogContext",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
]
