"""Logging for the collector: structlog on top of stdlib logging.

Every ingestion cycle binds ``cycle=<n>`` through structlog contextvars,
so fetch, per-asset and summary events of one poll can be grouped.
asyncio.to_thread copies the context, so events logged from the record
rewrite thread carry the same binding.
"""

import logging
import os
from contextlib import AbstractContextManager

import structlog

# Third-party loggers that would otherwise log every request or connection
QUIET_LOGGERS = ("aiohttp.access", "aiohttp.client", "uvicorn.access", "uvicorn.error")


def setup_logging(log_level: str = "INFO", quiet_level: str = "WARNING") -> None:
    """Configure structlog rendering and route stdlib logging through it.

    LOG_FORMAT selects the renderer: "json" or "console" (default).
    Loggers in QUIET_LOGGERS are held at ``quiet_level`` whatever the
    application level is.
    """
    log_format = os.environ.get("LOG_FORMAT", "console").lower()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    quiet = getattr(logging, quiet_level.upper(), logging.WARNING)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet)


def cycle_context(cycle: int) -> AbstractContextManager:
    """Bind the ingestion cycle number to every event logged inside the block."""
    return structlog.contextvars.bound_contextvars(cycle=cycle)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger with the given name."""
    return structlog.get_logger(name)
