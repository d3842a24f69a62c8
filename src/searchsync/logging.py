"""Structured logging configuration using structlog."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(debug: bool = False, stream: TextIO | None = None) -> None:
    """Route structlog and stdlib logging to one JSON stream.

    The server logs to stdout. One-shot CLI commands pass stderr so that
    their stdout carries only the command's result. Context bound with
    structlog.contextvars, such as the request id, is merged into every
    line.

    Args:
        debug: Enable debug-level logging, including per-row store writes.
        stream: Output stream; defaults to stdout.
    """
    level = logging.DEBUG if debug else logging.INFO
    stream = stream or sys.stdout

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(stream)],
        force=True,
    )

    # Requests are logged by RequestLoggingMiddleware.
    logging.getLogger("uvicorn.access").disabled = True
    for name in ["uvicorn", "uvicorn.error"]:
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
