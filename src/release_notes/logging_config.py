"""Structured logging configuration.

Standard output carries the generated markdown, so every log line goes to
standard error. Log events are structured with structlog:

  {"event": "fetching_page", "url": "/repos/dolthub/dolt/pulls", "page": 2}

which keeps the trace of REST calls and git commands greppable when a run
aborts halfway.

Usage:
    from release_notes.logging_config import setup_logging, get_logger

    setup_logging(log_level="DEBUG")
    logger = get_logger(__name__)
    logger.info("release_located", repo="dolthub/dolt", tag="v0.22.9")
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, TextIO

import structlog


def setup_logging(
    environment: str | None = None,
    log_level: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Route the run's trace (page fetches, clones, aborts) to stderr.

    Interactive runs get the console renderer, colored only when stderr is
    a terminal so redirected traces stay plain. With ENVIRONMENT=production
    (CI jobs that archive the trace) each event is one JSON object per line.

    Args:
        environment: "development" or "production". Reads from
                     ENVIRONMENT env var if not provided.
        log_level: --log-level value. Reads from LOG_LEVEL env var if
                   not provided, then falls back to INFO.
        stream: Where log lines are written. Defaults to stderr.
    """
    env = environment or os.environ.get("ENVIRONMENT", "development")
    level = log_level or os.environ.get("LOG_LEVEL", "INFO")
    output = stream or sys.stderr

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=output.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output),
        cache_logger_on_first_use=True,
    )

    # httpx request lines and GitPython command traces use stdlib logging.
    logging.basicConfig(
        format="%(message)s",
        stream=output,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str) -> Any:
    """Return the logger a release_notes module binds at import time."""
    return structlog.get_logger(name)
