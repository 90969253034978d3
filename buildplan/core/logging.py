"""Structured logging via structlog.

Configures structlog once at CLI startup. Library modules keep logging
through `logging.getLogger(__name__)`; the stdlib bridge below sends those
records to stderr so the plan printed on stdout stays machine-readable.

Renderer selection:
  debug=True:  `ConsoleRenderer` with colours for interactive use.
  debug=False: `JSONRenderer` for build pipelines that collect logs.
"""

from __future__ import annotations

import logging
import sys

import structlog


def configure_structlog(debug: bool = False) -> None:
    """Configure structlog for the process lifetime.

    Safe to call more than once.
    """
    shared_processors: list = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if debug:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.DEBUG if debug else logging.WARNING
        ),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
        level=logging.DEBUG if debug else logging.WARNING,
        force=True,
    )
