"""structlog setup for kbinventory.

Every log line goes to stderr; stdout belongs to the command output
(``kbinventory list --output json`` must stay parseable). Lines are JSON
when stderr is not a terminal and plain ``key=value`` text when it is.
Each logger carries the ``component`` it was created for, e.g.
``discovery``, ``teardown`` or ``client.kube``.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.typing import FilteringBoundLogger, Processor


def _renderer(json_output: bool) -> Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str = "info", *, json_output: bool = True) -> None:
    """Route kbinventory logs to stderr at *level*; unknown level names fall back to info."""
    log_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            _renderer(json_output),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> FilteringBoundLogger:
    """Logger for one kbinventory component (``discovery``, ``teardown``, ...)."""
    logger: FilteringBoundLogger = structlog.get_logger(component=component)
    return logger
