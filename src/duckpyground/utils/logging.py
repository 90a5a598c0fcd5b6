"""Logging configuration.

DuckPyground logs through `structlog <https://www.structlog.org>`_
on top of the standard library :mod:`logging` module, so that
messages emitted by third party libraries and by DuckPyground
itself end up being rendered in the same way.

Modules get their logger with :func:`get_logger` and log events
with key-value context::

    log = get_logger(__name__)
    log.debug("executing", sql="SELECT 1")

Commands invoke :func:`configure_logging` once at startup,
library code never configures the logging by itself.
"""

import logging
import sys

import structlog
from structlog.types import Processor


def configure_logging(level: str = "WARNING", json: bool = False) -> None:
    """Configure stdlib logging and structlog for the process.

    :param level: The name of the minimum level to emit, like ``"DEBUG"``.
    :param json: Render one JSON object per line instead of
                 the human friendly console output.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    timestamper = structlog.processors.TimeStamper(fmt="iso", utc=True)
    renderer: Processor
    if json:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
        ],
    )

    # Logs go to stderr, stdout is reserved to command results.
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            timestamper,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given module name."""
    return structlog.get_logger(name)
