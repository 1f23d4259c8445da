"""
Logging setup: structlog wrapping the standard library, written to stderr.

Console rendering by default, JSON when MEETING_FINDER_LOG_FORMAT=json.
"""

import logging
import os
import sys

import structlog

def setup_logging(level=None, json_output=None):
    if level is None:
        level = os.environ.get('MEETING_FINDER_LOG_LEVEL', 'WARNING')
    if json_output is None:
        json_output = os.environ.get('MEETING_FINDER_LOG_FORMAT', '').lower() == 'json'
    numeric_level = getattr(logging, level.upper(), logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*shared_processors, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(numeric_level)

def get_logger(name=None):
    return structlog.get_logger(name)
