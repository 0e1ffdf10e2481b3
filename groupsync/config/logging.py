"""
structlog setup for the service.
"""

import logging

import structlog


def configure_logging(level: str = "INFO"):
    """
    Configure structlog to filter below `level` and render to the console.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
    )
