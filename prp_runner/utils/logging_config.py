"""structlog setup for the ``prp`` command.

Events are rendered as one JSON object per line on stderr. stdout is
reserved for ``name=value`` step outputs.
"""

import sys

import structlog


def configure_logging(log_level: str = "INFO") -> None:
    """Install the JSON processor chain, dropping events below ``log_level``."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        # bound to whatever sys.stderr is at configure time
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )