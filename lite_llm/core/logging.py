import sys

import structlog

_NAME_TO_LEVEL = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "warn": 30,
    "error": 40,
    "critical": 50,
}


def configure_logging(level: str = "info", json_output: bool = True) -> None:
    """Configure structlog once per process.

    The API logs JSON to stdout. The CLI logs human-readable lines to stderr so
    they don't interleave with the rich tables printed on stdout.
    """
    if json_output:
        renderer = structlog.processors.JSONRenderer()
        logger_factory = structlog.PrintLoggerFactory()
    else:
        renderer = structlog.dev.ConsoleRenderer()
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_NAME_TO_LEVEL.get(level.lower(), 20)),
        logger_factory=logger_factory,
    )
