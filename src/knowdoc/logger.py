import logging
import sys
from typing import IO, Any, List, Optional

import structlog

LOGGER_NAME = "knowdoc"


def _processors(colors: bool) -> List[Any]:
    return [
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S", utc=False),
        structlog.dev.ConsoleRenderer(colors=colors),
    ]


def configure_structlog(colors: bool = True) -> None:
    """
    Route structlog events through stdlib logging. Levels are filtered by
    the stdlib handlers, so the bound logger lets everything through.
    """
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.NOTSET),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
        processors=_processors(colors),
    )
    std_logger = logging.getLogger(LOGGER_NAME)
    std_logger.setLevel(logging.NOTSET)
    std_logger.propagate = True


def setup_logging(debug: bool, stream: Optional[IO[str]] = None) -> None:
    """
    Make the root logger emit knowdoc diagnostics: everything with *debug*,
    warnings and above otherwise. Output goes to stderr unless *stream* is
    given.
    """
    stream = stream if stream is not None else sys.stderr
    level = logging.DEBUG if debug else logging.WARNING
    root = logging.getLogger()
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(stream)
        # the message is already rendered by structlog
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
    for handler in root.handlers:
        handler.setLevel(level)


def get_logger(**initial_values: Any) -> structlog.BoundLogger:
    return structlog.get_logger(LOGGER_NAME, **initial_values)


configure_structlog(colors=sys.stderr.isatty())

logger: structlog.BoundLogger = get_logger()
