"""
Structured logging for the commitscan CLI.

Library modules log through plain ``logging.getLogger(__name__)``. The CLI
calls ``setup_logging`` once, which routes those records and structlog
events through one structlog console renderer on stderr.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

LOGGER_NAMESPACE = "commitscan"

# Applied to structlog events and to foreign stdlib records alike
PRE_CHAIN: list[Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="%H:%M:%S"),
]


def _make_handler(colors: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=PRE_CHAIN,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.dev.ConsoleRenderer(
                    colors=colors,
                    exception_formatter=structlog.dev.plain_traceback,
                ),
            ],
        )
    )
    return handler


def setup_logging(level: str = "INFO", force_colors: bool | None = None) -> None:
    """
    Send ``commitscan.*`` logs to stderr at ``level``.

    Colors follow ``force_colors``, or whether stderr is a terminal when it
    is None. Calling it again replaces the previous handler.
    """
    colors = sys.stderr.isatty() if force_colors is None else force_colors
    structlog.configure(
        processors=[*PRE_CHAIN, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.handlers[:] = [_make_handler(colors)]
    package_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    package_logger.propagate = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a structlog logger inside the ``commitscan`` namespace.

    Example:
        >>> logger = get_logger("cli")
        >>> logger.info("Scan started", commits=120, concurrency=20)
    """
    if name is None:
        logger_name = LOGGER_NAMESPACE
    elif name.startswith(f"{LOGGER_NAMESPACE}."):
        logger_name = name
    else:
        logger_name = f"{LOGGER_NAMESPACE}.{name}"
    return structlog.get_logger(logger_name)


def bind_scan_context(**kwargs: Any) -> None:
    """
    Bind context variables included in all subsequent log messages.

    Example:
        >>> bind_scan_context(repository="/src/wallet", model="gpt-4o-mini")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_scan_context() -> None:
    """Clear all bound context variables."""
    structlog.contextvars.clear_contextvars()
