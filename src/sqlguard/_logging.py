"""Structured logging for sqlguard.

sqlguard emits a handful of structlog events: ``unchecked_result_suppressed``
and ``unchecked_result_collected`` (errors nobody looked at), ``handle_close_failed``,
and ``connection_opened`` / ``connection_closed`` at debug level. The library
never configures logging on import; call ``configure_logging`` (or
``sqlguard.init(log_level=...)``) to route them through stdlib handlers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

__all__ = ['configure_logging', 'get_logger']

_SHARED_PROCESSORS: list[Any] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt='iso'),
]


def configure_logging(level: str = 'INFO', *, json_output: bool = True) -> None:
    """Render sqlguard and stdlib records through one structlog formatter.

    Args:
        level: Root logging level name, e.g. "DEBUG" or "WARNING".
        json_output: JSON lines (True) or human-readable console output (False).
    """
    structlog.configure(
        processors=[*_SHARED_PROCESSORS, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=_SHARED_PROCESSORS,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    for existing in [h for h in root.handlers if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))


def get_logger(name: str | None = None) -> Any:
    """Get a structlog logger bound to ``name``."""
    return structlog.get_logger(name)
