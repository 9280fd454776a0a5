"""Configuration: GuardConfig, environment detection, and initialization."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from sqlguard._logging import configure_logging

__all__ = [
    'GuardConfig',
    'get_config',
    'init',
    'reset_config',
]

_FALSE_VALUES = frozenset({'0', 'false', 'no', 'off'})
_TRUE_VALUES = frozenset({'1', 'true', 'yes', 'on'})


@dataclass(frozen=True)
class GuardConfig:
    """Configuration for sqlguard.

    Attributes:
        log_level: Logging level (e.g., "DEBUG", "INFO"). None = leave logging alone.
        json_logs: Emit JSON logs (True) or colored console output (False).
        warn_on_collect: Emit UncheckedResultWarning when a CheckedResult holding
            an unobserved error is garbage-collected.
    """

    log_level: str | None = None
    json_logs: bool = True
    warn_on_collect: bool = True


# Global configuration (set by init(), or detected lazily by get_config())
_config: GuardConfig | None = None


def _detect_log_level() -> str | None:
    """Read SQLGUARD_LOG_LEVEL from the environment."""
    level = os.environ.get('SQLGUARD_LOG_LEVEL', '').strip().upper()
    return level or None


def _detect_warn_on_collect() -> bool:
    """Read SQLGUARD_WARN_ON_COLLECT from the environment (default: enabled)."""
    raw = os.environ.get('SQLGUARD_WARN_ON_COLLECT', '').strip().lower()
    if not raw or raw in _TRUE_VALUES:
        return True
    if raw in _FALSE_VALUES:
        return False
    logging.warning("Unknown SQLGUARD_WARN_ON_COLLECT value '%s', defaulting to on", raw)
    return True


def init(
    log_level: str | None = None,
    *,
    json_logs: bool = True,
    warn_on_collect: bool | None = None,
) -> GuardConfig:
    """Initialize sqlguard with the specified configuration.

    Args:
        log_level: Logging level ("DEBUG", "INFO", etc.). Falls back to
            SQLGUARD_LOG_LEVEL; None leaves logging unconfigured.
        json_logs: Emit JSON logs (True) or console output (False).
        warn_on_collect: Warn about unobserved errors on garbage collection.
            Falls back to SQLGUARD_WARN_ON_COLLECT.

    Returns:
        The GuardConfig that was set.

    Example:
        ```python
        import sqlguard

        sqlguard.init(log_level='DEBUG', json_logs=False)
        ```
    """
    global _config  # noqa: PLW0603

    resolved_level = log_level if log_level is not None else _detect_log_level()
    resolved_warn = warn_on_collect if warn_on_collect is not None else _detect_warn_on_collect()

    _config = GuardConfig(
        log_level=resolved_level,
        json_logs=json_logs,
        warn_on_collect=resolved_warn,
    )

    if resolved_level is not None:
        configure_logging(resolved_level, json_output=json_logs)

    return _config


def get_config() -> GuardConfig:
    """Get the current configuration.

    Unlike an explicit init(), the implicit configuration never touches
    logging handlers; it only reads the environment.
    """
    global _config  # noqa: PLW0603

    if _config is None:
        _config = GuardConfig(
            log_level=_detect_log_level(),
            warn_on_collect=_detect_warn_on_collect(),
        )
    return _config


def reset_config() -> None:
    """Forget the current configuration so the next get_config() re-detects it."""
    global _config  # noqa: PLW0603

    _config = None
