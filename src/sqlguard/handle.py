"""UniqueHandle: single-owner wrapper guaranteeing a native resource is closed once."""

from __future__ import annotations

import sqlite3
from types import TracebackType
from typing import Protocol, Self

from sqlguard._logging import get_logger

__all__ = [
    'ConnectionTraits',
    'CursorTraits',
    'HandleTraits',
    'UniqueHandle',
]

logger = get_logger(__name__)


class HandleTraits[T](Protocol):
    """How to release one kind of native resource."""

    name: str

    def close(self, value: T) -> bool:
        """Release ``value``; return True if the native close succeeded."""
        ...


class ConnectionTraits:
    name = 'connection'

    def close(self, value: sqlite3.Connection) -> bool:
        try:
            value.close()
        except sqlite3.Error:
            return False
        return True


class CursorTraits:
    name = 'cursor'

    def close(self, value: sqlite3.Cursor) -> bool:
        try:
            value.close()
        except sqlite3.Error:
            return False
        return True


class UniqueHandle[T]:
    """Owns at most one native resource and releases it exactly once.

    Examples:
        >>> handle = UniqueHandle(ConnectionTraits(), sqlite3.connect(':memory:'))
        >>> bool(handle)
        True
        >>> handle.close()
        True
        >>> handle.close()  # already released
        True
        >>> bool(handle)
        False
    """

    __slots__ = ('_traits', '_value')

    def __init__(self, traits: HandleTraits[T], value: T | None = None) -> None:
        self._traits = traits
        self._value = value

    def get(self) -> T | None:
        """Raw access to the owned resource, or None when empty."""
        return self._value

    def reset(self, value: T | None = None) -> bool:
        """Close the current resource (if any) and take ownership of ``value``.

        Returns:
            True if there was nothing to close or the close succeeded.
        """
        previous, self._value = self._value, value
        if previous is None or previous is value:
            return True
        closed = self._traits.close(previous)
        if not closed:
            logger.warning('handle_close_failed', kind=self._traits.name)
        return closed

    def release(self) -> T | None:
        """Give up ownership without closing, returning the raw resource."""
        value, self._value = self._value, None
        return value

    def close(self) -> bool:
        """Close the owned resource. Safe to call more than once."""
        return self.reset(None)

    def __bool__(self) -> bool:
        return self._value is not None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, '_value', None) is not None:
            self.close()

    def __repr__(self) -> str:
        state = 'open' if self._value is not None else 'empty'
        return f'UniqueHandle({self._traits.name}, {state})'
