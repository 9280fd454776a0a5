"""CheckedResult: a status code whose error must be observed before scope ends.

A ``CheckedResult`` is returned by every fallible native command. When the
command failed, the guard carries an ``SqlError`` and is *pending*: the holder
must inspect it (``error()``, ``raise_error()`` or ``bool()``) or hand it on.
Whoever ends the guard's scope while it is still pending gets the error
raised at them.

Python finalizers cannot raise, so scope end is explicit:

* ``guard.close()``, or leaving ``with guard:``;
* leaving an enclosing ``checked_scope()``, which enforces every pending
  guard created inside it, including ones the caller discarded.

A guard collected by the garbage collector while still pending is logged and
reported with ``UncheckedResultWarning``.

Copying a guard (``copy.copy``, ``copy.deepcopy``, ``take()``) transfers the
obligation: the copy becomes pending and the source is marked observed, so
exactly one guard per failure is ever responsible for it.

When a scope ends while another exception is already propagating, pending
guards never replace it. Each is marked observed, logged, and attached to the
in-flight exception as a note.
"""

from __future__ import annotations

import warnings
from contextvars import ContextVar
from types import TracebackType
from typing import Any, Protocol, Self

import msgspec.structs

from sqlguard._config import get_config
from sqlguard._logging import get_logger
from sqlguard.codes import ResultCode
from sqlguard.errors import SqlError, UncheckedResultWarning

__all__ = ['CheckedResult', 'CheckedScope', 'ErrorSource', 'checked_scope']

logger = get_logger(__name__)

_current_scope: ContextVar[CheckedScope | None] = ContextVar('sqlguard_checked_scope', default=None)


class ErrorSource(Protocol):
    """Anything that can describe its most recent native failure."""

    def errmsg(self) -> str: ...


class CheckedResult:
    """Outcome of a native command, enforcing that failures are observed.

    Attributes:
        status: The raw native status code.
    """

    __slots__ = ('_error', '_observed', 'status')

    def __init__(self, status: int, error: SqlError | None = None) -> None:
        self.status = status
        self._error = error
        self._observed = error is None
        if not self._observed:
            _register(self)

    @classmethod
    def from_command(cls, status: int, handle: ErrorSource) -> Self:
        """Build a guard for a command whose only success status is OK."""
        if status == ResultCode.OK:
            return cls(status)
        return cls(status, SqlError(status, handle.errmsg()))

    @classmethod
    def from_step(cls, status: int, handle: ErrorSource) -> Self:
        """Build a guard for a step, which succeeds with ROW or DONE."""
        if status in (ResultCode.ROW, ResultCode.DONE):
            return cls(status)
        return cls(status, SqlError(status, handle.errmsg()))

    # --- Passive status predicates (do not observe) ---

    def has_data(self) -> bool:
        return self.status == ResultCode.ROW

    def succeeded(self) -> bool:
        return self.status == ResultCode.OK

    def is_done(self) -> bool:
        return self.status == ResultCode.DONE

    @property
    def pending(self) -> bool:
        """True while an attached error still awaits observation."""
        return not self._observed and self._error is not None

    # --- Observation ---

    def error(self) -> SqlError | None:
        """Mark the guard observed and return the attached error, if any."""
        self._observed = True
        return self._error

    def raise_error(self) -> None:
        """Mark the guard observed and raise the attached error, if any."""
        self._observed = True
        if self._error is not None:
            raise self._error

    def __bool__(self) -> bool:
        """Observe the guard; truthy for OK and ROW, falsy for DONE and failures."""
        self._observed = True
        return self.has_data() or self.succeeded()

    # --- Scope end ---

    def close(self) -> None:
        """End the guard's scope, raising the error if it was never observed."""
        if self.pending:
            self._observed = True
            raise self._error  # type: ignore[misc]

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            self.close()
        elif self.pending:
            _suppress(self, exc)

    # --- Obligation transfer ---

    def take(self) -> Self:
        """Move the guard: return a new owner of the obligation, releasing this one."""
        twin = type(self).__new__(type(self))
        twin.status = self.status
        twin._error = self._error
        twin._observed = self._observed
        if not self._observed:
            self._observed = True
            _register(twin)
        return twin

    def __copy__(self) -> Self:
        return self.take()

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        return self.take()

    def __del__(self) -> None:
        if getattr(self, '_observed', True) or getattr(self, '_error', None) is None:
            return
        _report_collected(self._error)

    def __repr__(self) -> str:
        state = 'pending' if self.pending else 'observed'
        return f'CheckedResult(status={self.status}, error={self._error!r}, {state})'


class CheckedScope:
    """Enforcement boundary for every guard that becomes pending inside it.

    Use through ``checked_scope()``.
    """

    __slots__ = ('_token', 'guards')

    def __init__(self) -> None:
        self.guards: list[CheckedResult] = []
        self._token: Any = None

    def pending(self) -> list[CheckedResult]:
        """Guards registered with this scope that are still pending."""
        return [guard for guard in self.guards if guard.pending]

    def __enter__(self) -> Self:
        self._token = _current_scope.set(self)
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        _current_scope.reset(self._token)
        pending = self.pending()
        self.guards.clear()

        if exc is not None:
            for guard in pending:
                _suppress(guard, exc)
            return

        if pending:
            first, *rest = pending
            for guard in rest:
                _suppress(guard, first._error)  # type: ignore[arg-type]
            first.close()


def checked_scope() -> CheckedScope:
    """Open a scope that raises the first unobserved error on exit.

    Example:
        ```python
        with checked_scope():
            conn.execute('create table t (x)')  # result discarded
            conn.execute('create table t (x)')  # fails: raised at scope exit
        ```
    """
    return CheckedScope()


def _register(guard: CheckedResult) -> None:
    scope = _current_scope.get()
    if scope is not None:
        scope.guards.append(guard)


def _suppress(guard: CheckedResult, in_flight: BaseException) -> None:
    """Double-fault policy: keep the in-flight exception, record the pending one."""
    error = guard.error()
    if error is None:
        return
    logger.error(
        'unchecked_result_suppressed',
        in_flight=type(in_flight).__name__,
        **msgspec.structs.asdict(error.to_struct()),
    )
    in_flight.add_note(f'unchecked result suppressed: {error}')


def _report_collected(error: SqlError) -> None:
    logger.error('unchecked_result_collected', **msgspec.structs.asdict(error.to_struct()))
    if get_config().warn_on_collect:
        warnings.warn(f'unchecked result collected: {error}', UncheckedResultWarning, stacklevel=2)
