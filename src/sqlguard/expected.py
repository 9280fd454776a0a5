"""Expected[T]: a value or a captured exception, raised only when the value is read.

An ``Expected`` is the return type of any operation that can fail but whose
caller usually only cares about the value. The success path stores the value
as is; the failure path stores the exception object together with the
traceback it carried when captured, so the original failure can be re-raised
later with its type, message and origin intact.

Example:
    ```python
    from sqlguard import Expected

    def lookup(key: str) -> int:
        raise KeyError(key)

    found = Expected.run(lambda: lookup('answer'))
    found.is_success()          # False
    found.error_is(KeyError)    # True
    found.value()               # raises KeyError('answer')

    Expected.run(lambda: 42).value()  # 42
    ```
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field
from types import TracebackType
from typing import Any, NoReturn

from sqlguard.errors import InvalidCaptureError

__all__ = ['Expected', 'Failure', 'Value']


class Expected[T](ABC):
    """Base of the two variants, Value[T] and Failure.

    Exactly one variant is ever constructed for a given outcome, so there is
    no inactive payload. Instances are immutable; copying or rebinding one
    only ever duplicates the live payload.
    """

    __slots__ = ()

    # --- Construction ---

    @staticmethod
    def wrap[U](value: U) -> Value[U]:
        """Wrap a successfully produced value."""
        return Value(value)

    @staticmethod
    def wrap_error(
        error: BaseException,
        as_type: type[BaseException] | None = None,
    ) -> Failure:
        """Capture an exception object.

        Args:
            error: The exception to capture.
            as_type: The type the caller believes ``error`` has. When given,
                it must be exactly ``type(error)``; a subclass instance passed
                as its base type is rejected rather than silently
                reinterpreted.

        Raises:
            InvalidCaptureError: If ``error`` is not an exception instance or
                does not have exactly the type ``as_type``.
        """
        if not isinstance(error, BaseException):
            raise InvalidCaptureError(f'cannot capture non-exception {error!r}')
        if as_type is not None and type(error) is not as_type:
            raise InvalidCaptureError(
                f'declared {as_type.__qualname__} but got {type(error).__qualname__}'
            )
        return Failure(error, error.__traceback__)

    @staticmethod
    def wrap_current_error() -> Failure:
        """Capture the exception currently being handled.

        Must be called from inside an ``except`` block.

        Raises:
            InvalidCaptureError: If no exception is being handled.
        """
        exc = sys.exception()
        if exc is None:
            raise InvalidCaptureError('no exception is being handled')
        return Failure(exc, exc.__traceback__)

    @staticmethod
    def run[U](
        fn: Callable[[], U],
        *,
        exceptions: tuple[type[BaseException], ...] = (Exception,),
    ) -> Value[U] | Failure:
        """Call ``fn`` and wrap whichever outcome occurs.

        Args:
            fn: Zero-argument computation.
            exceptions: Exception types to capture. Anything else propagates.

        Returns:
            Value wrapping the return value, or Failure capturing the exception.
        """
        try:
            result = fn()
        except exceptions:
            return Expected.wrap_current_error()
        return Value(result)

    # --- Access (implemented by the variants) ---

    @abstractmethod
    def is_success(self) -> bool:
        """Return True if this outcome holds a value rather than an error."""

    @abstractmethod
    def value(self) -> T:
        """Return the value, re-raising the captured exception on failure.

        Returns:
            The wrapped value.

        Raises:
            BaseException: The captured exception, with its original traceback.
        """

    @abstractmethod
    def error_is(self, kind: type[BaseException] | tuple[type[BaseException], ...]) -> bool:
        """Test whether the captured error is an instance of ``kind``.

        Args:
            kind: An exception class or tuple of classes, as for isinstance().

        Returns:
            True only for a failure whose exception matches.
        """

    @property
    @abstractmethod
    def error(self) -> BaseException | None:
        """The captured exception, or None for a value."""

    @abstractmethod
    def value_or(self, default: T) -> T:
        """Return the value, or ``default`` on failure.

        Args:
            default: Fallback returned in place of raising.

        Returns:
            The wrapped value or ``default``.
        """

    @abstractmethod
    def map[U](self, f: Callable[[T], U]) -> Expected[U]:
        """Transform the value with ``f``; failures pass through unchanged.

        Args:
            f: Function applied to the wrapped value.

        Returns:
            Value of f's result, Failure if f raised, or this Failure.
        """


@dataclass(slots=True, frozen=True)
class Value[T](Expected[T]):
    """Successful outcome holding ``result``."""

    result: T
    __match_args__ = ('result',)

    def is_success(self) -> bool:
        """Return True; this variant always holds a value."""
        return True

    def value(self) -> T:
        """Return the stored value."""
        return self.result

    def error_is(self, kind: type[BaseException] | tuple[type[BaseException], ...]) -> bool:
        """Return False; there is no captured error."""
        return False

    @property
    def error(self) -> None:
        """Always None; a value carries no error."""
        return None

    def value_or(self, default: T) -> T:
        """Return the stored value; ``default`` is ignored."""
        return self.result

    def map[U](self, f: Callable[[T], U]) -> Value[U] | Failure:
        """Apply ``f`` to the value, capturing any exception it raises."""
        return Expected.run(lambda: f(self.result))

    def __repr__(self) -> str:
        return f'Value({self.result!r})'


@dataclass(slots=True, frozen=True)
class Failure(Expected[Any]):
    """Failed outcome holding a captured exception.

    Attributes:
        exception: The captured exception object.
        traceback: The traceback the exception carried at capture time.
    """

    exception: BaseException
    traceback: TracebackType | None = field(default=None, compare=False, repr=False)
    __match_args__ = ('exception',)

    def is_success(self) -> bool:
        """Return False; this variant never holds a value."""
        return False

    def value(self) -> NoReturn:
        """Re-raise the captured exception with its original traceback."""
        raise self.exception.with_traceback(self.traceback)

    def error_is(self, kind: type[BaseException] | tuple[type[BaseException], ...]) -> bool:
        """Test whether the captured exception is an instance of ``kind``.

        Never raises: an argument that isn't a class or tuple of classes
        simply doesn't match.
        """
        try:
            return isinstance(self.exception, kind)
        except TypeError:
            return False

    @property
    def error(self) -> BaseException:
        """The captured exception, without raising it."""
        return self.exception

    def value_or(self, default: Any) -> Any:
        """Return ``default``; the captured exception is not raised."""
        return default

    def map(self, f: Callable[[Any], Any]) -> Failure:
        """Return self unchanged; ``f`` is never called."""
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> Failure:
        # Captured exceptions are shared handles; tracebacks cannot be copied.
        return self

    def __repr__(self) -> str:
        return f'Failure({self.exception!r})'
