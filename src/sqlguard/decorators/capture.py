"""@capture decorator for turning raising functions into Expected-returning ones."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar, overload

import wrapt

from sqlguard.expected import Expected, Failure, Value

__all__ = ['capture']

P = ParamSpec('P')
T = TypeVar('T')


@overload
def capture[**P, T](
    func: Callable[P, T],
) -> Callable[P, Value[T] | Failure]: ...


@overload
def capture(
    *,
    exceptions: tuple[type[BaseException], ...],
) -> Callable[[Callable[P, T]], Callable[P, Value[T] | Failure]]: ...


def capture[**P, T](
    func: Callable[P, T] | None = None,
    *,
    exceptions: tuple[type[BaseException], ...] | None = None,
) -> Any:
    """Decorator that runs each call through Expected.run.

    Can be used with or without arguments:
        @capture
        def risky(): ...

        @capture(exceptions=(LookupError,))
        def specific(): ...

    Args:
        func: The function to wrap (when used without parentheses).
        exceptions: Exception types to capture. Defaults to (Exception,).

    Returns:
        A wrapped function returning Value(result) or Failure(exception).

    Example:
        ```python
        @capture
        def parse(text: str) -> int:
            return int(text)

        parse('42')    # Value(42)
        parse('nope')  # Failure(ValueError(...))
        ```
    """
    catch = exceptions if exceptions is not None else (Exception,)

    @wrapt.decorator
    def wrapper(
        wrapped: Callable[P, T],
        instance: Any,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Value[T] | Failure:
        return Expected.run(lambda: wrapped(*args, **kwargs), exceptions=catch)

    if func is not None:
        return wrapper(func)
    return wrapper
