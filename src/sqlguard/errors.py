"""Error types: dual struct+exception for native status failures, plus capture errors."""

from __future__ import annotations

import msgspec

__all__ = [
    'InvalidCaptureError',
    'SqlError',
    'SqlStatus',
    'UncheckedResultWarning',
]


# --- Native status failures ---


class SqlStatus(msgspec.Struct, frozen=True, gc=False):
    """Failed native status - struct variant for logging and serialization."""

    code: int
    message: str

    def to_exception(self) -> SqlError:
        """Convert to exception for raise-based code."""
        return SqlError(self.code, self.message)


class SqlError(Exception):
    """Failed native status - exception variant.

    Carries the raw (possibly extended) SQLite result code and the message
    reported by the connection at the time of failure.

    Examples:
        >>> str(SqlError(5, 'disk I/O error'))
        '(5): disk I/O error'
    """

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(code, message)

    @property
    def primary_code(self) -> int:
        """The primary result code (low byte of an extended code)."""
        return self.code & 0xFF

    def to_struct(self) -> SqlStatus:
        """Convert to struct for logging and serialization."""
        return SqlStatus(self.code, self.message)

    def __str__(self) -> str:
        return f'({self.code}): {self.message}'


# --- Capture errors ---


class InvalidCaptureError(TypeError):
    """An error could not be captured into an Expected.

    Raised when the object is not an exception, when its declared type does
    not match its runtime type, or when no exception is being handled.
    """


class UncheckedResultWarning(RuntimeWarning):
    """A CheckedResult holding an error was garbage-collected unobserved."""
