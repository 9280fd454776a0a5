"""Thin SQLite binding layer producing CheckedResult and Expected outcomes.

Every native call goes through ``_native``, which turns a raised
``sqlite3.Error`` into a status code and records the message on the owning
connection, where ``errmsg()`` finds it, mirroring ``sqlite3_errmsg``.

Parameter indexes are 1-based and column indexes are 0-based, as in the
SQLite C API.

Example:
    ```python
    from sqlguard import Connection, Statement

    with Connection.create_memory() as conn:
        conn.execute('create table hens (id integer primary key, name text not null)').raise_error()
        insert = Statement.create(conn, 'insert into hens (id, name) values (?, ?)')
        insert.bind(1, 101).bind(2, 'Henrietta').step().raise_error()

        select = Statement.create(conn, 'select id, name from hens')
        for row in select.rows():
            print(row)  # (101, 'Henrietta')
    ```
"""

from __future__ import annotations

import math
import re
import sqlite3
from collections.abc import Callable, Iterator
from functools import singledispatchmethod
from types import TracebackType
from typing import Any, Self

from sqlguard._logging import get_logger
from sqlguard.checked import CheckedResult
from sqlguard.codes import Datatype, ResultCode
from sqlguard.errors import SqlError
from sqlguard.expected import Expected, Failure
from sqlguard.handle import ConnectionTraits, CursorTraits, UniqueHandle

__all__ = ['Connection', 'Statement']

logger = get_logger(__name__)

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_MESSAGES = {
    ResultCode.OK: 'not an error',
    ResultCode.MISUSE: 'bad parameter or other API misuse',
    ResultCode.RANGE: 'column index out of range',
    ResultCode.MISMATCH: 'datatype mismatch',
}

_NUMERIC_PREFIX = re.compile(r'\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?')


def _status_of(exc: BaseException) -> int:
    """Translate a driver exception into a native status code."""
    code = getattr(exc, 'sqlite_errorcode', None)
    if code is not None:
        return code
    if isinstance(exc, sqlite3.ProgrammingError | sqlite3.InterfaceError):
        return ResultCode.MISUSE
    return ResultCode.ERROR


def _is_binding_count_error(exc: BaseException | None) -> bool:
    return isinstance(exc, sqlite3.ProgrammingError) and 'number of bindings' in str(exc)


class _Diagnostics:
    """Last status and message reported on one connection."""

    __slots__ = ('code', 'message')

    def __init__(self) -> None:
        self.code: int = ResultCode.OK
        self.message: str = _MESSAGES[ResultCode.OK]

    def record(self, code: int, message: str | None = None) -> int:
        self.code = code
        self.message = message if message is not None else _MESSAGES.get(code, 'unknown error')
        return code

    def errmsg(self) -> str:
        return self.message


def _native[T](diagnostics: _Diagnostics, call: Callable[[], T]) -> tuple[int, Expected[T]]:
    """Run a driver call, recording its status on ``diagnostics``."""
    outcome = Expected.run(call, exceptions=(sqlite3.Error,))
    if outcome.is_success():
        return diagnostics.record(ResultCode.OK), outcome
    error = outcome.error
    return diagnostics.record(_status_of(error), str(error)), outcome


class Connection:
    """A database connection owning its native handle."""

    def __init__(self) -> None:
        self.handle: UniqueHandle[sqlite3.Connection] = UniqueHandle(ConnectionTraits())
        self.diagnostics = _Diagnostics()

    @classmethod
    def create(cls, path: str) -> Self:
        """Open a connection to ``path``; raises SqlError if it cannot be opened."""
        conn = cls()
        conn.open(path).close()
        return conn

    @classmethod
    def create_memory(cls) -> Self:
        """Open a private in-memory database."""
        return cls.create(':memory:')

    def open(self, filename: str) -> CheckedResult:
        """Open ``filename``, replacing any connection already held.

        Raises:
            SqlError: Immediately, when the database cannot be opened; there
                is no handle yet from which a guard could report the failure.
        """
        status, outcome = _native(
            self.diagnostics,
            lambda: sqlite3.connect(filename, isolation_level=None, uri=filename.startswith('file:')),
        )
        if isinstance(outcome, Failure):
            self.handle.close()
            raise SqlError(status, self.diagnostics.errmsg()) from outcome.exception
        self.handle.reset(outcome.value())
        logger.debug('connection_opened', filename=filename)
        return CheckedResult.from_command(status, self)

    def execute(self, sql: str) -> CheckedResult:
        """Run one or more SQL statements, discarding any rows."""
        native = self.handle.get()
        if native is None:
            return CheckedResult.from_command(self.diagnostics.record(ResultCode.MISUSE), self)
        status, _ = _native(self.diagnostics, lambda: native.executescript(sql))
        return CheckedResult.from_command(status, self)

    def last_insert_rowid(self) -> int:
        native = self.handle.get()
        if native is None:
            return 0
        return native.execute('select last_insert_rowid()').fetchone()[0]

    def errmsg(self) -> str:
        """Message describing the most recent native failure."""
        return self.diagnostics.errmsg()

    get_current_error = errmsg

    def close(self) -> bool:
        closed = self.handle.close()
        logger.debug('connection_closed', closed=closed)
        return closed

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class Statement:
    """A prepared statement with indexed bindings and row stepping."""

    def __init__(self) -> None:
        self.handle: UniqueHandle[sqlite3.Cursor] = UniqueHandle(CursorTraits())
        self.diagnostics = _Diagnostics()
        self._connection: Connection | None = None
        self._sql = ''
        self._bindings: dict[int, Any] = {}
        self._row: tuple[Any, ...] | None = None
        self._active = False

    @classmethod
    def create(cls, conn: Connection, sql: str) -> Self:
        """Prepare ``sql`` on ``conn``; raises SqlError if it does not compile."""
        stmt = cls()
        stmt.prepare(conn, sql).close()
        return stmt

    def prepare(self, conn: Connection, sql: str) -> CheckedResult:
        """Compile ``sql`` against ``conn``, replacing any previous statement."""
        self.handle.close()
        self._connection = conn
        self.diagnostics = conn.diagnostics
        self._sql = sql
        self._bindings.clear()
        self._row = None
        self._active = False

        native = conn.handle.get()
        if native is None:
            return CheckedResult.from_command(self.diagnostics.record(ResultCode.MISUSE), self)

        # EXPLAIN compiles without executing. The driver's binding-count check
        # runs only after a successful compile, so it does not count as a failure.
        status, outcome = _native(self.diagnostics, lambda: native.execute(f'EXPLAIN {sql}').close())
        if _is_binding_count_error(outcome.error):
            status = self.diagnostics.record(ResultCode.OK)
        if status == ResultCode.OK:
            self.handle.reset(native.cursor())
        return CheckedResult.from_command(status, self)

    def errmsg(self) -> str:
        return self.diagnostics.errmsg()

    get_current_error = errmsg

    def close(self) -> bool:
        """Finalize the statement."""
        self._active = False
        self._row = None
        return self.handle.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # --- Binding ---

    def bind(self, index: int, value: Any = None) -> Self:
        """Bind ``value`` at ``index`` and return self; raises SqlError on failure."""
        self.create_binding(index, value).close()
        return self

    def create_binding(self, index: int, value: Any = None) -> CheckedResult:
        """Bind a value at a 1-based parameter index.

        ints (including bools), floats, str, bytes-like objects and None are
        supported; anything else fails with MISMATCH.
        """
        if (status := self._check_bindable(index)) != ResultCode.OK:
            return CheckedResult.from_command(status, self)
        return CheckedResult.from_command(self._bind(value, index), self)

    def create_binding_zeroblob(self, index: int, size: int) -> CheckedResult:
        """Bind a blob of ``size`` zero bytes."""
        return self.create_binding(index, bytes(max(0, size)))

    def create_binding_blob(self, index: int, data: bytes | bytearray | memoryview) -> CheckedResult:
        return self.create_binding(index, bytes(data))

    def reset_binding(self) -> None:
        """Rewind the statement and clear all bindings."""
        self._active = False
        self._row = None
        self._bindings.clear()

    def _check_bindable(self, index: int) -> int:
        if not self.handle or self._active:
            return self.diagnostics.record(ResultCode.MISUSE)
        if index < 1:
            return self.diagnostics.record(ResultCode.RANGE)
        return self.diagnostics.record(ResultCode.OK)

    @singledispatchmethod
    def _bind(self, value: Any, index: int) -> int:
        return self.diagnostics.record(ResultCode.MISMATCH)

    @_bind.register
    def _(self, value: int, index: int) -> int:
        if not _INT64_MIN <= value <= _INT64_MAX:
            return self.diagnostics.record(ResultCode.RANGE, 'integer out of 64-bit range')
        self._bindings[index] = int(value)
        return ResultCode.OK

    @_bind.register
    def _(self, value: float, index: int) -> int:
        self._bindings[index] = value
        return ResultCode.OK

    @_bind.register
    def _(self, value: str, index: int) -> int:
        self._bindings[index] = value
        return ResultCode.OK

    @_bind.register(bytes)
    @_bind.register(bytearray)
    @_bind.register(memoryview)
    def _(self, value: bytes | bytearray | memoryview, index: int) -> int:
        self._bindings[index] = bytes(value)
        return ResultCode.OK

    @_bind.register(type(None))
    def _(self, value: None, index: int) -> int:
        self._bindings[index] = None
        return ResultCode.OK

    def _parameters(self) -> list[Any]:
        count = max(self._bindings, default=0)
        return [self._bindings.get(i) for i in range(1, count + 1)]

    # --- Stepping ---

    def step(self) -> CheckedResult:
        """Advance to the next row: ROW, DONE, or a failure status."""
        return CheckedResult.from_step(self._advance(), self)

    def _advance(self) -> int:
        cursor = self.handle.get()
        if cursor is None:
            return self.diagnostics.record(ResultCode.MISUSE)

        if not self._active:
            status, _ = _native(self.diagnostics, lambda: cursor.execute(self._sql, self._parameters()))
            if status != ResultCode.OK:
                return status
            self._active = True

        status, outcome = _native(self.diagnostics, cursor.fetchone)
        if status != ResultCode.OK:
            self._active = False
            self._row = None
            return status

        self._row = outcome.value()
        if self._row is None:
            self._active = False
            return self.diagnostics.record(ResultCode.DONE, _MESSAGES[ResultCode.OK])
        return self.diagnostics.record(ResultCode.ROW, _MESSAGES[ResultCode.OK])

    def rows(self) -> Iterator[tuple[Any, ...]]:
        """Step to completion, yielding each row; raises SqlError on failure."""
        while True:
            result = self.step()
            result.raise_error()
            if not result.has_data():
                return
            yield self._row  # type: ignore[misc]

    # --- Columns ---

    def column(self, index: int = 0) -> Expected[Any]:
        """The raw value of a column in the current row.

        Args:
            index: 0-based column index.

        Returns:
            Value of the column, or a Failure capturing SqlError: MISUSE when
            no row is current, RANGE when ``index`` is out of bounds.
        """
        if self._row is None:
            code = ResultCode.MISUSE
            return Expected.wrap_error(SqlError(code, _MESSAGES[code]))
        if not 0 <= index < len(self._row):
            code = ResultCode.RANGE
            return Expected.wrap_error(SqlError(code, _MESSAGES[code]))
        return Expected.wrap(self._row[index])

    def rowid(self) -> int:
        """Rowid of the most recent successful INSERT on this connection."""
        if self._connection is None:
            return 0
        return self._connection.last_insert_rowid()

    def get_value(self, column: int = 0) -> Any:
        """Raw value of a column in the current row.

        Args:
            column: 0-based column index.

        Returns:
            The value as the driver returned it: int, float, str, bytes or None.

        Raises:
            SqlError: MISUSE when there is no current row, RANGE for a bad index.
        """
        return self.column(column).value()

    def get_type(self, column: int = 0) -> Datatype:
        """Fundamental datatype of a column value, like sqlite3_column_type."""
        value = self.get_value(column)
        if value is None:
            return Datatype.NULL
        if isinstance(value, int):
            return Datatype.INTEGER
        if isinstance(value, float):
            return Datatype.FLOAT
        if isinstance(value, str):
            return Datatype.TEXT
        return Datatype.BLOB

    def get_int64(self, column: int = 0) -> int:
        """Column as a signed 64-bit integer.

        Reals are truncated toward zero and text is read by its numeric
        prefix. Anything beyond the 64-bit range, infinities included,
        saturates at the nearest bound; NULL reads as 0.
        """
        return _to_int64(self.get_value(column))

    def get_int(self, column: int = 0) -> int:
        """Column as a 32-bit signed integer, truncating like sqlite3_column_int."""
        value = self.get_int64(column) & 0xFFFFFFFF
        return value - 2**32 if value >= 2**31 else value

    def get_double(self, column: int = 0) -> float:
        """Column as a float; NULL reads as 0.0."""
        return _to_float(self.get_value(column))

    def get_string(self, column: int = 0) -> str:
        """Column as text.

        Returns:
            The text form of the value; '' for NULL, and blobs decoded as UTF-8.
        """
        value = self.get_value(column)
        if value is None:
            return ''
        if isinstance(value, bytes):
            return value.decode('utf-8', errors='replace')
        return str(value)


def _numeric_prefix(value: str | bytes) -> str:
    text = value.decode('utf-8', errors='replace') if isinstance(value, bytes) else value
    match = _NUMERIC_PREFIX.match(text)
    return match.group(0).strip() if match else ''


def _to_float(value: Any) -> float:
    """Numeric conversion with SQLite's leading-prefix rules for text and blobs."""
    if value is None:
        return 0.0
    if isinstance(value, int | float):
        return float(value)
    prefix = _numeric_prefix(value)
    return float(prefix) if prefix else 0.0


def _to_int64(value: Any) -> int:
    """Integer conversion saturating at the signed 64-bit bounds."""
    if isinstance(value, int):
        number = value
    elif isinstance(value, str | bytes) and (prefix := _numeric_prefix(value)).lstrip('+-').isdigit():
        number = int(prefix)
    else:
        real = _to_float(value)
        if math.isnan(real):
            return 0
        if real >= 2.0**63:
            return _INT64_MAX
        if real <= -(2.0**63):
            return _INT64_MIN
        number = int(real)
    return max(_INT64_MIN, min(_INT64_MAX, number))
