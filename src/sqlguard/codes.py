"""SQLite result codes and column datatypes."""

from __future__ import annotations

from enum import IntEnum

__all__ = ['Datatype', 'ResultCode']


class ResultCode(IntEnum):
    """Primary SQLite result codes.

    Extended codes (e.g. 2067 for a UNIQUE constraint) carry their primary
    code in the low byte.
    """

    OK = 0
    ERROR = 1
    INTERNAL = 2
    PERM = 3
    ABORT = 4
    BUSY = 5
    LOCKED = 6
    NOMEM = 7
    READONLY = 8
    INTERRUPT = 9
    IOERR = 10
    CORRUPT = 11
    NOTFOUND = 12
    FULL = 13
    CANTOPEN = 14
    PROTOCOL = 15
    EMPTY = 16
    SCHEMA = 17
    TOOBIG = 18
    CONSTRAINT = 19
    MISMATCH = 20
    MISUSE = 21
    NOLFS = 22
    AUTH = 23
    FORMAT = 24
    RANGE = 25
    NOTADB = 26
    NOTICE = 27
    WARNING = 28
    ROW = 100
    DONE = 101


class Datatype(IntEnum):
    """Fundamental column datatypes as reported by sqlite3_column_type."""

    INTEGER = 1
    FLOAT = 2
    TEXT = 3
    BLOB = 4
    NULL = 5
