"""Pytest configuration and shared fixtures for sqlguard tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pytest
import structlog
from sqlguard import Connection
from sqlguard._config import reset_config
from structlog.testing import capture_logs

if TYPE_CHECKING:
    from collections.abc import Generator


class FakeSource:
    """Stands in for a native handle: reports a fixed diagnostic message."""

    def __init__(self, message: str = 'disk I/O error') -> None:
        self.message = message

    def errmsg(self) -> str:
        return self.message


@pytest.fixture(autouse=True)
def isolated_state() -> Generator[None]:
    """Reset sqlguard and structlog configuration around each test."""
    reset_config()
    structlog.reset_defaults()
    yield
    root = logging.getLogger()
    for handler in [h for h in root.handlers if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)]:
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()
    reset_config()


@pytest.fixture
def log_events() -> Generator[list[dict[str, Any]]]:
    """Structlog events emitted during the test."""
    with capture_logs() as events:
        yield events


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def conn() -> Generator[Connection]:
    """In-memory connection, closed after the test."""
    with Connection.create_memory() as connection:
        yield connection


@pytest.fixture
def hens(conn: Connection) -> Connection:
    """Connection with a populated hens table."""
    conn.execute(
        'create table hens (id integer primary key, name text not null);'
        "insert into hens (id, name) values (101, 'Henrietta');"
        "insert into hens (id, name) values (102, 'Rowena');"
    ).raise_error()
    return conn
