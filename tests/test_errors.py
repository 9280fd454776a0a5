"""Tests for error types."""

import msgspec
import pytest
from hypothesis import given
from sqlguard import ResultCode, SqlError, SqlStatus

from tests.strategies import failure_codes, messages


class TestSqlError:
    """Tests for the SqlError exception."""

    def test_str_format(self):
        assert str(SqlError(5, 'disk I/O error')) == '(5): disk I/O error'

    def test_attributes(self):
        error = SqlError(19, 'constraint failed')
        assert error.code == 19
        assert error.message == 'constraint failed'

    def test_primary_code_of_extended_code(self):
        assert SqlError(2067, 'UNIQUE constraint failed').primary_code == ResultCode.CONSTRAINT

    def test_raisable(self):
        with pytest.raises(SqlError, match=r'\(1\): boom'):
            raise SqlError(1, 'boom')

    @given(failure_codes, messages)
    def test_struct_roundtrip(self, code, message):
        error = SqlError(code, message)
        restored = error.to_struct().to_exception()
        assert (restored.code, restored.message) == (code, message)


class TestSqlStatus:
    """Tests for the SqlStatus struct."""

    def test_is_frozen(self):
        status = SqlStatus(1, 'x')
        with pytest.raises(AttributeError):
            status.code = 2  # type: ignore[misc]

    def test_json_encoding(self):
        encoded = msgspec.json.encode(SqlStatus(5, 'disk I/O error'))
        assert msgspec.json.decode(encoded, type=SqlStatus) == SqlStatus(5, 'disk I/O error')
