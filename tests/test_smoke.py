"""Smoke tests to verify package structure and imports work."""


def test_import_types():
    """Test that core types can be imported."""
    from sqlguard import CheckedResult, Expected, Failure, Value

    assert Expected is not None
    assert Value is not None
    assert Failure is not None
    assert CheckedResult is not None


def test_import_binding():
    """Test that the SQLite binding can be imported."""
    from sqlguard import Connection, Datatype, ResultCode, Statement, UniqueHandle

    assert Connection is not None
    assert Statement is not None
    assert UniqueHandle is not None
    assert ResultCode.DONE == 101
    assert Datatype.NULL == 5


def test_import_errors():
    """Test that error types can be imported."""
    from sqlguard import InvalidCaptureError, SqlError, SqlStatus, UncheckedResultWarning

    assert issubclass(SqlError, Exception)
    assert issubclass(InvalidCaptureError, TypeError)
    assert issubclass(UncheckedResultWarning, RuntimeWarning)
    assert SqlStatus is not None


def test_submodule_imports():
    """Test that submodule imports work."""
    from sqlguard.checked import CheckedResult, checked_scope  # noqa: F401
    from sqlguard.decorators import capture  # noqa: F401
    from sqlguard.expected import Expected, Failure, Value  # noqa: F401
    from sqlguard.handle import UniqueHandle  # noqa: F401
    from sqlguard.sqlite import Connection, Statement  # noqa: F401


def test_public_accessors_are_documented():
    """Test that the variant accessors and column readers carry docstrings."""
    from sqlguard import Failure, Statement, Value

    names = ['is_success', 'value', 'error_is', 'error', 'value_or', 'map']
    for variant in (Value, Failure):
        for name in names:
            assert getattr(variant, name).__doc__, f'{variant.__name__}.{name}'

    for name in ['column', 'get_value', 'get_type', 'get_int64', 'get_int', 'get_double', 'get_string']:
        assert getattr(Statement, name).__doc__, f'Statement.{name}'
