"""sqlguard: value-or-error results and must-check status guards, with a SQLite binding.

Flat imports (preferred):
    from sqlguard import Expected, Value, Failure, CheckedResult, checked_scope
    from sqlguard import Connection, Statement, SqlError

Submodule imports (for organization):
    from sqlguard.expected import Expected
    from sqlguard.checked import CheckedResult, checked_scope
    from sqlguard.sqlite import Connection, Statement
    from sqlguard.decorators import capture
"""

# Configuration
from sqlguard._config import GuardConfig, get_config, init

# Logging
from sqlguard._logging import configure_logging, get_logger

# Checked results
from sqlguard.checked import CheckedResult, CheckedScope, checked_scope

# Codes
from sqlguard.codes import Datatype, ResultCode

# Decorators
from sqlguard.decorators import capture

# Errors
from sqlguard.errors import InvalidCaptureError, SqlError, SqlStatus, UncheckedResultWarning

# Value-or-error
from sqlguard.expected import Expected, Failure, Value

# Resource handles
from sqlguard.handle import UniqueHandle

# SQLite binding
from sqlguard.sqlite import Connection, Statement

__all__ = [
    # Checked results
    'CheckedResult',
    'CheckedScope',
    # SQLite binding
    'Connection',
    # Codes
    'Datatype',
    # Value-or-error
    'Expected',
    'Failure',
    # Configuration
    'GuardConfig',
    # Errors
    'InvalidCaptureError',
    'ResultCode',
    'SqlError',
    'SqlStatus',
    'Statement',
    'UncheckedResultWarning',
    # Resource handles
    'UniqueHandle',
    'Value',
    # Decorators
    'capture',
    'checked_scope',
    # Logging
    'configure_logging',
    'get_config',
    'get_logger',
    'init',
]
