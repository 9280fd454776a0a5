"""Decorators: @capture."""

from sqlguard.decorators.capture import capture

__all__ = [
    'capture',
]
