"""Adapters - I/O implementations of ports."""

from .sqlite_store import SQLiteTaskStore, NotFoundError
from .clock import SystemClock, FixedClock

__all__ = [
    "SQLiteTaskStore",
    "NotFoundError",
    "SystemClock",
    "FixedClock",
]
