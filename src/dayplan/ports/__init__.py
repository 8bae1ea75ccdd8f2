"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .clock import Clock

__all__ = [
    "TaskStore",
    "Clock",
]
