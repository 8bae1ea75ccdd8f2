"""Clock interface."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of "now" for calendar-day classification."""

    def now(self) -> datetime:
        """Current instant, already in the user's timezone."""
        ...
