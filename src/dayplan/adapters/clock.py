"""Clock adapters."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo


class SystemClock:
    """
    Wall clock in a configured timezone.

    Implements Clock protocol. The calendar day of now() is the user's local
    day, not the UTC day.
    """

    def __init__(self, timezone: str = "UTC"):
        self.tz = ZoneInfo(timezone)

    def now(self) -> datetime:
        return datetime.now(self.tz)


class FixedClock:
    """
    Clock pinned to one instant.

    Implements Clock protocol. Used for --as-of and in tests.
    """

    def __init__(self, instant: datetime | date, timezone: str = "UTC"):
        tz = ZoneInfo(timezone)
        if isinstance(instant, datetime):
            self.instant = instant if instant.tzinfo else instant.replace(tzinfo=tz)
        else:
            self.instant = datetime.combine(instant, time(12, 0), tzinfo=tz)

    def now(self) -> datetime:
        return self.instant
