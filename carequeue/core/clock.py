"""
Clock used by the queue services to decide what "today" and "now" are.
"""

from datetime import date, datetime
from typing import Optional


class Clock:
    """Server clock. Pass ``fixed`` to pin it to one instant.

    ``now()`` is always timezone-aware: the system clock reports local time
    with its offset, so ``today()`` is the server's local date.
    """

    def __init__(self, fixed: Optional[datetime] = None):
        if fixed is not None and fixed.tzinfo is None:
            fixed = fixed.astimezone()
        self.fixed = fixed

    def now(self) -> datetime:
        if self.fixed is not None:
            return self.fixed
        return datetime.now().astimezone()

    def today(self) -> date:
        return self.now().date()


system_clock = Clock()


def get_clock() -> Clock:
    """FastAPI dependency for the server clock."""
    return system_clock
