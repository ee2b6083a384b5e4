"""
Clock -- where "today" comes from.

Responsibility:
    Provides an injectable clock interface so that domain and service code
    never call ``datetime.now()`` or ``date.today()`` directly.  Ages,
    application windows and receipt issue dates are all computed from the
    injected clock.

Architecture position:
    Kernel > Domain.  SystemClock is the only place that reads the wall
    clock; everything else receives a Clock.

Failure modes:
    - None.  DeterministicClock never runs out of time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone


class Clock(ABC):
    """
    Source of the current date for services and selectors.

    Subclasses supply a timezone-aware ``now()``; ``today()`` is its
    calendar date and is what eligibility and window checks use.
    """

    @abstractmethod
    def now(self) -> datetime:
        ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """
    Wall-clock time.

    Uses local time, because application windows are calendar dates in
    the housing authority's own timezone.
    """

    def now(self) -> datetime:
        return datetime.now().astimezone()


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    Ages and open/closed windows in tests stay put regardless of when the
    suite runs.
    """

    def __init__(self, fixed_time: datetime | date | None = None):
        """``fixed_time`` may be a date, taken at noon UTC."""
        self._fixed_time = self._coerce(fixed_time or datetime(
            2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc
        ))

    @staticmethod
    def _coerce(value: datetime | date) -> datetime:
        if isinstance(value, datetime):
            return value
        return datetime(value.year, value.month, value.day, 12, 0, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        return self._fixed_time

    def set_date(self, value: datetime | date) -> None:
        """Move the clock to a specific day."""
        self._fixed_time = self._coerce(value)

    def advance_days(self, days: int = 1) -> date:
        """Advance by whole days and return the new date."""
        self._fixed_time = self._fixed_time + timedelta(days=days)
        return self.today()
