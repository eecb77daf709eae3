"""
Clock -- the source of "now" for ledger timestamps and report windows.

Responsibility:
    TransactionLedger stamps ``occurred_at`` from a Clock, and every
    "today", "this week" or daily-chart window is resolved against one.
    Nothing else in the kernel reads the system time.

Architecture position:
    Kernel > Domain.  SystemClock is the only place that touches the real
    time; DeterministicClock pins it for tests and replays.

Invariants enforced:
    - ``now_utc()`` is always timezone-aware UTC, so a shop whose server
      runs in local time still closes its days at UTC midnight.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone


class Clock(ABC):

    @abstractmethod
    def now_utc(self) -> datetime:
        ...


class SystemClock(Clock):

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    A naive ``start`` is taken as UTC wall-clock time, like every other
    naive timestamp the kernel accepts.
    """

    def __init__(self, start: datetime):
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)
        self._now = start.astimezone(timezone.utc)

    def now_utc(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> datetime:
        """Move forward by ``timedelta(**delta)``, e.g. ``advance(hours=9)``."""
        self._now += timedelta(**delta)
        return self._now
