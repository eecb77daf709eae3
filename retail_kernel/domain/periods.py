"""
Period filter -- decides whether a dated record falls inside a time window.

Responsibility:
    Evaluates a PeriodSelector (all, today, this week, this month, this year,
    last 7 days, custom range) against a record date and a reference "now".
    Used for ledger filtering, the dashboard "today" rollups, the daily
    chart window and the category breakdown.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O, stateless.

Invariants enforced:
    - Day granularity in UTC.  Both the record date and "now" are truncated
      to their UTC calendar date before any comparison, whatever timezone
      the caller's datetimes carry.  Naive datetimes are taken as UTC.
    - Weeks start on Sunday and span 7 days inclusive.
    - Custom windows are inclusive on both ends.  A custom selector with a
      missing bound matches everything.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum

# date.weekday(): Monday == 0 ... Sunday == 6
SUNDAY = 6
WEEK_START = SUNDAY


class PeriodKind(str, Enum):
    ALL = "all"
    TODAY = "today"
    THIS_WEEK = "this_week"
    THIS_MONTH = "this_month"
    THIS_YEAR = "this_year"
    LAST_7_DAYS = "last_7_days"
    CUSTOM = "custom"


@dataclass(frozen=True)
class PeriodSelector:
    """A period choice; ``start``/``end`` only apply to CUSTOM."""

    kind: PeriodKind = PeriodKind.ALL
    start: date | None = None
    end: date | None = None

    @classmethod
    def all(cls) -> PeriodSelector:
        return cls(PeriodKind.ALL)

    @classmethod
    def today(cls) -> PeriodSelector:
        return cls(PeriodKind.TODAY)

    @classmethod
    def this_week(cls) -> PeriodSelector:
        return cls(PeriodKind.THIS_WEEK)

    @classmethod
    def this_month(cls) -> PeriodSelector:
        return cls(PeriodKind.THIS_MONTH)

    @classmethod
    def this_year(cls) -> PeriodSelector:
        return cls(PeriodKind.THIS_YEAR)

    @classmethod
    def last_7_days(cls) -> PeriodSelector:
        return cls(PeriodKind.LAST_7_DAYS)

    @classmethod
    def custom(
        cls,
        start: date | datetime | None,
        end: date | datetime | None,
    ) -> PeriodSelector:
        return cls(
            PeriodKind.CUSTOM,
            to_utc_date(start) if start is not None else None,
            to_utc_date(end) if end is not None else None,
        )


def to_utc_date(value: date | datetime) -> date:
    """Truncate a date or datetime to its UTC calendar day."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.date()
        return value.astimezone(timezone.utc).date()
    return value


def week_start(day: date) -> date:
    """The first day of the week containing ``day``."""
    offset = (day.weekday() - WEEK_START) % 7
    return day - timedelta(days=offset)


def window(
    now: date | datetime,
    selector: PeriodSelector,
) -> tuple[date, date] | None:
    """
    Resolve a selector to an inclusive (first_day, last_day) window.

    Returns None when the selector is unbounded (ALL, or CUSTOM with a
    missing bound).
    """
    today = to_utc_date(now)
    kind = selector.kind

    if kind == PeriodKind.ALL:
        return None
    if kind == PeriodKind.TODAY:
        return today, today
    if kind == PeriodKind.THIS_WEEK:
        first = week_start(today)
        return first, first + timedelta(days=6)
    if kind == PeriodKind.THIS_MONTH:
        first = today.replace(day=1)
        next_month = (first + timedelta(days=32)).replace(day=1)
        return first, next_month - timedelta(days=1)
    if kind == PeriodKind.THIS_YEAR:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if kind == PeriodKind.LAST_7_DAYS:
        return today - timedelta(days=6), today
    if kind == PeriodKind.CUSTOM:
        if selector.start is None or selector.end is None:
            return None
        return selector.start, selector.end
    raise ValueError(f"Unknown period kind: {kind!r}")


def matches(
    record_date: date | datetime,
    now: date | datetime,
    selector: PeriodSelector,
) -> bool:
    """True when ``record_date`` falls inside the selector's window."""
    bounds = window(now, selector)
    if bounds is None:
        return True
    first, last = bounds
    return first <= to_utc_date(record_date) <= last
