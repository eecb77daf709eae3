"""Tests for the period filter."""

from datetime import date, datetime, timedelta, timezone

import pytest

from retail_kernel.domain.periods import (
    PeriodKind,
    PeriodSelector,
    matches,
    to_utc_date,
    week_start,
    window,
)

# Wednesday
NOW = datetime(2024, 3, 13, 15, 0, tzinfo=timezone.utc)


class TestUtcTruncation:

    def test_aware_datetime_converted_to_utc_day(self):
        # 22:30 at UTC-3 is already the next day in UTC
        local = datetime(2024, 3, 13, 22, 30, tzinfo=timezone(timedelta(hours=-3)))
        assert to_utc_date(local) == date(2024, 3, 14)

    def test_naive_datetime_taken_as_utc(self):
        assert to_utc_date(datetime(2024, 3, 13, 23, 59)) == date(2024, 3, 13)

    def test_date_unchanged(self):
        assert to_utc_date(date(2024, 3, 13)) == date(2024, 3, 13)

    def test_late_local_evening_is_not_today(self):
        late = datetime(2024, 3, 12, 22, 0, tzinfo=timezone(timedelta(hours=-3)))
        # 2024-03-13 01:00 UTC
        assert matches(late, NOW, PeriodSelector.today())


class TestWindows:

    def test_all_matches_everything(self):
        assert window(NOW, PeriodSelector.all()) is None
        assert matches(date(1999, 1, 1), NOW, PeriodSelector.all())

    def test_today(self):
        assert matches(date(2024, 3, 13), NOW, PeriodSelector.today())
        assert not matches(date(2024, 3, 12), NOW, PeriodSelector.today())

    def test_week_starts_on_sunday(self):
        assert week_start(date(2024, 3, 13)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 10)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 16)) == date(2024, 3, 10)

    def test_this_week_spans_sunday_to_saturday(self):
        selector = PeriodSelector.this_week()
        assert window(NOW, selector) == (date(2024, 3, 10), date(2024, 3, 16))
        assert matches(date(2024, 3, 10), NOW, selector)
        assert matches(date(2024, 3, 16), NOW, selector)
        assert not matches(date(2024, 3, 9), NOW, selector)
        assert not matches(date(2024, 3, 17), NOW, selector)

    def test_this_month(self):
        selector = PeriodSelector.this_month()
        assert window(NOW, selector) == (date(2024, 3, 1), date(2024, 3, 31))
        assert not matches(date(2024, 2, 29), NOW, selector)

    def test_this_month_december(self):
        december = datetime(2024, 12, 5, tzinfo=timezone.utc)
        assert window(december, PeriodSelector.this_month()) == (
            date(2024, 12, 1),
            date(2024, 12, 31),
        )

    def test_this_year(self):
        selector = PeriodSelector.this_year()
        assert matches(date(2024, 1, 1), NOW, selector)
        assert not matches(date(2023, 12, 31), NOW, selector)

    def test_last_7_days_is_inclusive_of_today(self):
        assert window(NOW, PeriodSelector.last_7_days()) == (
            date(2024, 3, 7),
            date(2024, 3, 13),
        )


class TestCustomWindow:

    START = date(2024, 3, 1)
    END = date(2024, 3, 5)

    @pytest.mark.parametrize("day", [1, 2, 3, 4, 5])
    def test_inclusive_bounds(self, day):
        selector = PeriodSelector.custom(self.START, self.END)
        assert matches(date(2024, 3, day), NOW, selector)

    @pytest.mark.parametrize("day", [date(2024, 2, 29), date(2024, 3, 6)])
    def test_outside_bounds(self, day):
        assert not matches(day, NOW, PeriodSelector.custom(self.START, self.END))

    def test_end_bound_covers_whole_day(self):
        late = datetime(2024, 3, 5, 23, 59, 59, tzinfo=timezone.utc)
        assert matches(late, NOW, PeriodSelector.custom(self.START, self.END))

    @pytest.mark.parametrize("start, end", [(None, END), (START, None), (None, None)])
    def test_missing_bound_matches_everything(self, start, end):
        selector = PeriodSelector.custom(start, end)
        assert selector.kind == PeriodKind.CUSTOM
        assert window(NOW, selector) is None
        assert matches(date(1990, 1, 1), NOW, selector)

    def test_datetime_bounds_truncated(self):
        selector = PeriodSelector.custom(
            datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc),
            datetime(2024, 3, 5, 1, 0, tzinfo=timezone.utc),
        )
        assert selector.start == self.START
        assert selector.end == self.END
