"""
polycal.engines.converter
-------------------------
Bidirectional mapping between the world-time scalar and Components.

The scalar counts seconds from internal year 0, month 0, day 0 at 00:00:00.
Days before a year are closed-form:

    days_before_year(Y) = Y * base + leap_years_before(Y) * delta

where ``base`` is the common-year length and ``delta`` the extra days of a
leap year. ``leap_years_before`` is signed (negative for negative years), so
the same formula holds on both sides of the epoch.

Weekdays are counted on "counting days" only: days of intercalary months and
festivals with ``counts_for_weekday=False`` are skipped. A skipped day
reports the weekday of the next counting day.

All functions are total: out-of-range fields are normalized by carrying.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import replace
from typing import Dict, Tuple, Union

from ..core.model import CalendarModel
from ..core.types import Components
from .festival import FestivalResolver
from .leap import is_leap

Number = Union[int, float]


def _int_if_whole(x: Number) -> Number:
    if isinstance(x, float) and x.is_integer():
        return int(x)
    return x


class TimeConverter:
    def __init__(self, model: CalendarModel):
        self.model = model
        self.rule = model.leap_rule
        self.festivals = FestivalResolver(model)

        self.n_months = model.months_per_year
        self.n_week = model.days_in_week
        self.first_weekday = model.years.first_weekday

        t = model.time
        self.spm = t.seconds_per_minute
        self.sph = t.seconds_per_hour
        self.spd = t.seconds_per_day

        self._lengths: Dict[bool, Tuple[int, ...]] = {}
        self._cum: Dict[bool, Tuple[int, ...]] = {}
        for leap in (False, True):
            lengths = tuple(m.length(leap) for m in model.months)
            cum = [0]
            for n in lengths:
                cum.append(cum[-1] + n)
            self._lengths[leap] = lengths
            self._cum[leap] = tuple(cum)

        self.base = self._cum[False][-1]
        self.delta = self._cum[True][-1] - self.base
        self._nc_common = self.festivals.non_counting_in_year(False)
        self._nc_leap = self.festivals.non_counting_in_year(True)

        # Exact mean year length as a fraction num/den, for the year estimate.
        period = self.rule.period
        self._mean_num = self.base * period + self.delta * self.rule.leap_years_before(period)
        self._mean_den = period

    # ---------------------------------------------------------
    # Year / month shape
    # ---------------------------------------------------------

    def is_leap_year(self, year: int) -> bool:
        return is_leap(year, self.rule)

    def days_in_year(self, year: int) -> int:
        return self._cum[self.is_leap_year(year)][-1]

    def days_in_month(self, month: int, year: int) -> int:
        year, month = self._carry_month(year, month)
        return self._lengths[self.is_leap_year(year)][month]

    def days_before_year(self, year: int) -> int:
        return year * self.base + self.rule.leap_years_before(year) * self.delta

    def non_counting_before_year(self, year: int) -> int:
        n_leap = self.rule.leap_years_before(year)
        return (year - n_leap) * self._nc_common + n_leap * self._nc_leap

    def _carry_month(self, year: int, month: int) -> Tuple[int, int]:
        q, m = divmod(month, self.n_months)
        return year + q, m

    # ---------------------------------------------------------
    # Scalar <-> Components
    # ---------------------------------------------------------

    def _day_number(self, c: Components) -> int:
        year, month = self._carry_month(c.year, c.month)
        leap = self.is_leap_year(year)
        return self.days_before_year(year) + self._cum[leap][month] + c.day_of_month

    def _time_of_day(self, c: Components) -> Number:
        return c.hour * self.sph + c.minute * self.spm + c.second

    def components_to_time(self, c: Components) -> Number:
        return _int_if_whole(self._day_number(c) * self.spd + self._time_of_day(c))

    def year_of_day(self, day: int) -> int:
        y = (day * self._mean_den) // self._mean_num
        while self.days_before_year(y) > day:
            y -= 1
        while self.days_before_year(y + 1) <= day:
            y += 1
        return y

    def components_from_day(self, day: int) -> Components:
        """Date (midnight) of an absolute day number."""
        year = self.year_of_day(day)
        doy = day - self.days_before_year(year)
        cum = self._cum[self.is_leap_year(year)]
        month = bisect_right(cum, doy) - 1
        return Components(year, month, doy - cum[month])

    def time_to_components(self, t: Number) -> Components:
        day, rem = divmod(t, self.spd)
        hour, rem = divmod(rem, self.sph)
        minute, second = divmod(rem, self.spm)
        c = self.components_from_day(int(day))
        return replace(c, hour=int(hour), minute=int(minute), second=_int_if_whole(second))

    def normalize(self, c: Components) -> Components:
        return self.time_to_components(self.components_to_time(c))

    def start_of_day(self, c: Components) -> Components:
        return self.components_from_day(self.absolute_day(c))

    # ---------------------------------------------------------
    # Day counting
    # ---------------------------------------------------------

    def absolute_day(self, c: Components) -> int:
        """Days since the epoch, after carrying the time of day."""
        return self._day_number(c) + int(self._time_of_day(c) // self.spd)

    def day_of_year(self, c: Components) -> int:
        c = self.start_of_day(c)
        return self._cum[self.is_leap_year(c.year)][c.month] + c.day_of_month

    def days_between(self, a: Components, b: Components) -> int:
        return self.absolute_day(b) - self.absolute_day(a)

    def months_between(self, a: Components, b: Components) -> int:
        a, b = self.start_of_day(a), self.start_of_day(b)
        return (b.year - a.year) * self.n_months + (b.month - a.month)

    def years_between(self, a: Components, b: Components) -> int:
        return self.start_of_day(b).year - self.start_of_day(a).year

    def compare_dates(self, a: Components, b: Components) -> int:
        ta, tb = self.components_to_time(a), self.components_to_time(b)
        return (ta > tb) - (ta < tb)

    def is_same_day(self, a: Components, b: Components) -> bool:
        return self.absolute_day(a) == self.absolute_day(b)

    def is_valid_date(self, c: Components) -> bool:
        """True when every field is already in range (no carrying needed)."""
        t = self.model.time
        if not 0 <= c.month < self.n_months:
            return False
        if not 0 <= c.day_of_month < self.days_in_month(c.month, c.year):
            return False
        return (
            0 <= c.hour < t.hours_per_day
            and 0 <= c.minute < t.minutes_per_hour
            and 0 <= c.second < t.seconds_per_minute
        )

    # ---------------------------------------------------------
    # Arithmetic
    # ---------------------------------------------------------

    def add_days(self, c: Components, days: int) -> Components:
        c = self.normalize(c)
        d = self.components_from_day(self.absolute_day(c) + days)
        return replace(c, year=d.year, month=d.month, day_of_month=d.day_of_month)

    def _clamped(self, c: Components, year: int, month: int) -> Components:
        year, month = self._carry_month(year, month)
        last = max(self.days_in_month(month, year) - 1, 0)
        return replace(c, year=year, month=month, day_of_month=min(c.day_of_month, last))

    def add_months(self, c: Components, months: int) -> Components:
        c = self.normalize(c)
        return self._clamped(c, c.year, c.month + months)

    def add_years(self, c: Components, years: int) -> Components:
        c = self.normalize(c)
        return self._clamped(c, c.year + years, c.month)

    # ---------------------------------------------------------
    # Weekdays
    # ---------------------------------------------------------

    def is_weekday_counted(self, c: Components) -> bool:
        c = self.start_of_day(c)
        return self.festivals.counts_for_weekday(c.month, c.day_of_month, self.is_leap_year(c.year))

    def counting_day(self, c: Components) -> int:
        """Counting days since the epoch; a skipped day shares the index of the next counting day."""
        c = self.start_of_day(c)
        leap = self.is_leap_year(c.year)
        abs_day = self.days_before_year(c.year) + self._cum[leap][c.month] + c.day_of_month
        skipped = self.non_counting_before_year(c.year) + self.festivals.non_counting_before(
            c.month, c.day_of_month, leap
        )
        return abs_day - skipped

    def counted_in_month_before(self, c: Components) -> int:
        c = self.start_of_day(c)
        leap = self.is_leap_year(c.year)
        return c.day_of_month - self.festivals.non_counting_in_month_before(c.month, c.day_of_month, leap)

    def counted_days_in_month(self, month: int, year: int) -> int:
        year, month = self._carry_month(year, month)
        leap = self.is_leap_year(year)
        return self._lengths[leap][month] - self.festivals.non_counting_in_month(month, leap)

    def nth_weekday(self, c: Components, scope: str = "month") -> Tuple[int, int]:
        """(nth occurrence of c's weekday in its month or year, the same counted from the end as -1, -2, ...)."""
        c = self.start_of_day(c)
        if scope == "year":
            first = self.counting_day(Components(c.year, 0, 0))
            before = self.counting_day(c) - first
            total = self.counting_day(Components(c.year + 1, 0, 0)) - first
        else:
            before = self.counted_in_month_before(c)
            total = self.counted_days_in_month(c.month, c.year)
        after = total - before - 1
        return before // self.n_week + 1, -(after // self.n_week + 1)

    def day_of_week(self, c: Components) -> int:
        c = self.start_of_day(c)
        fixed = self.model.months[c.month].starting_weekday
        if fixed is not None:
            return (fixed + self.counted_in_month_before(c)) % self.n_week
        return (self.counting_day(c) + self.first_weekday) % self.n_week

    def month_start_weekday(self, month: int, year: int) -> int:
        year, month = self._carry_month(year, month)
        return self.day_of_week(Components(year, month, 0))

    def week_of_month(self, c: Components) -> int:
        """0-based row of ``c`` in a month grid."""
        c = self.start_of_day(c)
        offset = self.month_start_weekday(c.month, c.year)
        return (offset + self.counted_in_month_before(c)) // self.n_week

    def weeks_in_month(self, month: int, year: int) -> int:
        offset = self.month_start_weekday(month, year)
        return -(-(offset + self.counted_days_in_month(month, year)) // self.n_week)

    def week_of_year(self, c: Components) -> int:
        c = self.start_of_day(c)
        first = Components(c.year, 0, 0)
        return (self.day_of_week(first) + self.counting_day(c) - self.counting_day(first)) // self.n_week

    def weeks_in_year(self, year: int) -> int:
        first = Components(year, 0, 0)
        counted = self.counting_day(Components(year + 1, 0, 0)) - self.counting_day(first)
        return -(-(self.day_of_week(first) + counted) // self.n_week)
