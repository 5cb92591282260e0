"""
polycal.engines.festival
------------------------
Festival lookup and the bookkeeping of days that do not count toward the
weekday cycle.

A festival labels an existing day of a month; it never adds a day. A day is
"non-counting" when it carries a festival with ``counts_for_weekday=False``
or belongs to an intercalary month. Non-counting days neither consume nor
advance the weekday cursor.

All tables are built once per model for both year types (common, leap), so
lookups are dict hits or a bisect over a handful of days.
"""

from __future__ import annotations

from bisect import bisect_left
from typing import Dict, List, Optional, Tuple

from ..core.model import CalendarModel, Festival
from ..core.types import Components
from .leap import is_leap


class FestivalResolver:
    def __init__(self, model: CalendarModel):
        self.model = model

        # (leap, month, day_of_month) -> festival; first definition wins.
        self._by_day: Dict[Tuple[bool, int, int], Festival] = {}
        self._by_month: Dict[Tuple[bool, int], Tuple[Festival, ...]] = {}

        self._nc_doms: Dict[bool, Tuple[Tuple[int, ...], ...]] = {}
        self._nc_prefix: Dict[bool, Tuple[int, ...]] = {}
        self._nc_year: Dict[bool, int] = {}

        for leap in (False, True):
            self._build(leap)

    def _exists(self, f: Festival, leap: bool) -> bool:
        if f.leap_year_only and not leap:
            return False
        return f.day_of_month < self.model.months[f.month].length(leap)

    def _build(self, leap: bool) -> None:
        months = self.model.months
        per_month: List[List[Festival]] = [[] for _ in months]
        nc: List[set] = [set() for _ in months]

        for f in self.model.festivals:
            if not self._exists(f, leap):
                continue
            self._by_day.setdefault((leap, f.month, f.day_of_month), f)
            per_month[f.month].append(f)
            if not f.counts_for_weekday:
                nc[f.month].add(f.day_of_month)

        doms: List[Tuple[int, ...]] = []
        prefix = [0]
        for i, m in enumerate(months):
            self._by_month[(leap, i)] = tuple(sorted(per_month[i], key=lambda f: f.day_of_month))
            if m.intercalary:
                doms.append(())
                prefix.append(prefix[-1] + m.length(leap))
            else:
                d = tuple(sorted(nc[i]))
                doms.append(d)
                prefix.append(prefix[-1] + len(d))

        self._nc_doms[leap] = tuple(doms)
        self._nc_prefix[leap] = tuple(prefix)
        self._nc_year[leap] = prefix[-1]

    # ---------------------------------------------------------
    # Lookup
    # ---------------------------------------------------------

    def find_festival_day(self, c: Components, leap: Optional[bool] = None) -> Optional[Festival]:
        """Festival on (month, day_of_month) of ``c``; ``c`` must be normalized."""
        if leap is None:
            leap = is_leap(c.year, self.model.leap_rule)
        return self._by_day.get((leap, c.month, c.day_of_month))

    def festivals_in_month(self, month: int, leap: bool) -> Tuple[Festival, ...]:
        return self._by_month.get((leap, month), ())

    # ---------------------------------------------------------
    # Weekday bookkeeping
    # ---------------------------------------------------------

    def counts_for_weekday(self, month: int, day_of_month: int, leap: bool) -> bool:
        if self.model.months[month].intercalary:
            return False
        doms = self._nc_doms[leap][month]
        i = bisect_left(doms, day_of_month)
        return not (i < len(doms) and doms[i] == day_of_month)

    def non_counting_in_month_before(self, month: int, day_of_month: int, leap: bool) -> int:
        if self.model.months[month].intercalary:
            return min(day_of_month, self.model.months[month].length(leap))
        return bisect_left(self._nc_doms[leap][month], day_of_month)

    def non_counting_before(self, month: int, day_of_month: int, leap: bool) -> int:
        """Non-counting days in the year strictly before (month, day_of_month)."""
        return self._nc_prefix[leap][month] + self.non_counting_in_month_before(month, day_of_month, leap)

    def non_counting_in_month(self, month: int, leap: bool) -> int:
        p = self._nc_prefix[leap]
        return p[month + 1] - p[month]

    def non_counting_in_year(self, leap: bool) -> int:
        return self._nc_year[leap]
