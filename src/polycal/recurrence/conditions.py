"""
polycal.recurrence.conditions
-----------------------------
Field conditions that narrow any repeat kind: ``{field, op, value}``.

Each field reads one property of the candidate day. Index-like fields are
0-based like Components (month, day, weekday, dayOfYear, season, seasonDay,
era, cycle, moonPhaseIndex). Ordinal fields count from 1: weekNumberInMonth,
moonPhaseCountMonth, moonPhaseCountYear and eraYear; inverseWeekNumber is -1
for the last occurrence of the weekday in the month.

``%`` holds when ``(actual - offset) % value == 0``. Season, era, cycle and
moon phase values may be given by name. ``value2`` selects the moon or
cycle (default 0).
"""

from __future__ import annotations

import operator
from typing import Any, Callable, Dict, Optional, Sequence

from ..core.types import Components
from ..engines.calendar import CalendarEngine
from .types import Condition, ConditionField, ConditionOp

_COMPARE: Dict[ConditionOp, Callable[[Any, Any], bool]] = {
    ConditionOp.EQ: operator.eq,
    ConditionOp.NE: operator.ne,
    ConditionOp.GE: operator.ge,
    ConditionOp.LE: operator.le,
    ConditionOp.GT: operator.gt,
    ConditionOp.LT: operator.lt,
}


def compare(op: ConditionOp, actual: Any, value: Any, offset: int = 0) -> bool:
    if actual is None:
        return False
    try:
        if op is ConditionOp.MOD:
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                return False
            return (actual - offset) % value == 0
        return _COMPARE[op](actual, value)
    except TypeError:
        return False


class ConditionEvaluator:
    def __init__(self, engine: CalendarEngine):
        self.engine = engine
        self.conv = engine.converter
        self.model = engine.model

    def all_hold(self, conditions: Sequence[Condition], c: Components, day: int) -> bool:
        return all(self.holds(cond, c, day) for cond in conditions)

    def holds(self, cond: Condition, c: Components, day: int) -> bool:
        actual = self.value(cond.field, c, day, cond.value2)
        return compare(cond.op, actual, self._target(cond), cond.offset)

    # ---------------------------------------------------------
    # Targets
    # ---------------------------------------------------------

    def _target(self, cond: Condition) -> Any:
        v = cond.value
        f = cond.field
        if f is ConditionField.MOON_PHASE and isinstance(v, int) and not isinstance(v, bool):
            moon = self._moon(cond.value2)
            return moon.phases[v].name if moon is not None and 0 <= v < len(moon.phases) else None
        if not isinstance(v, str):
            return v
        if f is ConditionField.SEASON:
            return self.engine.seasons.find(v)
        if f is ConditionField.ERA:
            return next((i for i, e in enumerate(self.model.eras) if e.name == v), None)
        if f is ConditionField.CYCLE:
            cyc = self._cycle(cond.value2)
            return None if cyc is None or v not in cyc.entries else cyc.entries.index(v)
        if f is ConditionField.MOON_PHASE_INDEX:
            moon = self._moon(cond.value2)
            names = [] if moon is None else [p.name for p in moon.phases]
            return names.index(v) if v in names else None
        return v

    def _moon(self, index: Optional[int]):
        i = index or 0
        moons = self.model.moons
        return moons[i] if 0 <= i < len(moons) else None

    def _cycle(self, index: Optional[int]):
        i = index or 0
        cycles = self.model.cycles
        return cycles[i] if 0 <= i < len(cycles) else None

    # ---------------------------------------------------------
    # Field values
    # ---------------------------------------------------------

    def value(self, field: ConditionField, c: Components, day: int, value2: Optional[int] = None) -> Any:
        conv = self.conv
        n_week = conv.n_week

        if field is ConditionField.YEAR:
            return c.year
        if field is ConditionField.MONTH:
            return c.month
        if field is ConditionField.DAY:
            return c.day_of_month
        if field is ConditionField.DAY_OF_YEAR:
            return conv.day_of_year(c)
        if field is ConditionField.DAYS_BEFORE_MONTH_END:
            return conv.days_in_month(c.month, c.year) - 1 - c.day_of_month
        if field is ConditionField.INTERCALARY:
            return not conv.is_weekday_counted(c)

        if field in (ConditionField.WEEKDAY, ConditionField.WEEK_NUMBER_IN_MONTH, ConditionField.INVERSE_WEEK_NUMBER):
            if not conv.is_weekday_counted(c):
                return None
            if field is ConditionField.WEEKDAY:
                return conv.day_of_week(c)
            nth, nth_end = conv.nth_weekday(c)
            return nth if field is ConditionField.WEEK_NUMBER_IN_MONTH else nth_end
        if field is ConditionField.WEEK_IN_MONTH:
            return conv.week_of_month(c)
        if field is ConditionField.WEEK_IN_YEAR:
            return conv.week_of_year(c)
        if field is ConditionField.TOTAL_WEEK:
            return (conv.counting_day(c) + conv.first_weekday) // n_week
        if field is ConditionField.WEEKS_BEFORE_MONTH_END:
            return conv.weeks_in_month(c.month, c.year) - 1 - conv.week_of_month(c)
        if field is ConditionField.WEEKS_BEFORE_YEAR_END:
            return conv.weeks_in_year(c.year) - 1 - conv.week_of_year(c)

        if field in (ConditionField.SEASON, ConditionField.SEASON_PERCENT, ConditionField.SEASON_DAY):
            info = self.engine.seasons.get_current_season(conv.day_of_year(c))
            if info is None:
                return None
            if field is ConditionField.SEASON:
                return info.index
            if field is ConditionField.SEASON_DAY:
                return info.day_in_season
            return info.progress * 100

        if field in (
            ConditionField.IS_LONGEST_DAY,
            ConditionField.IS_SHORTEST_DAY,
            ConditionField.IS_SPRING_EQUINOX,
            ConditionField.IS_AUTUMN_EQUINOX,
        ):
            return conv.day_of_year(c) == self._marker_day(field)

        if field is ConditionField.MOON_PHASE:
            info = self.engine.moons.phase_on(value2 or 0, c)
            return None if info is None else info.name
        if field is ConditionField.MOON_PHASE_INDEX:
            info = self.engine.moons.phase_on(value2 or 0, c)
            return None if info is None else info.phase_index
        if field is ConditionField.MOON_PHASE_COUNT_MONTH:
            return self._phase_count(value2 or 0, day, day - c.day_of_month)
        if field is ConditionField.MOON_PHASE_COUNT_YEAR:
            return self._phase_count(value2 or 0, day, day - conv.day_of_year(c))

        if field is ConditionField.CYCLE:
            cyc = self._cycle(value2)
            if cyc is None or cyc.length <= 0:
                return None
            return (self.engine.cycles.basis_value(cyc.based_on, c) + cyc.offset) % cyc.length
        if field is ConditionField.ERA:
            return self.engine.eras.era_index(c.year)
        if field is ConditionField.ERA_YEAR:
            info = self.engine.eras.get_current_era(c.year)
            return None if info is None else info.year_in_era

        raise TypeError(f"Unknown condition field: {field!r}")

    def _marker_day(self, field: ConditionField) -> int:
        dl = self.engine.daylight
        n = self.model.days_per_year
        summer, winter = dl.summer_solstice_day, dl.winter_solstice_day
        if field is ConditionField.IS_LONGEST_DAY:
            return summer
        if field is ConditionField.IS_SHORTEST_DAY:
            return winter
        # equinoxes sit halfway between the solstices
        if field is ConditionField.IS_SPRING_EQUINOX:
            return (winter + ((summer - winter) % n) // 2) % n
        return (summer + ((winter - summer) % n) // 2) % n

    def _phase_count(self, moon_index: int, day: int, first: int) -> Optional[int]:
        """Runs of ``day``'s phase that touch [first, day], counting the one in progress at ``first``."""
        moons = self.engine.moons
        spd = self.conv.spd
        if self._moon(moon_index) is None:
            return None

        def phase(d: int) -> int:
            return moons.get_moon_phase(moon_index, d * spd).phase_index

        target = phase(day)
        runs, prev = 0, None
        for d in range(first, day + 1):
            p = phase(d)
            if p == target and p != prev:
                runs += 1
            prev = p
        return runs
