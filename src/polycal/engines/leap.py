"""
polycal.engines.leap
--------------------
Leap-year rules. Every rule is a pure function of the internal year and is
periodic: Gregorian repeats every 400 years, Simple every ``interval`` years
and CustomPattern every lcm(intervals) years. The period lets the converter
count leap years before any year in O(1) from a small prefix table built once
per rule.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import reduce
from typing import Any, Mapping, Optional, Tuple, Union

from ..core.errors import ConfigurationError


def _prefix_table(rule: "LeapRule", period: int) -> Tuple[int, ...]:
    """prefix[i] = number of leap years in [0, i) for i in 0..period."""
    out = [0]
    for y in range(period):
        out.append(out[-1] + (1 if is_leap(y, rule) else 0))
    return tuple(out)


@dataclass(frozen=True)
class NoLeap:
    kind = "none"

    @property
    def period(self) -> int:
        return 1

    def is_leap(self, year: int) -> bool:
        return False

    def leap_years_before(self, year: int) -> int:
        return 0


@dataclass(frozen=True)
class GregorianLeap:
    """Divisible by 4, except centuries not divisible by 400; counted from ``start``."""
    start: int = 0
    _table: Tuple[int, ...] = field(default=(), init=False, repr=False, compare=False)

    kind = "gregorian"

    def __post_init__(self) -> None:
        object.__setattr__(self, "_table", _prefix_table(self, self.period))

    @property
    def period(self) -> int:
        return 400

    def is_leap(self, year: int) -> bool:
        y = year - self.start
        return y % 4 == 0 and (y % 100 != 0 or y % 400 == 0)

    def leap_years_before(self, year: int) -> int:
        return _count_before(self._table, self.period, year)


@dataclass(frozen=True)
class SimpleLeap:
    """Every ``interval`` years, counted from ``start``."""
    interval: int
    start: int = 0
    _table: Tuple[int, ...] = field(default=(), init=False, repr=False, compare=False)

    kind = "simple"

    def __post_init__(self) -> None:
        if self.interval <= 0:
            raise ConfigurationError(f"leap interval must be positive, got {self.interval}")
        object.__setattr__(self, "_table", _prefix_table(self, self.period))

    @property
    def period(self) -> int:
        return self.interval

    def is_leap(self, year: int) -> bool:
        return (year - self.start) % self.interval == 0

    def leap_years_before(self, year: int) -> int:
        return _count_before(self._table, self.period, year)


@dataclass(frozen=True)
class PatternTerm:
    interval: int
    negated: bool = False
    ignore_start: bool = False


@dataclass(frozen=True)
class CustomPatternLeap:
    """
    Comma-separated divisibility terms such as ``"400,!100,4"``.

    Terms are tried left to right and the first one whose interval divides the
    year decides: a plain term makes the year leap, a ``!`` term makes it
    common. A year no term divides is common. A ``+`` prefix evaluates that
    term against the raw year, ignoring ``start``.
    """
    pattern: str
    start: int = 0
    terms: Tuple[PatternTerm, ...] = field(default=(), init=False, compare=False)
    _table: Tuple[int, ...] = field(default=(), init=False, repr=False, compare=False)

    kind = "custom"

    def __post_init__(self) -> None:
        object.__setattr__(self, "terms", parse_pattern(self.pattern))
        object.__setattr__(self, "_table", _prefix_table(self, self.period))

    @property
    def period(self) -> int:
        return reduce(lambda a, b: a * b // math.gcd(a, b), (t.interval for t in self.terms), 1)

    def is_leap(self, year: int) -> bool:
        for t in self.terms:
            y = year if t.ignore_start else year - self.start
            if y % t.interval == 0:
                return not t.negated
        return False

    def leap_years_before(self, year: int) -> int:
        return _count_before(self._table, len(self._table) - 1, year)


LeapRule = Union[NoLeap, GregorianLeap, SimpleLeap, CustomPatternLeap]

# Largest lcm we are willing to tabulate for a custom pattern.
MAX_PATTERN_PERIOD = 1_000_000


def parse_pattern(pattern: str) -> Tuple[PatternTerm, ...]:
    terms = []
    for raw in pattern.split(","):
        s = raw.strip()
        if not s:
            continue
        negated = ignore_start = False
        while s and s[0] in "!+":
            if s[0] == "!":
                negated = True
            else:
                ignore_start = True
            s = s[1:].strip()
        try:
            interval = int(s)
        except ValueError:
            raise ConfigurationError(f"bad leap pattern term {raw!r} in {pattern!r}") from None
        if interval <= 0:
            raise ConfigurationError(f"leap pattern intervals must be positive: {pattern!r}")
        terms.append(PatternTerm(interval, negated, ignore_start))
    if not terms:
        raise ConfigurationError(f"empty leap pattern {pattern!r}")
    period = reduce(lambda a, b: a * b // math.gcd(a, b), (t.interval for t in terms), 1)
    if period > MAX_PATTERN_PERIOD:
        raise ConfigurationError(f"leap pattern {pattern!r} repeats every {period} years; too long")
    return tuple(terms)


def _count_before(table: Tuple[int, ...], period: int, year: int) -> int:
    """
    Signed count of leap years between 0 and ``year``:
      #leap in [0, year)  for year >= 0
      -#leap in [year, 0) for year < 0
    so that days_before_year(Y) = Y*base + count*delta holds for every Y.
    """
    q, r = divmod(year, period)
    return q * table[period] + table[r]


def is_leap(year: int, rule: LeapRule) -> bool:
    if isinstance(rule, GregorianLeap):
        y = year - rule.start
        return y % 4 == 0 and (y % 100 != 0 or y % 400 == 0)
    if isinstance(rule, SimpleLeap):
        return (year - rule.start) % rule.interval == 0
    if isinstance(rule, CustomPatternLeap):
        return rule.is_leap(year)
    if isinstance(rule, NoLeap):
        return False
    raise TypeError(f"Unknown leap rule type: {type(rule)}")


def leap_rule_from_dict(data: Optional[Mapping[str, Any]], legacy: Optional[Mapping[str, Any]] = None) -> LeapRule:
    """
    Build a rule from ``leapYearConfig`` ({rule, start, interval, pattern}),
    falling back to the legacy ``years.leapYear`` ({leapStart, leapInterval}).
    """
    if data:
        rule = str(data.get("rule", "none")).lower()
        start = int(data.get("start", 0) or 0)
        if rule == "gregorian":
            return GregorianLeap(start=start)
        if rule == "simple":
            return SimpleLeap(interval=int(data.get("interval", 0) or 0), start=start)
        if rule == "custom":
            pattern = data.get("pattern")
            if not pattern:
                raise ConfigurationError("custom leap rule needs a pattern")
            return CustomPatternLeap(pattern=str(pattern), start=start)
        if rule == "none":
            return NoLeap()
        raise ConfigurationError(f"unknown leap rule {rule!r}")
    if legacy and legacy.get("leapInterval"):
        return SimpleLeap(interval=int(legacy["leapInterval"]), start=int(legacy.get("leapStart", 0) or 0))
    return NoLeap()


def leap_rule_to_dict(rule: LeapRule) -> Optional[dict]:
    if isinstance(rule, GregorianLeap):
        return {"rule": "gregorian", "start": rule.start}
    if isinstance(rule, SimpleLeap):
        return {"rule": "simple", "interval": rule.interval, "start": rule.start}
    if isinstance(rule, CustomPatternLeap):
        return {"rule": "custom", "pattern": rule.pattern, "start": rule.start}
    return None
