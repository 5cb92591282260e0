"""
polycal.core.model
------------------
Immutable description of a calendar's shape. Pure data: every record is a
frozen dataclass and the whole model is validated once, at construction.
Behavior lives in polycal.engines.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from .errors import ConfigurationError
from .types import Components
from ..engines.leap import LeapRule, NoLeap, is_leap

logger = logging.getLogger(__name__)

# Tolerance for comparing phase boundaries given as floats.
PHASE_EPS = 1e-9


@dataclass(frozen=True)
class Month:
    name: str
    ordinal: int
    days: int
    leap_days: Optional[int] = None
    starting_weekday: Optional[int] = None
    intercalary: bool = False
    abbreviation: Optional[str] = None

    def length(self, leap: bool) -> int:
        if leap and self.leap_days is not None:
            return self.leap_days
        return self.days

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int) -> "Month":
        leap_days = data.get("leapDays")
        starting = data.get("startingWeekday", data.get("fixedStartingWeekday"))
        return cls(
            name=str(data.get("name", f"Month {index + 1}")),
            ordinal=int(data.get("ordinal", index + 1)),
            days=int(data.get("days", 0) or 0),
            leap_days=None if leap_days is None else int(leap_days),
            starting_weekday=None if starting is None else int(starting),
            intercalary=data.get("type") == "intercalary" or bool(data.get("intercalary", False)),
            abbreviation=data.get("abbreviation"),
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"name": self.name, "ordinal": self.ordinal, "days": self.days}
        if self.leap_days is not None:
            out["leapDays"] = self.leap_days
        if self.starting_weekday is not None:
            out["startingWeekday"] = self.starting_weekday
        if self.intercalary:
            out["type"] = "intercalary"
        if self.abbreviation is not None:
            out["abbreviation"] = self.abbreviation
        return out


@dataclass(frozen=True)
class Weekday:
    name: str
    is_rest_day: bool = False
    abbreviation: Optional[str] = None


@dataclass(frozen=True)
class TimeUnits:
    hours_per_day: int = 24
    minutes_per_hour: int = 60
    seconds_per_minute: int = 60

    @property
    def seconds_per_hour(self) -> int:
        return self.minutes_per_hour * self.seconds_per_minute

    @property
    def seconds_per_day(self) -> int:
        return self.hours_per_day * self.seconds_per_hour


@dataclass(frozen=True)
class YearConfig:
    year_zero: int = 0
    first_weekday: int = 0


@dataclass(frozen=True)
class Festival:
    """A named day. ``month`` and ``day_of_month`` are 0-indexed."""
    name: str
    month: int
    day_of_month: int
    counts_for_weekday: bool = True
    leap_year_only: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Festival":
        # Stored 1-based by importers; with dayOfMonth the record is 0-based throughout.
        if "dayOfMonth" in data:
            month = int(data.get("month", 0))
            dom = int(data["dayOfMonth"])
        else:
            month = int(data.get("month", 1)) - 1
            dom = int(data.get("day", 1)) - 1
        return cls(
            name=str(data.get("name", "")),
            month=month,
            day_of_month=dom,
            counts_for_weekday=bool(data.get("countsForWeekday", True)),
            leap_year_only=bool(data.get("leapYearOnly", False)),
        )


@dataclass(frozen=True)
class MoonPhase:
    name: str
    start: float
    end: float
    icon: Optional[str] = None
    rising: Optional[str] = None
    fading: Optional[str] = None


@dataclass(frozen=True)
class Moon:
    name: str
    cycle_length: float
    phases: Tuple[MoonPhase, ...]
    cycle_day_adjust: float = 0.0
    reference_date: Components = Components(0)
    color: Optional[str] = None
    hidden: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Moon":
        phases = tuple(
            MoonPhase(
                name=str(p.get("name", "")),
                start=float(p.get("start", 0.0)),
                end=float(p.get("end", 1.0)),
                icon=p.get("icon"),
                rising=p.get("rising"),
                fading=p.get("fading"),
            )
            for p in data.get("phases", ())
        )
        ref = data.get("referenceDate") or {}
        return cls(
            name=str(data.get("name", "")),
            cycle_length=float(data.get("cycleLength", 0) or 0),
            phases=tuple(sorted(phases, key=lambda p: p.start)),
            cycle_day_adjust=float(data.get("cycleDayAdjust", 0) or 0),
            reference_date=Components.from_dict(ref).start_of_day(),
            color=data.get("color"),
            hidden=bool(data.get("hidden", False)),
        )


@dataclass(frozen=True)
class Season:
    """Day-of-year window, inclusive at both ends. ``day_end < day_start`` wraps the year."""
    name: str
    day_start: int
    day_end: int
    color: Optional[str] = None
    icon: Optional[str] = None

    @property
    def wraps(self) -> bool:
        return self.day_end < self.day_start

    def contains(self, day_of_year: int) -> bool:
        if self.wraps:
            return day_of_year >= self.day_start or day_of_year <= self.day_end
        return self.day_start <= day_of_year <= self.day_end


@dataclass(frozen=True)
class Era:
    name: str
    start_year: int
    end_year: Optional[int] = None
    abbreviation: Optional[str] = None
    format: str = "suffix"
    template: Optional[str] = None

    def contains(self, year: int) -> bool:
        return year >= self.start_year and (self.end_year is None or year <= self.end_year)

    @property
    def width(self) -> float:
        return float("inf") if self.end_year is None else self.end_year - self.start_year


class CycleBasis(str, Enum):
    YEAR = "year"
    ERA_YEAR = "eraYear"
    MONTH = "month"
    MONTH_DAY = "monthDay"
    DAY = "day"
    YEAR_DAY = "yearDay"


@dataclass(frozen=True)
class Cycle:
    name: str
    length: int
    entries: Tuple[str, ...]
    offset: int = 0
    based_on: CycleBasis = CycleBasis.YEAR

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Cycle":
        entries = tuple(
            str(e.get("name", "")) if isinstance(e, Mapping) else str(e)
            for e in data.get("entries", ())
        )
        try:
            basis = CycleBasis(data.get("basedOn", "year"))
        except ValueError:
            raise ConfigurationError(f"unknown cycle basis {data.get('basedOn')!r}") from None
        return cls(
            name=str(data.get("name", "")),
            length=int(data.get("length", len(entries)) or 0),
            entries=entries,
            offset=int(data.get("offset", 0) or 0),
            based_on=basis,
        )


@dataclass(frozen=True)
class Daylight:
    enabled: bool = False
    latitude: Optional[float] = None
    shortest_day: Optional[float] = None
    longest_day: Optional[float] = None
    winter_solstice_day: Optional[int] = None
    summer_solstice_day: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "Daylight":
        if not data:
            return cls()

        def opt(*keys: str) -> Optional[Any]:
            for k in keys:
                if data.get(k) is not None:
                    return data[k]
            return None

        lat = opt("latitude")
        short = opt("shortestDay")
        long_ = opt("longestDay")
        winter = opt("winterSolsticeDay", "winterSolstice")
        summer = opt("summerSolsticeDay", "summerSolstice")
        return cls(
            enabled=bool(data.get("enabled", False)),
            latitude=None if lat is None else float(lat),
            shortest_day=None if short is None else float(short),
            longest_day=None if long_ is None else float(long_),
            winter_solstice_day=None if winter is None else int(winter),
            summer_solstice_day=None if summer is None else int(summer),
        )


@dataclass(frozen=True, eq=False)
class CalendarModel:
    """
    A validated calendar. Construction raises ConfigurationError on any
    malformed piece; a model that exists is safe to convert with.
    Compared and hashed by identity so engines can be cached per model.
    """
    name: str
    months: Tuple[Month, ...]
    weekdays: Tuple[Weekday, ...]
    time: TimeUnits = TimeUnits()
    years: YearConfig = YearConfig()
    leap_rule: LeapRule = NoLeap()
    festivals: Tuple[Festival, ...] = ()
    moons: Tuple[Moon, ...] = ()
    seasons: Tuple[Season, ...] = ()
    eras: Tuple[Era, ...] = ()
    cycles: Tuple[Cycle, ...] = ()
    daylight: Daylight = Daylight()
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.validate()

    # ---------------------------------------------------------
    # Derived shape
    # ---------------------------------------------------------

    @property
    def days_in_week(self) -> int:
        return len(self.weekdays)

    @property
    def months_per_year(self) -> int:
        return len(self.months)

    @property
    def days_per_year(self) -> int:
        """Length of a common (non-leap) year."""
        return sum(m.days for m in self.months)

    @property
    def leap_days_per_year(self) -> int:
        return sum(m.length(True) for m in self.months)

    @property
    def seconds_per_day(self) -> int:
        return self.time.seconds_per_day

    def is_leap_year(self, year: int) -> bool:
        return is_leap(year, self.leap_rule)

    # ---------------------------------------------------------
    # Validation
    # ---------------------------------------------------------

    def validate(self) -> None:
        if not self.weekdays:
            raise ConfigurationError(f"{self.name}: daysInWeek must be at least 1")
        if not self.months:
            raise ConfigurationError(f"{self.name}: calendar has no months")
        t = self.time
        if min(t.hours_per_day, t.minutes_per_hour, t.seconds_per_minute) <= 0:
            raise ConfigurationError(f"{self.name}: time units must be positive")
        if not 0 <= self.years.first_weekday < self.days_in_week:
            raise ConfigurationError(f"{self.name}: firstWeekday {self.years.first_weekday} outside the week")

        for i, m in enumerate(self.months):
            if m.ordinal != i + 1:
                raise ConfigurationError(f"{self.name}: month ordinals must run 1..n, got {m.ordinal} at {i}")
            if m.days < 0 or (m.leap_days is not None and m.leap_days < 0):
                raise ConfigurationError(f"{self.name}: month {m.name!r} has negative length")
            if m.starting_weekday is not None and not 0 <= m.starting_weekday < self.days_in_week:
                raise ConfigurationError(f"{self.name}: month {m.name!r} starts outside the week")
        if self.days_per_year <= 0:
            raise ConfigurationError(f"{self.name}: a common year must have at least one day")
        if not isinstance(self.leap_rule, NoLeap) and self.leap_days_per_year <= 0:
            raise ConfigurationError(f"{self.name}: a leap year must have at least one day")

        for f in self.festivals:
            if not 0 <= f.month < self.months_per_year:
                raise ConfigurationError(f"{self.name}: festival {f.name!r} in unknown month {f.month + 1}")
            longest = max(self.months[f.month].length(False), self.months[f.month].length(True))
            if not 0 <= f.day_of_month < longest:
                raise ConfigurationError(f"{self.name}: festival {f.name!r} falls outside its month")

        for moon in self.moons:
            self._validate_moon(moon)
        self._validate_seasons()

        for c in self.cycles:
            if c.length <= 0 or not c.entries:
                raise ConfigurationError(f"{self.name}: cycle {c.name!r} needs a positive length and entries")

        for e in self.eras:
            if e.end_year is not None and e.end_year < e.start_year:
                raise ConfigurationError(f"{self.name}: era {e.name!r} ends before it starts")
        self._warn_era_overlaps()

    def _validate_moon(self, moon: Moon) -> None:
        if moon.cycle_length <= 0:
            raise ConfigurationError(f"{self.name}: moon {moon.name!r} needs a positive cycleLength")
        if not moon.phases:
            raise ConfigurationError(f"{self.name}: moon {moon.name!r} has no phases")
        expected = 0.0
        for p in moon.phases:
            if abs(p.start - expected) > PHASE_EPS or p.end <= p.start:
                raise ConfigurationError(
                    f"{self.name}: phases of moon {moon.name!r} must partition [0, 1); "
                    f"phase {p.name!r} spans [{p.start}, {p.end}) after {expected}"
                )
            expected = p.end
        if abs(expected - 1.0) > PHASE_EPS:
            raise ConfigurationError(f"{self.name}: phases of moon {moon.name!r} end at {expected}, not 1")

    def _validate_seasons(self) -> None:
        if not self.seasons:
            return
        n = self.days_per_year
        for s in self.seasons:
            if not (0 <= s.day_start < n and 0 <= s.day_end < n):
                raise ConfigurationError(f"{self.name}: season {s.name!r} lies outside [0, {n})")
        for day in range(n):
            hits = sum(1 for s in self.seasons if s.contains(day))
            if hits != 1:
                raise ConfigurationError(
                    f"{self.name}: day {day} is covered by {hits} seasons; seasons must cover each day once"
                )

    def _warn_era_overlaps(self) -> None:
        for i, a in enumerate(self.eras):
            for b in self.eras[i + 1:]:
                a_end = float("inf") if a.end_year is None else a.end_year
                b_end = float("inf") if b.end_year is None else b.end_year
                if a.start_year <= b_end and b.start_year <= a_end:
                    logger.warning(
                        "%s: eras %r and %r overlap; the narrower one wins inside the overlap",
                        self.name, a.name, b.name,
                    )


