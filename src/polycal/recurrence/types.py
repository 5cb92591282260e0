"""
polycal.recurrence.types
------------------------
Event descriptors as a closed tagged union: one frozen rule record per
repeat kind, carrying only the fields that kind uses.

Descriptors arrive as loosely-typed dicts from notes/scheduling data. The
loader is lenient: an unknown kind or a rule whose fields cannot be read
becomes an ``UnknownRule``, which the matcher treats as "no match".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from ..core.types import Components

logger = logging.getLogger(__name__)


class RepeatKind(str, Enum):
    NEVER = "never"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    WEEK_OF_MONTH = "weekOfMonth"
    MOON = "moon"
    SEASONAL = "seasonal"
    RANDOM = "random"
    LINKED = "linked"
    RANGE_PATTERN = "rangePattern"
    COMPUTED = "computed"


PERIODIC_KINDS = (
    RepeatKind.DAILY,
    RepeatKind.WEEKLY,
    RepeatKind.MONTHLY,
    RepeatKind.YEARLY,
    RepeatKind.WEEK_OF_MONTH,
)

_KIND_ALIASES = {"range": RepeatKind.RANGE_PATTERN}


# ============================================================
# Rules
# ============================================================

@dataclass(frozen=True)
class NeverRule:
    kind = RepeatKind.NEVER


@dataclass(frozen=True)
class PeriodicRule:
    """daily / weekly / monthly / yearly / weekOfMonth every ``interval`` units."""
    kind: RepeatKind
    interval: int = 1


@dataclass(frozen=True)
class MoonCondition:
    moon_index: int
    phase_start: float
    phase_end: float

    def contains(self, position: float) -> bool:
        if self.phase_start <= self.phase_end:
            return self.phase_start <= position < self.phase_end
        # window wraps through the new moon
        return position >= self.phase_start or position < self.phase_end


@dataclass(frozen=True)
class MoonRule:
    conditions: Tuple[MoonCondition, ...]
    kind = RepeatKind.MOON


class SeasonTrigger(str, Enum):
    ENTIRE = "entire"
    FIRST_DAY = "firstDay"
    LAST_DAY = "lastDay"


@dataclass(frozen=True)
class SeasonalRule:
    seasons: Tuple[Union[int, str], ...]
    trigger: SeasonTrigger = SeasonTrigger.ENTIRE
    kind = RepeatKind.SEASONAL


class CheckInterval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


@dataclass(frozen=True)
class RandomRule:
    """Each ``check_interval`` unit after the start occurs with ``probability`` (a fraction)."""
    probability: float
    seed: int = 0
    check_interval: CheckInterval = CheckInterval.DAILY
    kind = RepeatKind.RANDOM


@dataclass(frozen=True)
class LinkedRule:
    event_id: str
    offset_days: int = 0
    kind = RepeatKind.LINKED


# A bound is None (any), an exact value, or an inclusive (min, max) with open ends as None.
RangeBound = Union[None, int, Tuple[Optional[int], Optional[int]]]


def bound_contains(bound: RangeBound, value: int) -> bool:
    if bound is None:
        return True
    if isinstance(bound, tuple):
        lo, hi = bound
        return (lo is None or value >= lo) and (hi is None or value <= hi)
    return value == bound


@dataclass(frozen=True)
class RangePatternRule:
    year: RangeBound = None
    month: RangeBound = None
    day_of_month: RangeBound = None
    kind = RepeatKind.RANGE_PATTERN


# ---- computed formulas ---------------------------------------

@dataclass(frozen=True)
class NthWeekday:
    """The ``n``-th ``weekday`` of a month (negative ``n`` counts from the end)."""
    weekday: int
    n: int
    month: Optional[int] = None


@dataclass(frozen=True)
class LeapYearOnly:
    month: int
    day_of_month: int


@dataclass(frozen=True)
class SeasonOffset:
    season: Union[int, str]
    edge: str = "start"          # "start" | "end"
    offset: int = 0


@dataclass(frozen=True)
class MoonAfter:
    """First day on/after ``after_day_of_year`` whose moon is in the window, then optionally the next ``weekday``."""
    moon_index: int
    phase_start: float
    phase_end: float
    after_day_of_year: int = 0
    weekday: Optional[int] = None


Formula = Union[NthWeekday, LeapYearOnly, SeasonOffset, MoonAfter]


@dataclass(frozen=True)
class ComputedRule:
    formula: Formula
    kind = RepeatKind.COMPUTED


@dataclass(frozen=True)
class UnknownRule:
    raw_kind: str
    reason: str = ""
    kind = None


Rule = Union[
    NeverRule, PeriodicRule, MoonRule, SeasonalRule, RandomRule,
    LinkedRule, RangePatternRule, ComputedRule, UnknownRule,
]


class ConditionField(str, Enum):
    YEAR = "year"
    MONTH = "month"
    DAY = "day"
    DAY_OF_YEAR = "dayOfYear"
    DAYS_BEFORE_MONTH_END = "daysBeforeMonthEnd"
    WEEKDAY = "weekday"
    WEEK_NUMBER_IN_MONTH = "weekNumberInMonth"
    INVERSE_WEEK_NUMBER = "inverseWeekNumber"
    WEEK_IN_MONTH = "weekInMonth"
    WEEK_IN_YEAR = "weekInYear"
    TOTAL_WEEK = "totalWeek"
    WEEKS_BEFORE_MONTH_END = "weeksBeforeMonthEnd"
    WEEKS_BEFORE_YEAR_END = "weeksBeforeYearEnd"
    SEASON = "season"
    SEASON_PERCENT = "seasonPercent"
    SEASON_DAY = "seasonDay"
    IS_LONGEST_DAY = "isLongestDay"
    IS_SHORTEST_DAY = "isShortestDay"
    IS_SPRING_EQUINOX = "isSpringEquinox"
    IS_AUTUMN_EQUINOX = "isAutumnEquinox"
    MOON_PHASE = "moonPhase"
    MOON_PHASE_INDEX = "moonPhaseIndex"
    MOON_PHASE_COUNT_MONTH = "moonPhaseCountMonth"
    MOON_PHASE_COUNT_YEAR = "moonPhaseCountYear"
    CYCLE = "cycle"
    ERA = "era"
    ERA_YEAR = "eraYear"
    INTERCALARY = "intercalary"


class ConditionOp(str, Enum):
    EQ = "=="
    NE = "!="
    GE = ">="
    LE = "<="
    GT = ">"
    LT = "<"
    MOD = "%"


@dataclass(frozen=True)
class Condition:
    """
    ``field op value`` on an occurrence date. ``value2`` picks the moon or
    cycle for those fields; ``offset`` shifts the field before ``%``.
    """
    field: ConditionField
    op: ConditionOp
    value: Any
    value2: Optional[int] = None
    offset: int = 0


@dataclass(frozen=True)
class WeekNumber:
    """nth occurrence of the weekday within the month or the year; negative counts from the end."""
    value: int
    scope: str = "month"         # "month" | "year"


@dataclass(frozen=True)
class EventDescriptor:
    id: str
    start_date: Components
    rule: Rule = NeverRule()
    end_date: Optional[Components] = None
    repeat_end_date: Optional[Components] = None
    max_occurrences: Optional[int] = None
    weekday: Optional[int] = None
    week_number: Optional[WeekNumber] = None
    conditions: Tuple[Condition, ...] = ()
    name: str = ""


# ============================================================
# Loader
# ============================================================

def _date(data: Any) -> Optional[Components]:
    if not data:
        return None
    return Components.from_dict(data)


def _bound(raw: Any) -> RangeBound:
    if raw is None:
        return None
    if isinstance(raw, Sequence) and not isinstance(raw, str):
        lo, hi = raw
        return (None if lo is None else int(lo), None if hi is None else int(hi))
    if isinstance(raw, Mapping):
        lo, hi = raw.get("min"), raw.get("max")
        return (None if lo is None else int(lo), None if hi is None else int(hi))
    return int(raw)


def _shift(bound: RangeBound, by: int) -> RangeBound:
    if bound is None:
        return None
    if isinstance(bound, tuple):
        return tuple(None if b is None else b + by for b in bound)
    return bound + by


def _formula(cfg: Mapping[str, Any]) -> Formula:
    kind = cfg.get("type") or cfg.get("formula")
    if kind == "nthWeekday":
        month = cfg.get("month")
        return NthWeekday(weekday=int(cfg["weekday"]), n=int(cfg["n"]), month=None if month is None else int(month))
    if kind == "leapYearOnly":
        return LeapYearOnly(month=int(cfg["month"]), day_of_month=int(cfg["dayOfMonth"]))
    if kind == "seasonOffset":
        season = cfg["season"]
        edge = str(cfg.get("edge", "start"))
        if edge not in ("start", "end"):
            raise ValueError(f"bad season edge {edge!r}")
        return SeasonOffset(season=season if isinstance(season, str) else int(season), edge=edge,
                            offset=int(cfg.get("offset", 0)))
    if kind == "moonAfter":
        wd = cfg.get("weekday")
        return MoonAfter(
            moon_index=int(cfg["moonIndex"]),
            phase_start=float(cfg["phaseStart"]),
            phase_end=float(cfg["phaseEnd"]),
            after_day_of_year=int(cfg.get("afterDayOfYear", 0)),
            weekday=None if wd is None else int(wd),
        )
    raise ValueError(f"unknown computed formula {kind!r}")


def _condition(cfg: Mapping[str, Any]) -> Condition:
    v2 = cfg.get("value2")
    return Condition(
        field=ConditionField(cfg["field"]),
        op=ConditionOp(cfg.get("op", "==")),
        value=cfg["value"],
        value2=None if v2 is None else int(v2),
        offset=int(cfg.get("offset", 0) or 0),
    )


def _rule(kind: RepeatKind, data: Mapping[str, Any]) -> Rule:
    if kind is RepeatKind.NEVER:
        return NeverRule()
    if kind in PERIODIC_KINDS:
        return PeriodicRule(kind=kind, interval=int(data.get("repeatInterval") or 1))
    if kind is RepeatKind.MOON:
        return MoonRule(tuple(
            MoonCondition(int(c["moonIndex"]), float(c["phaseStart"]), float(c["phaseEnd"]))
            for c in data.get("moonConditions") or ()
        ))
    if kind is RepeatKind.SEASONAL:
        cfg = data.get("seasonalConfig") or {}
        if "allowedSeasons" in cfg:
            seasons = tuple(cfg["allowedSeasons"])
        else:
            seasons = (int(cfg.get("seasonIndex", 0)),)
        return SeasonalRule(seasons=seasons, trigger=SeasonTrigger(cfg.get("trigger", "entire")))
    if kind is RepeatKind.RANDOM:
        cfg = data.get("randomConfig") or {}
        # stored as a percentage
        return RandomRule(
            probability=float(cfg.get("probability", 10)) / 100.0,
            seed=int(cfg.get("seed", 0) or 0),
            check_interval=CheckInterval(cfg.get("checkInterval", "daily")),
        )
    if kind is RepeatKind.LINKED:
        cfg = data.get("linkedEvent") or {}
        return LinkedRule(event_id=str(cfg["noteId"]), offset_days=int(cfg.get("offset", 0) or 0))
    if kind is RepeatKind.RANGE_PATTERN:
        cfg = data.get("rangePattern") or {}
        if "dayOfMonth" in cfg:
            dom = _bound(cfg["dayOfMonth"])
        else:
            dom = _shift(_bound(cfg.get("day")), -1)
        return RangePatternRule(year=_bound(cfg.get("year")), month=_bound(cfg.get("month")), day_of_month=dom)
    if kind is RepeatKind.COMPUTED:
        return ComputedRule(_formula(data.get("computedConfig") or {}))
    raise TypeError(f"Unhandled repeat kind: {kind!r}")


def event_from_dict(data: Mapping[str, Any], event_id: Optional[str] = None) -> EventDescriptor:
    """
    Build a descriptor from note data. Only a missing ``startDate`` is an
    error; everything else degrades to an UnknownRule.
    """
    if not data.get("startDate"):
        raise ValueError("event descriptor needs a startDate")

    raw_kind = str(data.get("repeat") or data.get("repeatKind") or "never")
    try:
        kind = _KIND_ALIASES.get(raw_kind) or RepeatKind(raw_kind)
    except ValueError:
        rule: Rule = UnknownRule(raw_kind, "unknown repeat kind")
    else:
        try:
            rule = _rule(kind, data)
        except (KeyError, TypeError, ValueError) as e:
            logger.debug("repeat rule %r unreadable: %s", raw_kind, e)
            rule = UnknownRule(raw_kind, str(e))

    try:
        conditions = tuple(_condition(c) for c in data.get("conditions") or ())
    except (KeyError, TypeError, ValueError) as e:
        logger.debug("conditions of %r unreadable: %s", raw_kind, e)
        rule, conditions = UnknownRule(raw_kind, f"bad condition: {e}"), ()

    wn = data.get("weekNumber")
    week_number = None
    if isinstance(wn, Mapping):
        week_number = WeekNumber(int(wn["value"]), str(wn.get("scope", "month")))
    elif wn is not None:
        week_number = WeekNumber(int(wn))

    wd = data.get("weekday")
    max_occ = data.get("maxOccurrences")
    return EventDescriptor(
        id=str(event_id or data.get("id") or ""),
        name=str(data.get("name", "")),
        start_date=Components.from_dict(data["startDate"]),
        rule=rule,
        end_date=_date(data.get("endDate")),
        repeat_end_date=_date(data.get("repeatEndDate")),
        max_occurrences=int(max_occ) if max_occ else None,
        weekday=None if wd is None else int(wd),
        week_number=week_number,
        conditions=conditions,
    )
