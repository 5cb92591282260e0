"""
polycal.recurrence.matcher
--------------------------
The recurrence predicate: does an event occur on a candidate date?

Evaluation is a short-circuiting conjunction over absolute day numbers:

  1. range gate   start <= day, day <= repeat_end, occurrence index < max
  2. gates        weekday / weekNumber, when set, independent of kind
  3. kind         dispatched on the closed rule union
  4. conditions   field comparisons, all of which must hold

An event with an ``end_date`` lasts ``end - start + 1`` days; it matches a
candidate covered by any occurrence, so each matching call looks back over
the span for an occurrence start.

Malformed descriptors (unknown kind, bad moon index, zero interval, missing
or cyclic links) never raise: they resolve to no match and are logged at
debug level. The matcher holds no mutable state; the only shared state is
the caller's OccurrenceMemo.
"""

from __future__ import annotations

import logging
import math
from typing import FrozenSet, List, Mapping, Optional, Tuple

from ..core.types import Components
from ..engines.calendar import CalendarEngine
from . import seeded
from .conditions import ConditionEvaluator
from .memo import OccurrenceMemo, RandomOccurrences
from .types import (
    CheckInterval,
    ComputedRule,
    EventDescriptor,
    LeapYearOnly,
    LinkedRule,
    MoonAfter,
    MoonCondition,
    MoonRule,
    NeverRule,
    NthWeekday,
    PeriodicRule,
    RandomRule,
    RangePatternRule,
    RepeatKind,
    SeasonalRule,
    SeasonOffset,
    SeasonTrigger,
    UnknownRule,
    WeekNumber,
    bound_contains,
)

logger = logging.getLogger(__name__)

# Occurrence index unknown without scanning from the start.
_UNINDEXED = -1

# Upper bound on days walked by occurrences_in_range.
MAX_RANGE_DAYS = 100_000


class RecurrenceMatcher:
    def __init__(
        self,
        engine: CalendarEngine,
        memo: Optional[OccurrenceMemo] = None,
        events: Optional[Mapping[str, EventDescriptor]] = None,
    ):
        self.engine = engine
        self.conv = engine.converter
        self.memo = memo
        self.events = dict(events or {})
        self.conditions = ConditionEvaluator(engine)

    # ---------------------------------------------------------
    # Public
    # ---------------------------------------------------------

    def is_recurring_match(self, event: EventDescriptor, candidate: Components) -> bool:
        return self._matches(event, self.conv.absolute_day(candidate), frozenset())

    def occurrences_in_range(
        self,
        event: EventDescriptor,
        range_start: Components,
        range_end: Components,
        limit: int = 100,
    ) -> List[Components]:
        """Dates in [range_start, range_end] on which an occurrence of ``event`` begins."""
        conv = self.conv
        lo, hi = conv.absolute_day(range_start), conv.absolute_day(range_end)
        hi = min(hi, lo + MAX_RANGE_DAYS)
        step = 1
        if isinstance(event.rule, PeriodicRule) and event.rule.kind is RepeatKind.DAILY \
                and event.rule.interval > 0 and event.weekday is None and event.week_number is None:
            step = event.rule.interval
            start = conv.absolute_day(event.start_date)
            if lo > start:
                lo += (-(lo - start)) % step
            else:
                lo = start

        out: List[Components] = []
        for day in range(lo, hi + 1, step):
            if self._starts(event, day, frozenset()):
                out.append(conv.components_from_day(day))
                if len(out) >= limit:
                    break
        return out

    # ---------------------------------------------------------
    # Evaluation
    # ---------------------------------------------------------

    def _matches(self, event: EventDescriptor, day: int, seen: FrozenSet[str]) -> bool:
        rule = event.rule
        if isinstance(rule, UnknownRule):
            logger.debug("event %r: %s %r, no match", event.id, rule.reason or "unknown kind", rule.raw_kind)
            return False
        if isinstance(rule, LinkedRule):
            return self._linked(event, rule, day, seen, span=True)

        start = self.conv.absolute_day(event.start_date)
        span = self._span(event, start)
        if isinstance(rule, NeverRule):
            return start <= day <= start + span and self._conditions_hold(event, start)
        for back in range(span + 1):
            d = day - back
            if d < start:
                break
            if self._starts_on(event, d, start):
                return True
        return False

    def _starts(self, event: EventDescriptor, day: int, seen: FrozenSet[str]) -> bool:
        rule = event.rule
        if isinstance(rule, UnknownRule):
            return False
        if isinstance(rule, LinkedRule):
            return self._linked(event, rule, day, seen, span=False)
        start = self.conv.absolute_day(event.start_date)
        if isinstance(rule, NeverRule):
            return day == start and self._conditions_hold(event, start)
        return self._starts_on(event, day, start)

    def _span(self, event: EventDescriptor, start: int) -> int:
        if event.end_date is None:
            return 0
        return max(self.conv.absolute_day(event.end_date) - start, 0)

    def _linked(self, event: EventDescriptor, rule: LinkedRule, day: int, seen: FrozenSet[str], *, span: bool) -> bool:
        target = self.events.get(rule.event_id)
        if target is None:
            logger.debug("event %r: linked event %r not found, no match", event.id, rule.event_id)
            return False
        if rule.event_id in seen or rule.event_id == event.id:
            logger.debug("event %r: link cycle through %r, no match", event.id, rule.event_id)
            return False
        if event.repeat_end_date is not None and day > self.conv.absolute_day(event.repeat_end_date):
            return False
        seen = seen | {event.id}
        if not self._conditions_hold(event, day):
            return False
        if span:
            return self._matches(target, day - rule.offset_days, seen)
        return self._starts(target, day - rule.offset_days, seen)

    def _starts_on(self, event: EventDescriptor, day: int, start: int) -> bool:
        """An occurrence of a non-linked recurring event begins on ``day``."""
        idx = self._occurs(event, day, start)
        if idx is None:
            return False
        if event.max_occurrences:
            if idx == _UNINDEXED:
                idx = self._count_before(event, day, start, event.max_occurrences)
            return idx < event.max_occurrences
        return True

    def _occurs(self, event: EventDescriptor, day: int, start: int) -> Optional[int]:
        if day < start:
            return None
        if event.repeat_end_date is not None and day > self.conv.absolute_day(event.repeat_end_date):
            return None
        c = self.conv.components_from_day(day)
        if not self._gates(event, c):
            return None
        idx = self._rule_index(event, c, day)
        if idx is None or not event.conditions:
            return idx
        return _UNINDEXED if self.conditions.all_hold(event.conditions, c, day) else None

    def _conditions_hold(self, event: EventDescriptor, day: int) -> bool:
        if not event.conditions:
            return True
        return self.conditions.all_hold(event.conditions, self.conv.components_from_day(day), day)

    def _count_before(self, event: EventDescriptor, day: int, start: int, limit: int) -> int:
        n = 0
        for d in range(start, day):
            if self._occurs(event, d, start) is not None:
                n += 1
                if n >= limit:
                    break
        return n

    # ---------------------------------------------------------
    # Gates
    # ---------------------------------------------------------

    def _week_number_ok(self, wn: WeekNumber, c: Components) -> bool:
        if not self.conv.is_weekday_counted(c):
            return False
        nth, nth_end = self.conv.nth_weekday(c, wn.scope)
        if wn.value > 0:
            return nth == wn.value
        if wn.value < 0:
            return nth_end == wn.value
        return False

    def _gates(self, event: EventDescriptor, c: Components) -> bool:
        conv = self.conv
        if event.weekday is not None:
            if not conv.is_weekday_counted(c) or conv.day_of_week(c) != event.weekday:
                return False
        if event.week_number is not None and not self._week_number_ok(event.week_number, c):
            return False
        return True

    # ---------------------------------------------------------
    # Kinds
    # ---------------------------------------------------------

    def _rule_index(self, event: EventDescriptor, c: Components, day: int) -> Optional[int]:
        rule = event.rule
        if isinstance(rule, PeriodicRule):
            idx = self._periodic(event, rule, c, day)
            gated = event.weekday is not None or event.week_number is not None
            if idx is not None and gated and rule.kind is not RepeatKind.WEEK_OF_MONTH:
                return _UNINDEXED
            return idx
        if isinstance(rule, MoonRule):
            return self._moon(event, rule.conditions, day)
        if isinstance(rule, SeasonalRule):
            return self._seasonal(rule, c)
        if isinstance(rule, RandomRule):
            return self._random(event, rule, day)
        if isinstance(rule, RangePatternRule):
            ok = (
                bound_contains(rule.year, c.year)
                and bound_contains(rule.month, c.month)
                and bound_contains(rule.day_of_month, c.day_of_month)
            )
            return _UNINDEXED if ok else None
        if isinstance(rule, ComputedRule):
            return _UNINDEXED if self._computed(event, rule, c, day) else None
        logger.debug("event %r: rule %r cannot recur, no match", event.id, rule)
        return None

    def _periodic(self, event: EventDescriptor, rule: PeriodicRule, c: Components, day: int) -> Optional[int]:
        conv = self.conv
        k = rule.interval
        if k <= 0:
            logger.debug("event %r: repeat interval %r, no match", event.id, k)
            return None
        s = conv.start_of_day(event.start_date)

        if rule.kind is RepeatKind.DAILY:
            diff = day - conv.absolute_day(s)
            return diff // k if diff % k == 0 else None

        if rule.kind is RepeatKind.WEEKLY:
            if conv.day_of_week(c) != conv.day_of_week(s):
                return None
            if conv.is_weekday_counted(s) and not conv.is_weekday_counted(c):
                return None
            weeks = (conv.counting_day(c) - conv.counting_day(s)) // conv.n_week
            return weeks // k if weeks % k == 0 else None

        if rule.kind is RepeatKind.MONTHLY:
            months = conv.months_between(s, c)
            if months < 0 or months % k:
                return None
            last = conv.days_in_month(c.month, c.year) - 1
            return months // k if c.day_of_month == min(s.day_of_month, last) else None

        if rule.kind is RepeatKind.YEARLY:
            years = c.year - s.year
            if years < 0 or years % k or c.month != s.month:
                return None
            last = conv.days_in_month(c.month, c.year) - 1
            return years // k if c.day_of_month == min(s.day_of_month, last) else None

        if rule.kind is RepeatKind.WEEK_OF_MONTH:
            months = conv.months_between(s, c)
            if months < 0 or months % k:
                return None
            # without explicit gates, repeat the start's weekday and its nth slot
            if event.weekday is None and conv.day_of_week(c) != conv.day_of_week(s):
                return None
            if event.week_number is None:
                if not conv.is_weekday_counted(c) or conv.nth_weekday(c)[0] != conv.nth_weekday(s)[0]:
                    return None
            return months // k

        raise TypeError(f"Unknown periodic kind: {rule.kind!r}")

    def _moon_position(self, event: EventDescriptor, moon_index: int, day: int) -> Optional[float]:
        pos = self.engine.moons.moon_position(moon_index, day * self.conv.spd)
        if pos is None:
            logger.debug("event %r: moon index %r out of range, no match", event.id, moon_index)
        return pos

    def _moon(self, event: EventDescriptor, conditions: Tuple[MoonCondition, ...], day: int) -> Optional[int]:
        if not conditions:
            logger.debug("event %r: moon rule without conditions, no match", event.id)
            return None
        for cond in conditions:
            pos = self._moon_position(event, cond.moon_index, day)
            if pos is None or not cond.contains(pos):
                return None
        return _UNINDEXED

    def _seasonal(self, rule: SeasonalRule, c: Components) -> Optional[int]:
        seasons = self.engine.seasons
        info = seasons.get_current_season(self.conv.day_of_year(c))
        if info is None:
            return None
        allowed = {seasons.find(s) for s in rule.seasons}
        if info.index not in allowed:
            return None
        if rule.trigger is SeasonTrigger.FIRST_DAY and info.day_in_season != 0:
            return None
        if rule.trigger is SeasonTrigger.LAST_DAY and info.day_in_season != info.length - 1:
            return None
        return _UNINDEXED

    def _random(self, event: EventDescriptor, rule: RandomRule, day: int) -> Optional[int]:
        if not 0.0 <= rule.probability <= 1.0:
            logger.debug("event %r: probability %r outside [0, 1], no match", event.id, rule.probability)
            return None
        return _UNINDEXED if day in self._random_days(event, rule, day) else None

    def _random_days(self, event: EventDescriptor, rule: RandomRule, day: int) -> RandomOccurrences:
        conv = self.conv
        key = (event.id, str(rule.seed))
        cached = self.memo.get(key) if self.memo is not None else None
        if cached is not None and cached.covers(day):
            return cached

        year = conv.year_of_day(day)
        first, last = conv.days_before_year(year), conv.days_before_year(year + 1) - 1
        # grow a neighbouring window, start afresh for a distant one
        if cached is not None and cached.first_day - 1 <= last + conv.base and first - conv.base <= cached.last_day + 1:
            first, last = min(first, cached.first_day), max(last, cached.last_day)
        occ = seeded.derive(rule, conv, event.start_date, first, last)
        if self.memo is not None:
            self.memo.put(key, occ)
        return occ

    # ---- computed ------------------------------------------------

    def _computed(self, event: EventDescriptor, rule: ComputedRule, c: Components, day: int) -> bool:
        f = rule.formula
        conv = self.conv
        if isinstance(f, NthWeekday):
            if f.n == 0 or (f.month is not None and c.month != f.month):
                return False
            if not conv.is_weekday_counted(c) or conv.day_of_week(c) != f.weekday:
                return False
            nth, nth_end = conv.nth_weekday(c)
            return nth == f.n if f.n > 0 else nth_end == f.n
        if isinstance(f, LeapYearOnly):
            return conv.is_leap_year(c.year) and c.month == f.month and c.day_of_month == f.day_of_month
        if isinstance(f, SeasonOffset):
            return self._season_offset(f, c, day)
        if isinstance(f, MoonAfter):
            return any(self._moon_after_day(event, f, y) == day for y in (c.year, c.year - 1))
        logger.debug("event %r: unknown formula %r, no match", event.id, f)
        return False

    def _season_offset(self, f: SeasonOffset, c: Components, day: int) -> bool:
        conv = self.conv
        idx = self.engine.seasons.find(f.season)
        if idx is None:
            return False
        s = self.engine.model.seasons[idx]
        for y in (c.year - 1, c.year, c.year + 1):
            if f.edge == "end":
                edge = conv.days_before_year(y + (1 if s.wraps else 0)) + s.day_end
            else:
                edge = conv.days_before_year(y) + s.day_start
            if edge + f.offset == day:
                return True
        return False

    def _moon_after_day(self, event: EventDescriptor, f: MoonAfter, year: int) -> Optional[int]:
        conv = self.conv
        moons = self.engine.model.moons
        if not 0 <= f.moon_index < len(moons):
            logger.debug("event %r: moon index %r out of range, no match", event.id, f.moon_index)
            return None
        cond = MoonCondition(f.moon_index, f.phase_start, f.phase_end)
        anchor = conv.days_before_year(year) + f.after_day_of_year
        found = None
        for k in range(math.ceil(moons[f.moon_index].cycle_length) + 1):
            pos = self.engine.moons.moon_position(f.moon_index, (anchor + k) * conv.spd)
            if cond.contains(pos):
                found = anchor + k
                break
        if found is None or f.weekday is None:
            return found
        # strictly after, skipping days outside the weekday cycle
        for k in range(1, 2 * conv.n_week + conv.festivals.non_counting_in_year(True) + 2):
            c = conv.components_from_day(found + k)
            if conv.is_weekday_counted(c) and conv.day_of_week(c) == f.weekday:
                return found + k
        return None


# ============================================================
# Functional surface
# ============================================================

def is_recurring_match(
    event: EventDescriptor,
    candidate: Components,
    engine: CalendarEngine,
    *,
    memo: Optional[OccurrenceMemo] = None,
    events: Optional[Mapping[str, EventDescriptor]] = None,
) -> bool:
    return RecurrenceMatcher(engine, memo, events).is_recurring_match(event, candidate)


def occurrences_in_range(
    event: EventDescriptor,
    range_start: Components,
    range_end: Components,
    engine: CalendarEngine,
    *,
    limit: int = 100,
    memo: Optional[OccurrenceMemo] = None,
    events: Optional[Mapping[str, EventDescriptor]] = None,
) -> List[Components]:
    return RecurrenceMatcher(engine, memo, events).occurrences_in_range(event, range_start, range_end, limit)


_UNITS = {
    RepeatKind.DAILY: "day",
    RepeatKind.WEEKLY: "week",
    RepeatKind.MONTHLY: "month",
    RepeatKind.YEARLY: "year",
    RepeatKind.WEEK_OF_MONTH: "month",
}


_CHECK_UNITS = {CheckInterval.DAILY: "day", CheckInterval.WEEKLY: "week", CheckInterval.MONTHLY: "month"}


def _ordinal(n: int) -> str:
    if n == -1:
        return "last"
    if n < 0:
        return f"{_ordinal(-n)} to last"
    suffix = "th" if 10 <= n % 100 <= 20 else {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def describe_recurrence(event: EventDescriptor) -> str:
    """Short human-readable summary, e.g. "Every 2 weeks until 3/5/1492"."""
    rule = event.rule
    if isinstance(rule, NeverRule):
        return "Does not repeat"
    if isinstance(rule, PeriodicRule):
        unit = _UNITS[rule.kind]
        n = rule.interval
        text = f"Every {unit}" if n == 1 else f"Every {n} {unit}s"
        if rule.kind is RepeatKind.WEEK_OF_MONTH:
            text += " on the same week and weekday"
    elif isinstance(rule, MoonRule):
        parts = [f"moon {c.moon_index} in {c.phase_start:g}-{c.phase_end:g}" for c in rule.conditions]
        text = "When " + " and ".join(parts) if parts else "Never (no moon conditions)"
    elif isinstance(rule, SeasonalRule):
        seasons = ", ".join(str(s) for s in rule.seasons)
        lead = {SeasonTrigger.ENTIRE: "Every day of", SeasonTrigger.FIRST_DAY: "First day of",
                SeasonTrigger.LAST_DAY: "Last day of"}[rule.trigger]
        text = f"{lead} season {seasons}"
    elif isinstance(rule, RandomRule):
        text = f"Randomly ({rule.probability * 100:g}% per {_CHECK_UNITS[rule.check_interval]})"
    elif isinstance(rule, LinkedRule):
        sign = "+" if rule.offset_days >= 0 else "-"
        text = f"Linked to {rule.event_id} ({sign}{abs(rule.offset_days)} days)"
    elif isinstance(rule, RangePatternRule):
        text = "On dates matching a range pattern"
    elif isinstance(rule, ComputedRule):
        f = rule.formula
        if isinstance(f, NthWeekday):
            text = f"The {_ordinal(f.n)} weekday {f.weekday} of " + ("every month" if f.month is None else f"month {f.month + 1}")
        elif isinstance(f, LeapYearOnly):
            text = f"On {f.month + 1}/{f.day_of_month + 1} in leap years"
        elif isinstance(f, SeasonOffset):
            text = f"{f.offset:+d} days from the {f.edge} of season {f.season}"
        else:
            text = f"After moon {f.moon_index} reaches {f.phase_start:g}-{f.phase_end:g}"
    else:
        return "Unrecognized recurrence"

    if event.conditions:
        text += " where " + " and ".join(
            f"{c.field.value} {c.op.value} {c.value}" + (f" (offset {c.offset})" if c.offset else "")
            for c in event.conditions
        )
    if event.repeat_end_date is not None:
        e = event.repeat_end_date
        text += f" until {e.month + 1}/{e.day_of_month + 1}/{e.year}"
    if event.max_occurrences:
        text += f" ({event.max_occurrences} times)"
    return text
