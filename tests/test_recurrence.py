# tests/test_recurrence.py

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest

import polycal
from polycal.core.types import Components
from polycal.recurrence.matcher import RecurrenceMatcher, describe_recurrence
from polycal.recurrence.memo import InMemoryOccurrenceMemo
from polycal.recurrence.seeded import derive
from polycal.recurrence.types import (
    CheckInterval,
    ComputedRule,
    Condition,
    ConditionField,
    ConditionOp,
    LinkedRule,
    NthWeekday,
    PeriodicRule,
    RandomRule,
    RepeatKind,
    UnknownRule,
    event_from_dict,
)

from conftest import EIGHT_PHASES, SEASONS


def ev(repeat, start=(0, 0, 0), **extra):
    data = {"id": extra.pop("id", "e1"), "repeat": repeat,
            "startDate": {"year": start[0], "month": start[1], "dayOfMonth": start[2]}}
    data.update(extra)
    return event_from_dict(data)


def d(*ymd):
    return {"year": ymd[0], "month": ymd[1], "dayOfMonth": ymd[2]}


@pytest.fixture
def basic(make_engine):
    return make_engine(
        seasons=SEASONS,
        moons=[{"name": "Test", "cycleLength": 30, "phases": EIGHT_PHASES},
               {"name": "Fast", "cycleLength": 10, "phases": EIGHT_PHASES}],
    )


@pytest.fixture
def match(basic):
    m = RecurrenceMatcher(basic)
    return lambda event, *ymd: m.is_recurring_match(event, Components(*ymd))


# ---------------------------------------------------------
# Loader
# ---------------------------------------------------------

def test_loader_reads_kinds():
    e = ev("random", randomConfig={"probability": 25, "seed": 9, "checkInterval": "weekly"})
    assert e.rule == RandomRule(probability=0.25, seed=9, check_interval=CheckInterval.WEEKLY)

    e = ev("linked", linkedEvent={"noteId": "n7", "offset": -2})
    assert e.rule == LinkedRule("n7", -2)

    e = ev("computed", computedConfig={"type": "nthWeekday", "weekday": 3, "n": 4, "month": 10})
    assert e.rule == ComputedRule(NthWeekday(weekday=3, n=4, month=10))

    e = ev("weekly", repeatInterval=2, maxOccurrences=5, weekNumber={"value": -1, "scope": "year"})
    assert e.rule.kind is RepeatKind.WEEKLY and e.rule.interval == 2
    assert e.max_occurrences == 5
    assert e.week_number.value == -1 and e.week_number.scope == "year"


def test_loader_degrades_to_unknown():
    assert isinstance(ev("fortnightly").rule, UnknownRule)
    assert isinstance(ev("linked").rule, UnknownRule)
    assert isinstance(ev("computed", computedConfig={"type": "easter"}).rule, UnknownRule)
    assert isinstance(ev("seasonal", seasonalConfig={"trigger": "midpoint"}).rule, UnknownRule)
    with pytest.raises(ValueError):
        event_from_dict({"repeat": "daily"})


def test_loader_range_alias_and_one_based_day():
    e = ev("range", rangePattern={"day": [1, 5]})
    assert e.rule.kind is RepeatKind.RANGE_PATTERN
    assert e.rule.day_of_month == (0, 4)


# ---------------------------------------------------------
# Periodic
# ---------------------------------------------------------

def test_never(match):
    e = ev("never", start=(1, 2, 3))
    assert match(e, 1, 2, 3)
    assert not match(e, 1, 2, 4)
    assert not match(e, 2, 2, 3)

    span = ev("never", start=(1, 2, 3), endDate=d(1, 2, 5))
    assert [match(span, 1, 2, x) for x in range(2, 7)] == [False, True, True, True, False]


def test_weekly_every_other_week(match):
    e = ev("weekly", start=(1, 0, 0), repeatInterval=2)
    assert match(e, 1, 0, 0)
    assert match(e, 1, 0, 14)
    assert not match(e, 1, 0, 7)
    assert not match(e, 1, 0, 15)
    assert not match(e, 0, 11, 16)


def test_daily_interval(match):
    e = ev("daily", start=(0, 0, 2), repeatInterval=3)
    assert [x for x in range(12) if match(e, 0, 0, x)] == [2, 5, 8, 11]


def test_zero_interval_is_no_match(match):
    e = replace(ev("daily"), rule=PeriodicRule(RepeatKind.DAILY, 0))
    assert not match(e, 0, 0, 0)


def test_yearly_near_year_end(match):
    e = ev("yearly", start=(1, 11, 27))
    assert match(e, 5, 11, 27)
    assert not match(e, 5, 11, 26)
    assert not match(e, 0, 11, 27)

    e2 = ev("yearly", start=(1, 11, 27), repeatInterval=2)
    assert match(e2, 5, 11, 27)
    assert not match(e2, 4, 11, 27)


def test_monthly_clamps_to_month_end(gregorian):
    m = RecurrenceMatcher(gregorian)
    e = ev("monthly", start=(2024, 0, 30))
    assert m.is_recurring_match(e, Components(2024, 1, 28))
    assert not m.is_recurring_match(e, Components(2024, 1, 27))
    assert m.is_recurring_match(e, Components(2024, 3, 29))
    assert m.is_recurring_match(e, Components(2025, 1, 27))


def test_yearly_leap_day_clamps(gregorian):
    m = RecurrenceMatcher(gregorian)
    e = ev("yearly", start=(2024, 1, 28))
    assert m.is_recurring_match(e, Components(2025, 1, 27))
    assert m.is_recurring_match(e, Components(2028, 1, 28))
    assert not m.is_recurring_match(e, Components(2028, 1, 27))


def test_repeat_end_and_max_occurrences(match):
    e = ev("daily", repeatEndDate=d(0, 0, 4))
    assert match(e, 0, 0, 4)
    assert not match(e, 0, 0, 5)

    e = ev("daily", maxOccurrences=3)
    assert [x for x in range(6) if match(e, 0, 0, x)] == [0, 1, 2]

    # gated occurrences are counted by scanning
    e = ev("daily", weekday=2, maxOccurrences=2)
    assert [x for x in range(30) if match(e, 0, 0, x)] == [2, 9]


def test_multi_day_span(match):
    e = ev("weekly", endDate=d(0, 0, 2))
    assert [x for x in range(12) if match(e, 0, 0, x)] == [0, 1, 2, 7, 8, 9]


# ---------------------------------------------------------
# Gates
# ---------------------------------------------------------

def test_weekday_and_week_number(gregorian):
    m = RecurrenceMatcher(gregorian)
    first_friday = ev("daily", start=(2024, 0, 0), weekday=4, weekNumber=1)
    hits = [x for x in range(31) if m.is_recurring_match(first_friday, Components(2024, 0, x))]
    assert hits == [4]
    assert m.is_recurring_match(first_friday, Components(2024, 1, 1))

    last_friday = ev("daily", start=(2024, 0, 0), weekday=4, weekNumber=-1)
    hits = [x for x in range(31) if m.is_recurring_match(last_friday, Components(2024, 0, x))]
    assert hits == [25]


def test_week_of_month(gregorian):
    m = RecurrenceMatcher(gregorian)
    e = ev("weekOfMonth", start=(2024, 0, 8))     # second Tuesday
    assert m.is_recurring_match(e, Components(2024, 1, 12))
    assert not m.is_recurring_match(e, Components(2024, 1, 5))
    assert m.is_recurring_match(e, Components(2024, 2, 11))


# ---------------------------------------------------------
# Moon / seasonal
# ---------------------------------------------------------

def test_moon_window(match):
    e = ev("moon", moonConditions=[{"moonIndex": 0, "phaseStart": 0.5, "phaseEnd": 0.625}])
    assert [x for x in range(30) if match(e, 0, 0, x)] == [15, 16, 17, 18]


def test_moon_window_wraps(match):
    e = ev("moon", moonConditions=[{"moonIndex": 0, "phaseStart": 0.9, "phaseEnd": 0.1}])
    assert [x for x in range(30) if match(e, 0, 1, x)] == [0, 1, 2, 27, 28, 29]


def test_all_moon_conditions_must_hold(match):
    e = ev("moon", moonConditions=[
        {"moonIndex": 0, "phaseStart": 0.0, "phaseEnd": 0.5},
        {"moonIndex": 1, "phaseStart": 0.0, "phaseEnd": 0.25},
    ])
    assert [x for x in range(15) if match(e, 0, 0, x)] == [0, 1, 2, 10, 11, 12]


def test_bad_moon_index_is_no_match(match, caplog):
    e = ev("moon", moonConditions=[{"moonIndex": 7, "phaseStart": 0.0, "phaseEnd": 1.0}])
    with caplog.at_level(logging.DEBUG, logger="polycal.recurrence.matcher"):
        assert not match(e, 0, 0, 3)
    assert any("moon index" in r.getMessage() for r in caplog.records)
    assert not match(ev("moon"), 0, 0, 3)


def test_seasonal(match):
    winter = ev("seasonal", seasonalConfig={"allowedSeasons": ["Winter"]})
    assert match(winter, 0, 0, 5)
    assert not match(winter, 0, 1, 0)
    assert match(winter, 0, 11, 29)

    first_spring = ev("seasonal", seasonalConfig={"seasonIndex": 1, "trigger": "firstDay"})
    assert match(first_spring, 0, 0, 11)
    assert not match(first_spring, 0, 0, 12)

    last_winter = ev("seasonal", seasonalConfig={"seasonIndex": 0, "trigger": "lastDay"})
    assert [x for x in range(30) if match(last_winter, 0, 0, x)] == [10]


# ---------------------------------------------------------
# Random
# ---------------------------------------------------------

def test_random_is_deterministic(basic):
    e = ev("random", randomConfig={"probability": 30, "seed": 7})
    memo = InMemoryOccurrenceMemo()
    with_memo = RecurrenceMatcher(basic, memo)
    without = RecurrenceMatcher(basic)

    days = [Components(y, m, x) for y in (0, 1) for m in range(12) for x in range(0, 30, 3)]
    a = [with_memo.is_recurring_match(e, c) for c in days]
    b = [without.is_recurring_match(e, c) for c in days]
    c = [with_memo.is_recurring_match(e, c) for c in days]
    assert a == b == c
    assert 0 < sum(a) < len(a)
    assert len(memo) == 1
    assert memo.get(("e1", "7")) is not None


def test_random_derivation_is_window_independent(basic):
    rule = RandomRule(probability=0.4, seed=11)
    start = Components(0, 0, 0)
    wide = derive(rule, basic.converter, start, 0, 719)
    left = derive(rule, basic.converter, start, 0, 400)
    right = derive(rule, basic.converter, start, 300, 719)
    assert wide == derive(rule, basic.converter, start, 0, 719)
    assert set(left.days) | set(right.days) == set(wide.days)


def test_random_extremes(match):
    always = ev("random", randomConfig={"probability": 100})
    never = ev("random", randomConfig={"probability": 0})
    assert all(match(always, 0, 0, x) for x in range(30))
    assert not any(match(never, 0, 0, x) for x in range(30))
    bad = ev("random", randomConfig={"probability": 250})
    assert not match(bad, 0, 0, 0)


def test_random_weekly_units(basic):
    e = ev("random", randomConfig={"probability": 100, "checkInterval": "weekly"})
    m = RecurrenceMatcher(basic)
    assert [x for x in range(30) if m.is_recurring_match(e, Components(0, 0, x))] == [0, 7, 14, 21, 28]


def test_memo_window_moves(basic):
    memo = InMemoryOccurrenceMemo()
    m = RecurrenceMatcher(basic, memo)
    e = ev("random", randomConfig={"probability": 50, "seed": 3})
    m.is_recurring_match(e, Components(0, 5, 0))
    m.is_recurring_match(e, Components(1, 5, 0))
    occ = memo.get(("e1", "3"))
    assert occ.first_day == 0 and occ.last_day == 719

    m.is_recurring_match(e, Components(50, 0, 0))
    occ = memo.get(("e1", "3"))
    assert occ.first_day == 50 * 360 and occ.last_day == 51 * 360 - 1


def test_shared_memo_across_threads(basic):
    e = ev("random", randomConfig={"probability": 40, "seed": 21})
    days = [Components(y, m, x) for y in (0, 1, 5) for m in range(12) for x in range(0, 30, 2)]
    expected = [RecurrenceMatcher(basic).is_recurring_match(e, c) for c in days]

    memo = InMemoryOccurrenceMemo()

    def run(i):
        m = RecurrenceMatcher(basic, memo)
        # each worker walks the days from a different offset so the memo window keeps moving
        order = days[i * 7:] + days[:i * 7]
        got = {c: m.is_recurring_match(e, c) for c in order}
        return [got[c] for c in days]

    with ThreadPoolExecutor(max_workers=8) as ex:
        results = list(ex.map(run, range(16)))
    assert all(r == expected for r in results)
    assert 0 < sum(expected) < len(expected)


# ---------------------------------------------------------
# Linked / range / computed
# ---------------------------------------------------------

def test_linked_offset(basic):
    a = ev("daily", id="A", repeatInterval=3)
    b = ev("linked", id="B", start=(9, 0, 0), linkedEvent={"noteId": "A", "offset": 2})
    m = RecurrenceMatcher(basic, events={"A": a, "B": b})
    assert [x for x in range(10) if m.is_recurring_match(b, Components(0, 0, x))] == [2, 5, 8]


def test_linked_cycle_and_missing(basic):
    a = ev("linked", id="A", linkedEvent={"noteId": "B"})
    b = ev("linked", id="B", linkedEvent={"noteId": "A"})
    m = RecurrenceMatcher(basic, events={"A": a, "B": b})
    assert not m.is_recurring_match(a, Components(0, 0, 0))
    orphan = ev("linked", id="C", linkedEvent={"noteId": "nowhere"})
    assert not m.is_recurring_match(orphan, Components(0, 0, 0))


def test_range_pattern(match):
    e = ev("rangePattern", rangePattern={"year": [2, None], "month": 3, "dayOfMonth": [0, 4]})
    assert match(e, 2, 3, 4)
    assert match(e, 9, 3, 0)
    assert not match(e, 1, 3, 4)
    assert not match(e, 2, 3, 5)
    assert not match(e, 2, 4, 0)


def test_nth_weekday(gregorian):
    m = RecurrenceMatcher(gregorian)
    thanksgiving = ev("computed", start=(2024, 0, 0),
                      computedConfig={"type": "nthWeekday", "weekday": 3, "n": 4, "month": 10})
    assert m.is_recurring_match(thanksgiving, Components(2024, 10, 27))
    assert not m.is_recurring_match(thanksgiving, Components(2024, 10, 20))
    assert m.is_recurring_match(thanksgiving, Components(2025, 10, 26))

    last_monday = ev("computed", start=(2024, 0, 0),
                     computedConfig={"type": "nthWeekday", "weekday": 0, "n": -1, "month": 4})
    assert m.is_recurring_match(last_monday, Components(2024, 4, 26))
    assert not m.is_recurring_match(last_monday, Components(2024, 4, 19))


def test_leap_year_only(gregorian):
    m = RecurrenceMatcher(gregorian)
    e = ev("computed", start=(2000, 0, 0), computedConfig={"type": "leapYearOnly", "month": 1, "dayOfMonth": 28})
    assert m.is_recurring_match(e, Components(2024, 1, 28))
    assert not m.is_recurring_match(e, Components(2023, 2, 0))
    assert not m.is_recurring_match(e, Components(2024, 1, 27))


def test_season_offset(match):
    eve = ev("computed", computedConfig={"type": "seasonOffset", "season": "Spring", "offset": -1})
    assert match(eve, 0, 0, 10)
    assert match(eve, 3, 0, 10)
    assert not match(eve, 0, 0, 11)

    end = ev("computed", computedConfig={"type": "seasonOffset", "season": 0, "edge": "end", "offset": 1})
    assert match(end, 1, 0, 11)


def test_moon_after(make_engine):
    eng = make_engine(moons=[{"name": "Test", "cycleLength": 30, "phases": EIGHT_PHASES}])
    m = RecurrenceMatcher(eng)
    cfg = {"type": "moonAfter", "moonIndex": 0, "phaseStart": 0.5, "phaseEnd": 0.625, "afterDayOfYear": 20}
    plain = ev("computed", computedConfig=cfg)
    assert m.is_recurring_match(plain, Components(0, 1, 15))
    assert m.is_recurring_match(plain, Components(1, 1, 15))
    assert not m.is_recurring_match(plain, Components(0, 0, 15))

    # day 45 is weekday 3: the next weekday 3 is a week later, the next weekday 4 is the day after
    same = ev("computed", computedConfig={**cfg, "weekday": 3})
    assert m.is_recurring_match(same, Components(0, 1, 22))
    assert not m.is_recurring_match(same, Components(0, 1, 15))
    nxt = ev("computed", computedConfig={**cfg, "weekday": 4})
    assert m.is_recurring_match(nxt, Components(0, 1, 16))


def test_unknown_kind_never_matches(match):
    e = ev("fortnightly")
    assert not match(e, 0, 0, 0)
    assert describe_recurrence(e) == "Unrecognized recurrence"


# ---------------------------------------------------------
# Ranges and descriptions
# ---------------------------------------------------------

def test_occurrences_in_range(gregorian):
    e = ev("daily", start=(2024, 0, 0), repeatInterval=7)
    hits = polycal.occurrences_in_range(e, Components(2024, 0, 0), Components(2024, 0, 30), "gregorian")
    assert [c.day_of_month for c in hits] == [0, 7, 14, 21, 28]

    hits = polycal.occurrences_in_range(e, Components(2024, 0, 3), Components(2024, 1, 28), gregorian, limit=2)
    assert [(c.month, c.day_of_month) for c in hits] == [(0, 7), (0, 14)]


def test_occurrences_report_span_starts(basic):
    e = ev("weekly", endDate=d(0, 0, 2))
    hits = RecurrenceMatcher(basic).occurrences_in_range(e, Components(0, 0, 1), Components(0, 0, 20))
    assert [c.day_of_month for c in hits] == [7, 14]


def test_describe_recurrence():
    assert describe_recurrence(ev("never")) == "Does not repeat"
    assert describe_recurrence(ev("weekly", repeatInterval=2)) == "Every 2 weeks"
    assert describe_recurrence(ev("daily")) == "Every day"
    text = describe_recurrence(ev("monthly", repeatEndDate=d(1492, 2, 4), maxOccurrences=3))
    assert text == "Every month until 3/5/1492 (3 times)"
    assert describe_recurrence(ev("random", randomConfig={"probability": 25})) == "Randomly (25% per day)"
    nth = ev("computed", computedConfig={"type": "nthWeekday", "weekday": 0, "n": -1})
    assert describe_recurrence(nth) == "The last weekday 0 of every month"


# ---------------------------------------------------------
# Conditions
# ---------------------------------------------------------

def when(*conditions, repeat="daily", start=(0, 0, 0), **extra):
    return ev(repeat, start=start, conditions=list(conditions), **extra)


def hits(match, event, year=0, month=0):
    return [x for x in range(30) if match(event, year, month, x)]


def test_loader_reads_conditions():
    e = when({"field": "dayOfYear", "op": "%", "value": 3, "offset": 1},
             {"field": "moonPhase", "value": "P4", "value2": 1})
    assert e.conditions == (
        Condition(ConditionField.DAY_OF_YEAR, ConditionOp.MOD, 3, offset=1),
        Condition(ConditionField.MOON_PHASE, ConditionOp.EQ, "P4", value2=1),
    )
    assert isinstance(when({"field": "tide", "op": "==", "value": 1}).rule, UnknownRule)
    assert isinstance(when({"field": "day", "op": "~", "value": 1}).rule, UnknownRule)
    assert isinstance(when({"field": "day", "op": "=="}).rule, UnknownRule)


@pytest.mark.parametrize("op, value, expected", [
    ("==", 3, [3]),
    ("!=", 3, [0, 1, 2, 4, 5, 6, 7, 8, 9]),
    (">=", 7, [7, 8, 9]),
    ("<=", 2, [0, 1, 2]),
    (">", 7, [8, 9]),
    ("<", 2, [0, 1]),
    ("%", 3, [0, 3, 6, 9]),
])
def test_condition_operators(match, op, value, expected):
    e = when({"field": "dayOfYear", "op": op, "value": value})
    assert [x for x in range(10) if match(e, 0, 0, x)] == expected


def test_modulo_offset(match):
    e = when({"field": "dayOfYear", "op": "%", "value": 3, "offset": 1})
    assert [x for x in range(10) if match(e, 0, 0, x)] == [1, 4, 7]
    assert hits(match, when({"field": "dayOfYear", "op": "%", "value": 0})) == []



def test_conditions_narrow_the_kind(match):
    e = when({"field": "day", "op": ">=", "value": 10}, repeat="weekly")
    assert hits(match, e) == [14, 21, 28]
    e = when({"field": "day", "op": ">=", "value": 10}, repeat="weekly", maxOccurrences=2)
    assert hits(match, e) == [14, 21]


def test_week_fields(match):
    second_day1 = when({"field": "weekday", "value": 1}, {"field": "weekNumberInMonth", "value": 2})
    assert hits(match, second_day1) == [8]
    last_day1 = when({"field": "weekday", "value": 1}, {"field": "inverseWeekNumber", "value": -1})
    assert hits(match, last_day1) == [29]

    assert hits(match, when({"field": "weekInMonth", "value": 4})) == [28, 29]
    assert hits(match, when({"field": "weeksBeforeMonthEnd", "value": 0})) == [28, 29]
    assert hits(match, when({"field": "weekInYear", "value": 5}), month=1) == list(range(5, 12))
    assert hits(match, when({"field": "weeksBeforeYearEnd", "value": 0}), month=11) == [27, 28, 29]

    alternate = when({"field": "totalWeek", "op": "%", "value": 2})
    assert hits(match, alternate) == list(range(7)) + list(range(14, 21)) + [28, 29]


def test_day_fields(match):
    assert hits(match, when({"field": "daysBeforeMonthEnd", "op": "<", "value": 2})) == [28, 29]
    e = when({"field": "month", "value": 2}, {"field": "day", "value": 4}, start=(0, 0, 0))
    assert hits(match, e, month=2) == [4]
    assert hits(match, when({"field": "year", "op": ">", "value": 0})) == []
    assert hits(match, when({"field": "year", "op": ">", "value": 0}), year=1) == list(range(30))


def test_season_fields(match):
    assert hits(match, when({"field": "season", "value": "Spring"})) == list(range(11, 30))
    assert hits(match, when({"field": "season", "value": 1}, {"field": "seasonDay", "value": 0})) == [11]
    late_winter = when({"field": "season", "value": "Winter"}, {"field": "seasonPercent", "op": ">=", "value": 50})
    assert hits(match, late_winter) == list(range(1, 11))
    assert hits(match, when({"field": "season", "value": "Monsoon"})) == []


@pytest.mark.parametrize("field, expected", [
    ("isLongestDay", Components(0, 6, 0)),
    ("isShortestDay", Components(0, 0, 0)),
    ("isSpringEquinox", Components(0, 3, 0)),
    ("isAutumnEquinox", Components(0, 9, 0)),
])
def test_solar_markers(basic, field, expected):
    e = when({"field": field, "value": True})
    m = RecurrenceMatcher(basic)
    assert m.occurrences_in_range(e, Components(0, 0, 0), Components(0, 11, 29)) == [expected]


def test_moon_fields(match):
    assert hits(match, when({"field": "moonPhase", "value": "P4"})) == [15, 16, 17, 18]
    assert hits(match, when({"field": "moonPhaseIndex", "value": "P4"})) == [15, 16, 17, 18]
    assert hits(match, when({"field": "moonPhaseIndex", "value": 2, "value2": 1})) == [3, 13, 23]
    assert hits(match, when({"field": "moonPhase", "value": "P0", "value2": 9})) == []
    assert hits(match, when({"field": "moonPhase", "value": 4})) == [15, 16, 17, 18]

    second_new = when({"field": "moonPhaseIndex", "value": 0, "value2": 1},
                      {"field": "moonPhaseCountMonth", "value": 2, "value2": 1})
    assert hits(match, second_new, month=1) == [10, 11]
    third_new = when({"field": "moonPhaseIndex", "value": 0, "value2": 1},
                     {"field": "moonPhaseCountYear", "value": 3, "value2": 1})
    assert hits(match, third_new, year=1) == [20, 21]
    assert hits(match, third_new, year=1, month=1) == []


def test_cycle_era_and_intercalary_fields(make_engine):
    eng = make_engine(
        cycles=[{"name": "Triad", "length": 3, "basedOn": "year", "entries": ["A", "B", "C"]}],
        eras=[{"name": "Old", "startYear": 0, "endYear": 9}, {"name": "New", "startYear": 10}],
        festivals=[{"name": "Feast", "month": 1, "day": 10, "countsForWeekday": False}],
    )
    m = RecurrenceMatcher(eng)
    years = lambda e: [y for y in range(12) if m.is_recurring_match(e, Components(y, 0, 0))]

    assert years(when({"field": "cycle", "value": "B"}, repeat="yearly")) == [1, 4, 7, 10]
    assert years(when({"field": "cycle", "value": 2, "value2": 0}, repeat="yearly")) == [2, 5, 8, 11]
    assert years(when({"field": "era", "value": "New"}, repeat="yearly")) == [10, 11]
    assert years(when({"field": "eraYear", "value": 1}, repeat="yearly")) == [0, 10]
    assert years(when({"field": "eraYear", "op": "%", "value": 5, "offset": 1}, repeat="yearly")) == [0, 5, 10]

    feast = when({"field": "intercalary", "value": True})
    assert [x for x in range(30) if m.is_recurring_match(feast, Components(0, 0, x))] == [9]
    no_weekday = when({"field": "weekday", "op": ">=", "value": 0})
    assert not m.is_recurring_match(no_weekday, Components(0, 0, 9))


def test_conditions_on_never_and_linked(basic):
    once = when({"field": "weekday", "value": 2}, repeat="never", start=(0, 0, 3))
    assert not RecurrenceMatcher(basic).is_recurring_match(once, Components(0, 0, 3))

    a = ev("daily", id="A")
    b = when({"field": "dayOfYear", "op": "%", "value": 4}, repeat="linked", id="B",
             linkedEvent={"noteId": "A", "offset": 0})
    m = RecurrenceMatcher(basic, events={"A": a, "B": b})
    assert [x for x in range(10) if m.is_recurring_match(b, Components(0, 0, x))] == [0, 4, 8]


def test_describe_conditions():
    e = when({"field": "dayOfYear", "op": "%", "value": 3, "offset": 1}, {"field": "season", "value": "Winter"})
    assert describe_recurrence(e) == "Every day where dayOfYear % 3 (offset 1) and season == Winter"
