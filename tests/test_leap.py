# tests/test_leap.py

import pytest

from polycal.core.errors import ConfigurationError
from polycal.engines.leap import (
    CustomPatternLeap,
    GregorianLeap,
    NoLeap,
    SimpleLeap,
    is_leap,
    leap_rule_from_dict,
    leap_rule_to_dict,
)


def _brute_leap_years_before(rule, year):
    if year >= 0:
        return sum(1 for y in range(0, year) if is_leap(y, rule))
    return -sum(1 for y in range(year, 0) if is_leap(y, rule))


def test_gregorian_known_years():
    rule = GregorianLeap()
    assert is_leap(2000, rule)
    assert is_leap(2004, rule)
    assert not is_leap(2100, rule)
    assert not is_leap(1900, rule)
    assert not is_leap(2023, rule)
    # astronomical numbering: year 0 is 1 BC, a leap year
    assert is_leap(0, rule)
    assert is_leap(-4, rule)
    assert not is_leap(-100, rule)


def test_simple_every_fourth_from_start():
    rule = SimpleLeap(interval=4, start=0)
    for y in range(-20, 21):
        assert is_leap(y, rule) == (y % 4 == 0)

    shifted = SimpleLeap(interval=4, start=1)
    assert [y for y in range(0, 12) if is_leap(y, shifted)] == [1, 5, 9]


def test_custom_pattern_matches_gregorian():
    greg = GregorianLeap()
    custom = CustomPatternLeap("400,!100,4")
    for y in range(-800, 2401):
        assert is_leap(y, custom) == is_leap(y, greg), y


def test_custom_pattern_plus_ignores_start():
    rule = CustomPatternLeap("4,+10", start=1)
    assert is_leap(5, rule)          # (5 - 1) % 4 == 0
    assert is_leap(10, rule)         # raw 10 % 10 == 0
    assert not is_leap(4, rule)
    assert not is_leap(7, rule)


@pytest.mark.parametrize(
    "rule",
    [
        NoLeap(),
        GregorianLeap(),
        GregorianLeap(start=3),
        SimpleLeap(interval=4),
        SimpleLeap(interval=7, start=2),
        CustomPatternLeap("400,!100,4"),
        CustomPatternLeap("!12,3", start=5),
    ],
)
def test_leap_years_before_is_signed_count(rule):
    for year in list(range(-450, 450, 7)) + [-1, 0, 1, 399, 400, 401, -400, -401]:
        assert rule.leap_years_before(year) == _brute_leap_years_before(rule, year), year


@pytest.mark.parametrize("pattern", ["", "4,x", "4,-3", "0", " , "])
def test_bad_patterns_raise(pattern):
    with pytest.raises(ConfigurationError):
        CustomPatternLeap(pattern)


def test_pattern_period_too_long():
    with pytest.raises(ConfigurationError):
        CustomPatternLeap("999983,999979")


def test_simple_interval_must_be_positive():
    with pytest.raises(ConfigurationError):
        SimpleLeap(interval=0)


def test_from_dict_and_back():
    assert leap_rule_from_dict({"rule": "gregorian"}) == GregorianLeap()
    assert leap_rule_from_dict({"rule": "simple", "interval": 4, "start": 2}) == SimpleLeap(4, 2)
    assert leap_rule_from_dict({"rule": "none"}) == NoLeap()
    assert leap_rule_from_dict(None) == NoLeap()

    for rule in (GregorianLeap(start=1), SimpleLeap(5, 3), CustomPatternLeap("!6,2", start=4)):
        assert leap_rule_from_dict(leap_rule_to_dict(rule)) == rule
    assert leap_rule_to_dict(NoLeap()) is None


def test_legacy_config_fallback():
    rule = leap_rule_from_dict(None, {"leapStart": 2, "leapInterval": 4})
    assert rule == SimpleLeap(interval=4, start=2)
    # the newer config wins when both are present
    assert leap_rule_from_dict({"rule": "gregorian"}, {"leapInterval": 4}) == GregorianLeap()


def test_from_dict_errors():
    with pytest.raises(ConfigurationError):
        leap_rule_from_dict({"rule": "lunar"})
    with pytest.raises(ConfigurationError):
        leap_rule_from_dict({"rule": "custom"})


def test_unknown_rule_type():
    with pytest.raises(TypeError):
        is_leap(2000, "gregorian")
