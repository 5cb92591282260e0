# tests/conftest.py

import copy

import pytest

import polycal


# 12 x 30-day months, 7-day week, no leap years: 360 days.
BASIC = {
    "name": "basic",
    "days": {
        "values": [{"name": f"Day{i}"} for i in range(7)],
        "hoursPerDay": 24,
        "minutesPerHour": 60,
        "secondsPerMinute": 60,
    },
    "months": {"values": [{"name": f"M{i + 1}", "ordinal": i + 1, "days": 30} for i in range(12)]},
    "years": {"yearZero": 0, "firstWeekday": 0},
}

SEASONS = {
    "values": [
        {"name": "Winter", "dayStart": 350, "dayEnd": 10},
        {"name": "Spring", "dayStart": 11, "dayEnd": 100},
        {"name": "Summer", "dayStart": 101, "dayEnd": 200},
        {"name": "Autumn", "dayStart": 201, "dayEnd": 349},
    ]
}

EIGHT_PHASES = [{"name": f"P{i}", "start": i / 8, "end": (i + 1) / 8} for i in range(8)]


@pytest.fixture
def make_calendar():
    """Build a schema dict from BASIC with top-level keys replaced."""
    def build(**overrides):
        data = copy.deepcopy(BASIC)
        data.update(copy.deepcopy(overrides))
        return data
    return build


@pytest.fixture
def make_engine(make_calendar):
    def build(**overrides):
        return polycal.make_engine(make_calendar(**overrides))
    return build


@pytest.fixture
def gregorian():
    return polycal.get_calendar("gregorian")
