# tests/test_api.py

import json
from concurrent.futures import ThreadPoolExecutor

import pytest

import polycal
from polycal._bootstrap import build_registry
from polycal.cli import main
from polycal.core.types import Components
from polycal.engines.factory import engine_for

from conftest import BASIC


def test_registry_lists_presets():
    assert polycal.list_calendars() == ["gregorian", "harptos", "renescara"]
    info = polycal.calendar_info("gregorian")
    assert info["days_in_week"] == 7
    assert info["leap_rule"]["rule"] == "gregorian"


def test_unknown_calendar():
    with pytest.raises(polycal.UnknownCalendarError):
        polycal.get_calendar("julian-ish")
    with pytest.raises(KeyError):
        polycal.days_in_year(2024, "julian-ish")


def test_register_calendar(monkeypatch):
    monkeypatch.setattr(polycal.api, "_registry", build_registry())
    polycal.register_calendar("test-basic", BASIC, overwrite=True)
    assert "test-basic" in polycal.list_calendars()
    assert polycal.days_in_year(7, "test-basic") == 360
    with pytest.raises(KeyError):
        polycal.register_calendar("test-basic", BASIC)


def test_calendar_refs_agree():
    eng = polycal.get_calendar("gregorian")
    c = Components(2024, 1, 28)
    assert polycal.day_of_week(c, "gregorian") == polycal.day_of_week(c, eng) == polycal.day_of_week(c, eng.model)
    assert polycal.days_in_month(1, 2024, "gregorian") == 29
    assert polycal.is_leap_year(2000, "gregorian")
    assert not polycal.is_leap_year(1900, "gregorian")
    with pytest.raises(TypeError):
        polycal.days_in_year(2024, 42)


def test_engine_cache_per_model():
    model = polycal.load_calendar(BASIC)
    assert engine_for(model) is engine_for(model)
    with ThreadPoolExecutor(max_workers=8) as ex:
        engines = list(ex.map(lambda _: engine_for(model), range(32)))
    assert all(e is engines[0] for e in engines)
    assert engine_for(polycal.load_calendar(BASIC)) is not engines[0]


def test_arithmetic_helpers():
    c = Components(2024, 0, 30)
    assert polycal.add_days(c, 1, "gregorian") == Components(2024, 1, 0)
    assert polycal.add_months(c, 1, "gregorian") == Components(2024, 1, 28)
    assert polycal.add_years(Components(2024, 1, 28), 1, "gregorian") == Components(2025, 1, 27)
    assert polycal.days_between(Components(2024, 0, 0), Components(2025, 0, 0), "gregorian") == 366
    t = polycal.components_to_time(c, "gregorian")
    assert polycal.time_to_components(t, "gregorian") == c
    assert polycal.normalize(Components(2024, 12, 0), "gregorian") == Components(2025, 0, 0)


def test_renescara_day_info():
    info = polycal.day_info(Components(3247, 0, 14), "renescara")
    assert info.festival.name == "Firstlight Festival"
    assert info.weekday_name in [wd.name for wd in polycal.get_model("renescara").weekdays]
    assert info.cycles.text == "Crystallus"
    assert info.era.name == "Second Age"
    assert info.season is not None
    assert info.debug is None

    fest = polycal.find_festival_day(Components(3247, 0, 14, 18), "renescara")
    assert fest.name == "Firstlight Festival"
    assert polycal.find_festival_day(Components(3247, 0, 15), "renescara") is None


def test_explain_is_json():
    out = polycal.explain(Components(2024, 6, 4), "gregorian")
    text = json.dumps(out)
    assert "gregorian" in text
    assert out["weekday"] == "Friday"
    assert out["era"] == "2024 CE"
    assert out["debug"]["days_in_month"] == 31


def test_lookups_by_name():
    assert polycal.get_current_season(0, "gregorian").name == "Winter"
    assert polycal.get_current_era(2024, "gregorian").name == "Common Era"
    assert polycal.format_era_year(1372, "harptos") == "1372 DR"
    assert polycal.get_moon_phase(9, 0, "gregorian") is None
    assert polycal.daylight_hours(100, "renescara") > 0


# ---------------------------------------------------------
# CLI
# ---------------------------------------------------------

def test_cli_day(capsys):
    assert main(["day", "gregorian", "2024", "1", "1"]) == 0
    assert "Monday" in capsys.readouterr().out

    assert main(["day", "gregorian", "2024", "7", "5", "--json"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["weekday"] == "Friday"


def test_cli_time_and_list(capsys):
    assert main(["time", "gregorian", "0"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["year"] == 0 and out["month"] == 0 and out["dayOfMonth"] == 0

    assert main(["list"]) == 0
    assert capsys.readouterr().out.split() == ["gregorian", "harptos", "renescara"]


def test_cli_month_grid(capsys):
    assert main(["month", "--calendar", "harptos", "--year", "1372", "--month", "11"]) == 0
    out = capsys.readouterr().out
    assert "Shieldmeet" in out
    assert "outside the week" in out


def test_cli_recur(tmp_path, capsys):
    path = tmp_path / "event.json"
    path.write_text(json.dumps({
        "id": "thanks",
        "repeat": "computed",
        "startDate": {"year": 2020, "month": 0, "dayOfMonth": 0},
        "computedConfig": {"type": "nthWeekday", "weekday": 3, "n": 4, "month": 10},
    }))
    assert main(["recur", "gregorian", str(path), "--from", "2024", "1", "1", "--to", "2025", "12", "31"]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[1:] == ["2024-11-28", "2025-11-27"]


def test_cli_round_trip(capsys):
    assert main(["diag", "round-trip", "--N", "50", "--calendars", "gregorian,renescara"]) == 0
