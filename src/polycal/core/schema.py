"""
polycal.core.schema
-------------------
The serialization boundary every importer targets:

  {name, days:{values, hoursPerDay, minutesPerHour, secondsPerMinute, daysPerYear},
   months:{values}, years:{yearZero, firstWeekday, leapYear}, leapYearConfig,
   seasons:{values}, moons, festivals, eras, cycles, daylight, metadata}

Collections may be given either as ``{"values": [...]}`` or as a bare list.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

from .errors import ConfigurationError
from .model import (
    CalendarModel,
    Cycle,
    Daylight,
    Era,
    Festival,
    Month,
    Moon,
    Season,
    TimeUnits,
    Weekday,
    YearConfig,
)
from ..engines.leap import leap_rule_from_dict, leap_rule_to_dict


def _values(section: Any) -> Sequence[Mapping[str, Any]]:
    if section is None:
        return ()
    if isinstance(section, Mapping):
        return section.get("values") or ()
    return section


def _season_end(start: int, end: int, n_days: int) -> int:
    # importers write a wrapping season's end past the year length
    if n_days <= end < start + n_days:
        return end - n_days
    return end


def load_calendar(data: Mapping[str, Any]) -> CalendarModel:
    """Validate a schema dict and build the immutable model."""
    if not isinstance(data, Mapping):
        raise ConfigurationError("calendar definition must be a mapping")

    days = data.get("days") or {}
    years = data.get("years") or {}

    try:
        months = tuple(Month.from_dict(m, i) for i, m in enumerate(_values(data.get("months"))))
        weekdays = tuple(
            Weekday(
                name=str(w.get("name", f"Day {i + 1}")),
                is_rest_day=bool(w.get("isRestDay", False)),
                abbreviation=w.get("abbreviation"),
            )
            for i, w in enumerate(_values(days))
        )
        time = TimeUnits(
            hours_per_day=int(days.get("hoursPerDay", 24)),
            minutes_per_hour=int(days.get("minutesPerHour", 60)),
            seconds_per_minute=int(days.get("secondsPerMinute", 60)),
        )
        year_cfg = YearConfig(
            year_zero=int(years.get("yearZero", 0) or 0),
            first_weekday=int(years.get("firstWeekday", 0) or 0),
        )
        leap_rule = leap_rule_from_dict(data.get("leapYearConfig"), years.get("leapYear"))
        festivals = tuple(Festival.from_dict(f) for f in _values(data.get("festivals")))
        moons = tuple(Moon.from_dict(m) for m in _values(data.get("moons")))
        n_days = sum(m.length(False) for m in months)
        seasons = tuple(
            Season(
                name=str(s.get("name", "")),
                day_start=int(s["dayStart"]),
                day_end=_season_end(int(s["dayStart"]), int(s["dayEnd"]), n_days),
                color=s.get("color"),
                icon=s.get("icon"),
            )
            for s in _values(data.get("seasons"))
        )
        eras = tuple(
            Era(
                name=str(e.get("name", "")),
                start_year=int(e.get("startYear", 0) or 0),
                end_year=None if e.get("endYear") is None else int(e["endYear"]),
                abbreviation=e.get("abbreviation"),
                format=str(e.get("format", "suffix")),
                template=e.get("template"),
            )
            for e in _values(data.get("eras"))
        )
        cycles = tuple(Cycle.from_dict(c) for c in _values(data.get("cycles")))
        daylight = Daylight.from_dict(data.get("daylight"))
    except ConfigurationError:
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigurationError(f"malformed calendar definition: {e}") from e

    model = CalendarModel(
        name=str(data.get("name", "")),
        months=months,
        weekdays=weekdays,
        time=time,
        years=year_cfg,
        leap_rule=leap_rule,
        festivals=festivals,
        moons=moons,
        seasons=seasons,
        eras=eras,
        cycles=cycles,
        daylight=daylight,
        metadata=dict(data.get("metadata") or {}),
    )

    declared = days.get("daysPerYear")
    if declared is not None and int(declared) != model.days_per_year:
        raise ConfigurationError(
            f"{model.name}: daysPerYear is {declared} but the months add up to {model.days_per_year}"
        )
    return model


def dump_calendar(model: CalendarModel) -> Dict[str, Any]:
    """Inverse of load_calendar (canonical key set)."""
    out: Dict[str, Any] = {
        "name": model.name,
        "days": {
            "values": [
                {"name": w.name, "ordinal": i + 1, "isRestDay": w.is_rest_day,
                 **({"abbreviation": w.abbreviation} if w.abbreviation else {})}
                for i, w in enumerate(model.weekdays)
            ],
            "hoursPerDay": model.time.hours_per_day,
            "minutesPerHour": model.time.minutes_per_hour,
            "secondsPerMinute": model.time.seconds_per_minute,
            "daysPerYear": model.days_per_year,
        },
        "months": {"values": [m.to_dict() for m in model.months]},
        "years": {"yearZero": model.years.year_zero, "firstWeekday": model.years.first_weekday},
        "leapYearConfig": leap_rule_to_dict(model.leap_rule),
        "festivals": [
            {"name": f.name, "month": f.month + 1, "day": f.day_of_month + 1,
             "countsForWeekday": f.counts_for_weekday, "leapYearOnly": f.leap_year_only}
            for f in model.festivals
        ],
        "moons": [_dump_moon(m) for m in model.moons],
        "seasons": {"values": [
            {"name": s.name, "dayStart": s.day_start, "dayEnd": s.day_end, "color": s.color, "icon": s.icon}
            for s in model.seasons
        ]},
        "eras": [
            {"name": e.name, "startYear": e.start_year, "endYear": e.end_year,
             "abbreviation": e.abbreviation, "format": e.format, "template": e.template}
            for e in model.eras
        ],
        "cycles": [
            {"name": c.name, "length": c.length, "offset": c.offset, "basedOn": c.based_on.value,
             "entries": [{"name": n} for n in c.entries]}
            for c in model.cycles
        ],
        "daylight": {
            "enabled": model.daylight.enabled,
            "latitude": model.daylight.latitude,
            "shortestDay": model.daylight.shortest_day,
            "longestDay": model.daylight.longest_day,
            "winterSolsticeDay": model.daylight.winter_solstice_day,
            "summerSolsticeDay": model.daylight.summer_solstice_day,
        },
        "metadata": dict(model.metadata),
    }
    return out


def _dump_moon(m: Moon) -> Dict[str, Any]:
    phases: List[Dict[str, Any]] = []
    for p in m.phases:
        rec: Dict[str, Any] = {"name": p.name, "start": p.start, "end": p.end}
        for k in ("icon", "rising", "fading"):
            if getattr(p, k) is not None:
                rec[k] = getattr(p, k)
        phases.append(rec)
    return {
        "name": m.name,
        "cycleLength": m.cycle_length,
        "cycleDayAdjust": m.cycle_day_adjust,
        "referenceDate": {
            "year": m.reference_date.year,
            "month": m.reference_date.month,
            "dayOfMonth": m.reference_date.day_of_month,
        },
        "phases": phases,
        "color": m.color,
        "hidden": m.hidden,
    }
