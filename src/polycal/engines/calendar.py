"""
polycal.engines.calendar
------------------------
The Orchestrator. Binds one CalendarModel to the converter and every
derived resolver (festivals, moons, seasons, eras, cycles, daylight).

All state is built in __init__ from the immutable model; afterwards every
method is a pure function of its arguments, so one engine may be shared by
any number of concurrent callers.
"""

from __future__ import annotations

from typing import Any, Dict, List

from ..core.model import CalendarModel
from ..core.types import Components, DayInfo
from .converter import Number, TimeConverter
from .daylight import DaylightModel
from .intervals import CycleResolver, EraResolver, SeasonResolver
from .leap import leap_rule_to_dict
from .moon import MoonPhaseCalculator


class CalendarEngine:
    def __init__(self, model: CalendarModel):
        self.model = model
        self.converter = TimeConverter(model)
        self.festivals = self.converter.festivals
        self.moons = MoonPhaseCalculator(self.converter)
        self.seasons = SeasonResolver(model)
        self.eras = EraResolver(model)
        self.cycles = CycleResolver(self.converter, self.eras)
        self.daylight = DaylightModel(self.converter)

    @property
    def name(self) -> str:
        return self.model.name

    def info(self) -> Dict[str, Any]:
        m = self.model
        return {
            "name": m.name,
            "months": [mo.name for mo in m.months],
            "days_in_week": m.days_in_week,
            "days_per_year": m.days_per_year,
            "leap_days_per_year": m.leap_days_per_year,
            "leap_rule": leap_rule_to_dict(m.leap_rule),
            "seconds_per_day": m.seconds_per_day,
            "festivals": len(m.festivals),
            "moons": [mo.name for mo in m.moons],
            "seasons": [s.name for s in m.seasons],
            "eras": [e.name for e in m.eras],
            "cycles": [c.name for c in m.cycles],
            "daylight": self.daylight.mode,
        }

    # ---------------------------------------------------------
    # Day-level views
    # ---------------------------------------------------------

    def day_info(self, c: Components, *, debug: bool = False) -> DayInfo:
        conv = self.converter
        c = conv.normalize(c)
        leap = conv.is_leap_year(c.year)
        doy = conv.day_of_year(c)
        wd = conv.day_of_week(c)
        t_day = conv.absolute_day(c) * conv.spd

        dbg = None
        if debug:
            dbg = {
                "time": conv.components_to_time(c),
                "absolute_day": conv.absolute_day(c),
                "counting_day": conv.counting_day(c),
                "days_in_month": conv.days_in_month(c.month, c.year),
                "days_in_year": conv.days_in_year(c.year),
                "week_of_month": conv.week_of_month(c),
                "week_of_year": conv.week_of_year(c),
            }

        return DayInfo(
            components=c,
            calendar=self.model.name,
            day_of_year=doy,
            weekday=wd,
            weekday_name=self.model.weekdays[wd].name,
            weekday_counted=conv.is_weekday_counted(c),
            is_leap_year=leap,
            festival=self.festivals.find_festival_day(c, leap),
            moons=self.moons.all_moon_phases(t_day),
            season=self.seasons.get_current_season(doy),
            era=self.eras.get_current_era(c.year),
            cycles=self.cycles.get_cycle_values(c) if self.model.cycles else None,
            daylight_hours=self.daylight.daylight_hours(doy),
            debug=dbg,
        )

    def at(self, t: Number, *, debug: bool = False) -> DayInfo:
        return self.day_info(self.converter.time_to_components(t), debug=debug)

    def month_days(self, year: int, month: int) -> List[DayInfo]:
        n = self.converter.days_in_month(month, year)
        return [self.day_info(Components(year, month, d)) for d in range(n)]

    def explain(self, c: Components) -> Dict[str, Any]:
        info = self.day_info(c, debug=True)
        return {
            "engine": self.info(),
            "date": info.components.to_dict(),
            "day_of_year": info.day_of_year,
            "weekday": info.weekday_name,
            "festival": None if info.festival is None else info.festival.name,
            "moons": [
                {"moon": p.moon_name, "phase": p.name, "sub_phase": p.sub_phase_name, "position": p.position}
                for p in info.moons
            ],
            "season": None if info.season is None else info.season.name,
            "era": None if info.era is None else self.eras.format_era_year(info.components.year),
            "cycles": None if info.cycles is None else info.cycles.values,
            "daylight_hours": info.daylight_hours,
            "debug": info.debug,
        }
