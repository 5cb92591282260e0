from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from .core.engine import CalendarRegistry
from .core.model import CalendarModel, Festival
from .core.types import Components, CycleValues, DayInfo, EraInfo, MoonPhaseInfo, SeasonInfo
from .engines.calendar import CalendarEngine
from .engines.converter import Number
from .engines.factory import engine_for, make_engine as _make_engine
from .recurrence.matcher import RecurrenceMatcher
from .recurrence.memo import OccurrenceMemo
from .recurrence.types import EventDescriptor

# A calendar is named (registry), given as a model, or given as a live engine.
CalendarRef = Union[str, CalendarModel, CalendarEngine]

_registry: Optional[CalendarRegistry] = None

def set_registry(reg: CalendarRegistry) -> None:
    global _registry
    _registry = reg

def _reg() -> CalendarRegistry:
    if _registry is None:
        raise RuntimeError("Calendar registry not initialized")
    return _registry

def _engine(calendar: CalendarRef) -> CalendarEngine:
    if isinstance(calendar, CalendarEngine):
        return calendar
    if isinstance(calendar, CalendarModel):
        return engine_for(calendar)
    if isinstance(calendar, str):
        return _reg().get(calendar)
    raise TypeError(f"Unknown calendar reference type: {type(calendar)}")

# ============================================================
# Registry
# ============================================================

def list_calendars() -> List[str]:
    return _reg().list()

def calendar_info(calendar: CalendarRef) -> Dict[str, Any]:
    return _engine(calendar).info()

def get_calendar(name: str) -> CalendarEngine:
    return _reg().get(name)

def get_model(name: str) -> CalendarModel:
    return _reg().get(name).model

def make_engine(source: Union[CalendarModel, Mapping[str, Any]]) -> CalendarEngine:
    return _make_engine(source)

def register_calendar(name: str, model: Union[CalendarModel, Mapping[str, Any]], *, overwrite: bool = False) -> None:
    _reg().register(name, _make_engine(model), overwrite=overwrite)

# ============================================================
# Conversion
# ============================================================

def components_to_time(components: Components, calendar: CalendarRef) -> Number:
    return _engine(calendar).converter.components_to_time(components)

def time_to_components(t: Number, calendar: CalendarRef) -> Components:
    return _engine(calendar).converter.time_to_components(t)

def normalize(components: Components, calendar: CalendarRef) -> Components:
    return _engine(calendar).converter.normalize(components)

def day_of_week(components: Components, calendar: CalendarRef) -> int:
    return _engine(calendar).converter.day_of_week(components)

def days_in_month(month: int, year: int, calendar: CalendarRef) -> int:
    return _engine(calendar).converter.days_in_month(month, year)

def days_in_year(year: int, calendar: CalendarRef) -> int:
    return _engine(calendar).converter.days_in_year(year)

def is_leap_year(year: int, calendar: CalendarRef) -> bool:
    return _engine(calendar).converter.is_leap_year(year)

def days_between(a: Components, b: Components, calendar: CalendarRef) -> int:
    return _engine(calendar).converter.days_between(a, b)

def add_days(components: Components, days: int, calendar: CalendarRef) -> Components:
    return _engine(calendar).converter.add_days(components, days)

def add_months(components: Components, months: int, calendar: CalendarRef) -> Components:
    return _engine(calendar).converter.add_months(components, months)

def add_years(components: Components, years: int, calendar: CalendarRef) -> Components:
    return _engine(calendar).converter.add_years(components, years)

# ============================================================
# Derived lookups
# ============================================================

def find_festival_day(components: Components, calendar: CalendarRef) -> Optional[Festival]:
    conv = _engine(calendar).converter
    return conv.festivals.find_festival_day(conv.start_of_day(components))

def get_moon_phase(moon_index: int, t: Number, calendar: CalendarRef) -> Optional[MoonPhaseInfo]:
    return _engine(calendar).moons.get_moon_phase(moon_index, t)

def get_current_season(day_of_year: int, calendar: CalendarRef) -> Optional[SeasonInfo]:
    return _engine(calendar).seasons.get_current_season(day_of_year)

def get_current_era(year: int, calendar: CalendarRef) -> Optional[EraInfo]:
    return _engine(calendar).eras.get_current_era(year)

def format_era_year(year: int, calendar: CalendarRef) -> str:
    return _engine(calendar).eras.format_era_year(year)

def get_cycle_values(components: Components, calendar: CalendarRef) -> CycleValues:
    return _engine(calendar).cycles.get_cycle_values(components)

def daylight_hours(day_of_year: int, calendar: CalendarRef) -> float:
    return _engine(calendar).daylight.daylight_hours(day_of_year)

def day_info(components: Components, calendar: CalendarRef, *, debug: bool = False) -> DayInfo:
    return _engine(calendar).day_info(components, debug=debug)

def explain(components: Components, calendar: CalendarRef) -> Dict[str, Any]:
    return _engine(calendar).explain(components)

# ============================================================
# Recurrence
# ============================================================

def is_recurring_match(
    event: EventDescriptor,
    candidate: Components,
    calendar: CalendarRef,
    *,
    memo: Optional[OccurrenceMemo] = None,
    events: Optional[Mapping[str, EventDescriptor]] = None,
) -> bool:
    return RecurrenceMatcher(_engine(calendar), memo, events).is_recurring_match(event, candidate)

def occurrences_in_range(
    event: EventDescriptor,
    range_start: Components,
    range_end: Components,
    calendar: CalendarRef,
    *,
    limit: int = 100,
    memo: Optional[OccurrenceMemo] = None,
    events: Optional[Mapping[str, EventDescriptor]] = None,
) -> List[Components]:
    return RecurrenceMatcher(_engine(calendar), memo, events).occurrences_in_range(
        event, range_start, range_end, limit
    )
