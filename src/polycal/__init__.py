"""polycal public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

# Initialize registry on import
from . import api_init as _api_init  # noqa: F401

from .api import (
    list_calendars,
    calendar_info,
    get_calendar,
    get_model,
    make_engine,
    register_calendar,
    components_to_time,
    time_to_components,
    normalize,
    day_of_week,
    days_in_month,
    days_in_year,
    is_leap_year,
    days_between,
    add_days,
    add_months,
    add_years,
    find_festival_day,
    get_moon_phase,
    get_current_season,
    get_current_era,
    format_era_year,
    get_cycle_values,
    daylight_hours,
    day_info,
    explain,
    is_recurring_match,
    occurrences_in_range,
)
from .core.errors import ConfigurationError, PolycalError, UnknownCalendarError
from .core.schema import dump_calendar, load_calendar
from .core.types import Components
from .engines.daylight import compute_daylight_from_latitude
from .recurrence.matcher import describe_recurrence
from .recurrence.memo import InMemoryOccurrenceMemo
from .recurrence.types import event_from_dict

__all__ = [
    "list_calendars",
    "calendar_info",
    "get_calendar",
    "get_model",
    "make_engine",
    "register_calendar",
    "components_to_time",
    "time_to_components",
    "normalize",
    "day_of_week",
    "days_in_month",
    "days_in_year",
    "is_leap_year",
    "days_between",
    "add_days",
    "add_months",
    "add_years",
    "find_festival_day",
    "get_moon_phase",
    "get_current_season",
    "get_current_era",
    "format_era_year",
    "get_cycle_values",
    "daylight_hours",
    "day_info",
    "explain",
    "is_recurring_match",
    "occurrences_in_range",
    "describe_recurrence",
    "event_from_dict",
    "InMemoryOccurrenceMemo",
    "compute_daylight_from_latitude",
    "load_calendar",
    "dump_calendar",
    "Components",
    "ConfigurationError",
    "PolycalError",
    "UnknownCalendarError",
]
