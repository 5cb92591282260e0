from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Components:
    """Structured calendar time shared with the host clock.

    ``year`` is internal (before ``yearZero``), ``month`` and ``day_of_month``
    are 0-indexed. Display offsets are applied by presentation code only.
    """
    year: int
    month: int = 0
    day_of_month: int = 0
    hour: int = 0
    minute: int = 0
    second: float = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Components":
        """Read the wire shape ``{year, month, dayOfMonth, hour, minute, second}``.

        A 1-based ``day`` is accepted when ``dayOfMonth`` is absent.
        """
        if "dayOfMonth" in data:
            dom = data["dayOfMonth"]
        elif "day_of_month" in data:
            dom = data["day_of_month"]
        else:
            dom = max(int(data.get("day", 1) or 1) - 1, 0)
        return cls(
            year=int(data.get("year", 0)),
            month=int(data.get("month", 0)),
            day_of_month=int(dom),
            hour=int(data.get("hour", 0) or 0),
            minute=int(data.get("minute", 0) or 0),
            second=data.get("second", 0) or 0,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "dayOfMonth": self.day_of_month,
            "hour": self.hour,
            "minute": self.minute,
            "second": self.second,
        }

    def date_key(self) -> Tuple[int, int, int]:
        return (self.year, self.month, self.day_of_month)

    def start_of_day(self) -> "Components":
        return Components(self.year, self.month, self.day_of_month)


@dataclass(frozen=True)
class MoonPhaseInfo:
    moon_index: int
    moon_name: str
    phase_index: int
    name: str
    sub_phase_name: Optional[str]
    icon: Optional[str]
    position: float      # fraction of the cycle in [0, 1)
    day_in_cycle: float


@dataclass(frozen=True)
class SeasonInfo:
    index: int
    name: str
    day_in_season: int
    length: int
    color: Optional[str] = None
    icon: Optional[str] = None

    @property
    def progress(self) -> float:
        return self.day_in_season / self.length if self.length else 0.0


@dataclass(frozen=True)
class EraInfo:
    index: int
    name: str
    abbreviation: Optional[str]
    start_year: int
    end_year: Optional[int]
    year_in_era: int     # 1 for the era's first year


@dataclass(frozen=True)
class CycleValues:
    text: str
    values: Dict[str, Optional[str]] = field(default_factory=dict)
    indices: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class DayInfo:
    components: Components
    calendar: str
    day_of_year: int
    weekday: int
    weekday_name: str
    weekday_counted: bool
    is_leap_year: bool
    festival: Optional[Any] = None
    moons: Tuple[MoonPhaseInfo, ...] = ()
    season: Optional[SeasonInfo] = None
    era: Optional[EraInfo] = None
    cycles: Optional[CycleValues] = None
    daylight_hours: Optional[float] = None
    debug: Optional[Dict[str, Any]] = None
