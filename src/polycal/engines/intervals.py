"""
polycal.engines.intervals
-------------------------
Named-interval lookups: seasons by day-of-year, eras by year, cycles by a
chosen counter.

Seasons are resolved from a day table built once per model (every day of a
common year maps to exactly one season, checked at load). Days a leap year
adds past the common length take the season of the last common day.

Era policy for overlapping ranges: the narrowest era containing the year
wins; among equally narrow eras the one defined later wins. Overlaps are
logged when the model is loaded.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..core.model import CalendarModel, CycleBasis, Era
from ..core.types import Components, CycleValues, EraInfo, SeasonInfo
from .converter import TimeConverter


class SeasonResolver:
    def __init__(self, model: CalendarModel):
        self.model = model
        self.seasons = model.seasons
        self._days_per_year = model.days_per_year
        table = []
        if self.seasons:
            for day in range(self._days_per_year):
                table.append(next(i for i, s in enumerate(self.seasons) if s.contains(day)))
        self._table: Tuple[int, ...] = tuple(table)

    def season_index(self, day_of_year: int) -> Optional[int]:
        if not self._table:
            return None
        d = min(max(day_of_year, 0), self._days_per_year - 1)
        return self._table[d]

    def length_of(self, index: int) -> int:
        s = self.seasons[index]
        return (s.day_end - s.day_start) % self._days_per_year + 1

    def get_current_season(self, day_of_year: int) -> Optional[SeasonInfo]:
        i = self.season_index(day_of_year)
        if i is None:
            return None
        s = self.seasons[i]
        d = min(max(day_of_year, 0), self._days_per_year - 1)
        return SeasonInfo(
            index=i,
            name=s.name,
            day_in_season=(d - s.day_start) % self._days_per_year,
            length=self.length_of(i),
            color=s.color,
            icon=s.icon,
        )

    def find(self, name_or_index) -> Optional[int]:
        if isinstance(name_or_index, int):
            return name_or_index if 0 <= name_or_index < len(self.seasons) else None
        for i, s in enumerate(self.seasons):
            if s.name == name_or_index:
                return i
        return None


class EraResolver:
    def __init__(self, model: CalendarModel):
        self.eras = model.eras

    def era_index(self, year: int) -> Optional[int]:
        best: Optional[int] = None
        for i, e in enumerate(self.eras):
            if not e.contains(year):
                continue
            if best is None or e.width <= self.eras[best].width:
                best = i
        return best

    def get_current_era(self, year: int) -> Optional[EraInfo]:
        i = self.era_index(year)
        if i is None:
            return None
        e = self.eras[i]
        return EraInfo(
            index=i,
            name=e.name,
            abbreviation=e.abbreviation,
            start_year=e.start_year,
            end_year=e.end_year,
            year_in_era=year - e.start_year + 1,
        )

    def format_era_year(self, year: int) -> str:
        """
        Render ``year`` with its era, e.g. "1492 DR" or "Year 3 of the Second Age".

        Template placeholders: {{year}}, {{yearInEra}}, {{era}}, {{abbreviation}}.
        Without a template the era's ``format`` decides: "prefix" or "suffix".
        """
        info = self.get_current_era(year)
        if info is None:
            return str(year)
        era: Era = self.eras[info.index]
        abbr = era.abbreviation or era.name
        if era.template:
            out = era.template
            for key, val in (
                ("{{year}}", year),
                ("{{yearInEra}}", info.year_in_era),
                ("{{era}}", era.name),
                ("{{abbreviation}}", abbr),
            ):
                out = out.replace(key, str(val))
            return out
        if era.format == "prefix":
            return f"{abbr} {info.year_in_era}"
        return f"{info.year_in_era} {abbr}"


class CycleResolver:
    def __init__(self, converter: TimeConverter, eras: EraResolver):
        self.converter = converter
        self.eras = eras
        self.cycles = converter.model.cycles

    def basis_value(self, basis: CycleBasis, c: Components) -> int:
        conv = self.converter
        c = conv.start_of_day(c)
        if basis is CycleBasis.YEAR:
            return c.year
        if basis is CycleBasis.ERA_YEAR:
            era = self.eras.get_current_era(c.year)
            return c.year if era is None else era.year_in_era - 1
        if basis is CycleBasis.MONTH:
            return c.year * conv.n_months + c.month
        if basis is CycleBasis.MONTH_DAY:
            return c.day_of_month
        if basis is CycleBasis.DAY:
            return conv.absolute_day(c)
        if basis is CycleBasis.YEAR_DAY:
            return conv.day_of_year(c)
        raise TypeError(f"Unknown cycle basis: {basis!r}")

    def get_cycle_values(self, c: Components) -> CycleValues:
        values: Dict[str, Optional[str]] = {}
        indices: Dict[str, int] = {}
        parts = []
        for cyc in self.cycles:
            idx = (self.basis_value(cyc.based_on, c) + cyc.offset) % cyc.length
            name = cyc.entries[idx] if idx < len(cyc.entries) else None
            values[cyc.name] = name
            indices[cyc.name] = idx
            if name is not None:
                parts.append(name)
        return CycleValues(text=", ".join(parts), values=values, indices=indices)
