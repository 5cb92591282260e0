"""
polycal.engines.moon
--------------------
Per-moon cyclic phase lookup.

    days  = (t - t_ref) / seconds_per_day
    pos   = ((days + cycle_day_adjust) mod cycle_length) / cycle_length   in [0, 1)

``mod`` is Python's floored modulo, so dates before the reference epoch land
in the right phase. Phases are found by bisect on their starts.

Consecutive phases sharing a name form one macro-phase (e.g. three
"Waxing" eighths). A phase that declares ``rising``/``fading`` names reports
the rising name in the first third of its macro-phase and the fading name in
the last third.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.model import Moon
from ..core.types import Components, MoonPhaseInfo
from .converter import Number, TimeConverter


@dataclass(frozen=True)
class _MoonTable:
    moon: Moon
    ref_time: Number
    starts: Tuple[float, ...]
    groups: Tuple[Tuple[float, float], ...]   # macro-phase span per phase


def _group_spans(moon: Moon) -> Tuple[Tuple[float, float], ...]:
    spans: List[Tuple[float, float]] = []
    i = 0
    phases = moon.phases
    while i < len(phases):
        j = i
        while j + 1 < len(phases) and phases[j + 1].name == phases[i].name:
            j += 1
        spans.extend([(phases[i].start, phases[j].end)] * (j - i + 1))
        i = j + 1
    return tuple(spans)


class MoonPhaseCalculator:
    def __init__(self, converter: TimeConverter):
        self.converter = converter
        self.spd = converter.spd
        self._tables = tuple(
            _MoonTable(
                moon=m,
                ref_time=converter.components_to_time(m.reference_date),
                starts=tuple(p.start for p in m.phases),
                groups=_group_spans(m),
            )
            for m in converter.model.moons
        )

    def __len__(self) -> int:
        return len(self._tables)

    def _table(self, moon_index: int) -> Optional[_MoonTable]:
        if 0 <= moon_index < len(self._tables):
            return self._tables[moon_index]
        return None

    # ---------------------------------------------------------
    # Position
    # ---------------------------------------------------------

    def days_since_reference(self, moon_index: int, t: Number) -> Optional[float]:
        tab = self._table(moon_index)
        if tab is None:
            return None
        return (t - tab.ref_time) / self.spd

    def day_in_cycle(self, moon_index: int, t: Number) -> Optional[float]:
        tab = self._table(moon_index)
        if tab is None:
            return None
        days = (t - tab.ref_time) / self.spd
        return (days + tab.moon.cycle_day_adjust) % tab.moon.cycle_length

    def moon_position(self, moon_index: int, t: Number) -> Optional[float]:
        """Fraction of the cycle in [0, 1), or None for an unknown moon."""
        tab = self._table(moon_index)
        if tab is None:
            return None
        pos = self.day_in_cycle(moon_index, t) / tab.moon.cycle_length
        # float rounding can yield exactly 1.0 for tiny negative offsets
        return pos if pos < 1.0 else 0.0

    def phase_index_at(self, moon_index: int, position: float) -> int:
        tab = self._tables[moon_index]
        return max(bisect_right(tab.starts, position) - 1, 0)

    # ---------------------------------------------------------
    # Phase lookup
    # ---------------------------------------------------------

    def get_moon_phase(self, moon_index: int, t: Number) -> Optional[MoonPhaseInfo]:
        tab = self._table(moon_index)
        if tab is None:
            return None
        dic = self.day_in_cycle(moon_index, t)
        pos = dic / tab.moon.cycle_length
        if pos >= 1.0:
            pos, dic = 0.0, 0.0
        i = self.phase_index_at(moon_index, pos)
        phase = tab.moon.phases[i]

        g0, g1 = tab.groups[i]
        frac = (pos - g0) / (g1 - g0)
        sub = None
        if frac < 1 / 3:
            sub = phase.rising
        elif frac >= 2 / 3:
            sub = phase.fading

        return MoonPhaseInfo(
            moon_index=moon_index,
            moon_name=tab.moon.name,
            phase_index=i,
            name=phase.name,
            sub_phase_name=sub,
            icon=phase.icon,
            position=pos,
            day_in_cycle=dic,
        )

    def phase_on(self, moon_index: int, c: Components) -> Optional[MoonPhaseInfo]:
        """Phase at the start of the day of ``c``."""
        return self.get_moon_phase(moon_index, self.converter.absolute_day(c) * self.spd)

    def all_moon_phases(self, t: Number, *, include_hidden: bool = True) -> Tuple[MoonPhaseInfo, ...]:
        out = []
        for i, tab in enumerate(self._tables):
            if tab.moon.hidden and not include_hidden:
                continue
            out.append(self.get_moon_phase(i, t))
        return tuple(out)

    def next_phase_time(self, moon_index: int, phase_index: int, after: Number) -> Optional[float]:
        """First time strictly after ``after`` at which the moon enters ``phase_index``."""
        tab = self._table(moon_index)
        if tab is None or not 0 <= phase_index < len(tab.starts):
            return None
        pos = self.moon_position(moon_index, after)
        gap = (tab.starts[phase_index] - pos) % 1.0
        if gap == 0.0:
            gap = 1.0
        return after + gap * tab.moon.cycle_length * self.spd
