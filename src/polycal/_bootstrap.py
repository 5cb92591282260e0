from __future__ import annotations
from polycal.core.engine import CalendarRegistry
from polycal.engines.presets import ALL_PRESETS
from polycal.engines.factory import make_engine

def build_registry() -> CalendarRegistry:
    engines = {}
    for name, data in ALL_PRESETS.items():
        engines[name] = make_engine(data)
    return CalendarRegistry(engines)
