from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from .errors import UnknownCalendarError
from .model import CalendarModel
from .types import Components, DayInfo

class CalendarEngine(Protocol):
    model: CalendarModel

    def info(self) -> Dict[str, Any]: ...
    def day_info(self, c: Components, *, debug: bool = False) -> DayInfo: ...
    def explain(self, c: Components) -> Dict[str, Any]: ...

@dataclass
class CalendarRegistry:
    _engines: Dict[str, CalendarEngine]

    def get(self, name: str) -> CalendarEngine:
        if name not in self._engines:
            raise UnknownCalendarError(f"Unknown calendar '{name}'. Available: {sorted(self._engines)}")
        return self._engines[name]

    def list(self) -> List[str]:
        return sorted(self._engines.keys())

    def register(self, name: str, engine: CalendarEngine, *, overwrite: bool = False) -> None:
        if (not overwrite) and (name in self._engines):
            raise KeyError(f"Calendar '{name}' already exists. Use overwrite=True to replace.")
        self._engines[name] = engine
