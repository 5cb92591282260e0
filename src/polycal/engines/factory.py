"""
polycal.engines.factory
-----------------------
Transforms calendar data (schema dicts or validated models) into live,
executable CalendarEngine objects.
"""

from __future__ import annotations

import threading
import weakref
from typing import Any, Mapping, Union

from ..core.model import CalendarModel
from ..core.schema import load_calendar
from .calendar import CalendarEngine

_cache: "weakref.WeakKeyDictionary[CalendarModel, CalendarEngine]" = weakref.WeakKeyDictionary()
_lock = threading.Lock()


def make_engine(source: Union[CalendarModel, Mapping[str, Any]]) -> CalendarEngine:
    """The universal entry point."""
    if isinstance(source, CalendarModel):
        return CalendarEngine(source)
    if isinstance(source, Mapping):
        return CalendarEngine(load_calendar(source))
    raise TypeError(f"Unknown calendar source type: {type(source)}")


def engine_for(model: CalendarModel) -> CalendarEngine:
    """Shared engine for ``model``, built once and dropped with the model."""
    eng = _cache.get(model)
    if eng is None:
        with _lock:
            eng = _cache.get(model)
            if eng is None:
                eng = make_engine(model)
                _cache[model] = eng
    return eng
