"""
polycal.recurrence.memo
-----------------------
The caller-owned cache of derived random occurrences, keyed by
(event id, seed). The matcher only reads an entry or populates a missing
one; it never edits an entry in place.
"""

from __future__ import annotations

import threading
from bisect import bisect_left
from dataclasses import dataclass
from typing import Dict, Optional, Protocol, Tuple

MemoKey = Tuple[str, str]


@dataclass(frozen=True)
class RandomOccurrences:
    """Sorted absolute day numbers derived for the inclusive window [first_day, last_day]."""
    first_day: int
    last_day: int
    days: Tuple[int, ...]

    def covers(self, day: int) -> bool:
        return self.first_day <= day <= self.last_day

    def __contains__(self, day: int) -> bool:
        i = bisect_left(self.days, day)
        return i < len(self.days) and self.days[i] == day


class OccurrenceMemo(Protocol):
    def get(self, key: MemoKey) -> Optional[RandomOccurrences]: ...
    def put(self, key: MemoKey, value: RandomOccurrences) -> None: ...


class InMemoryOccurrenceMemo:
    """Process-local memo; safe to share between threads."""

    def __init__(self) -> None:
        self._data: Dict[MemoKey, RandomOccurrences] = {}
        self._lock = threading.Lock()

    def get(self, key: MemoKey) -> Optional[RandomOccurrences]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: MemoKey, value: RandomOccurrences) -> None:
        with self._lock:
            self._data[key] = value

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
