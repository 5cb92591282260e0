"""
polycal.recurrence.seeded
-------------------------
Deterministic random occurrences.

Unit ``k`` (the k-th day, week or month after the event start) occurs when
``Random(f"{seed}:{k}").random() < probability``. Each roll depends only on
(seed, k), never on the queried window, so deriving any window twice, or two
overlapping windows, gives identical days.
"""

from __future__ import annotations

import random
from typing import List

from ..core.types import Components
from ..engines.converter import TimeConverter
from .memo import RandomOccurrences
from .types import CheckInterval, RandomRule


def roll(seed: int, k: int, probability: float) -> bool:
    return random.Random(f"{seed}:{k}").random() < probability


def derive(
    rule: RandomRule,
    conv: TimeConverter,
    start: Components,
    first_day: int,
    last_day: int,
) -> RandomOccurrences:
    start_day = conv.absolute_day(start)
    lo = max(first_day, start_day)
    days: List[int] = []

    if lo <= last_day and rule.probability > 0:
        if rule.check_interval is CheckInterval.MONTHLY:
            k0 = max(conv.months_between(start, conv.components_from_day(lo)) - 1, 0)
            k1 = conv.months_between(start, conv.components_from_day(last_day)) + 1
            for k in range(k0, k1 + 1):
                d = conv.absolute_day(conv.add_months(start, k))
                if lo <= d <= last_day and roll(rule.seed, k, rule.probability):
                    days.append(d)
        else:
            step = conv.n_week if rule.check_interval is CheckInterval.WEEKLY else 1
            k0 = -(-(lo - start_day) // step)
            k1 = (last_day - start_day) // step
            for k in range(k0, k1 + 1):
                if roll(rule.seed, k, rule.probability):
                    days.append(start_day + k * step)

    return RandomOccurrences(first_day=first_day, last_day=last_day, days=tuple(sorted(set(days))))
