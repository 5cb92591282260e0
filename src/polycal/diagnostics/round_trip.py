from __future__ import annotations

import argparse
import random
from typing import List, Optional

import polycal


def parse_calendars(s: str) -> List[str]:
    # "gregorian,harptos" -> ["gregorian", "harptos"]
    return [x.strip() for x in s.split(",") if x.strip()]


def roundtrip_test(
    name: str,
    N: int,
    start_year: int,
    end_year: int,
    seed: int,
    *,
    max_failures: int,
) -> int:
    random.seed(seed)
    conv = polycal.get_calendar(name).converter
    failures = 0

    t_lo = conv.days_before_year(start_year) * conv.spd
    t_hi = conv.days_before_year(end_year + 1) * conv.spd - 1

    for _ in range(N):
        t0 = random.randint(t_lo, t_hi)
        c = conv.time_to_components(t0)
        back = conv.components_to_time(c)
        if back != t0:
            failures += 1
            print("\nFAIL (time -> components -> time)")
            print("calendar:", name)
            print("t0:", t0)
            print("components:", c)
            print("back:", back)
            if failures >= max_failures:
                return failures

        # next counting day must be one weekday later
        c0 = c.start_of_day()
        nxt = conv.add_days(c0, 1)
        if conv.is_weekday_counted(c0):
            while not conv.is_weekday_counted(nxt):
                nxt = conv.add_days(nxt, 1)
            if conv.day_of_week(nxt) != (conv.day_of_week(c0) + 1) % conv.n_week:
                failures += 1
                print("\nFAIL (weekday step)")
                print("calendar:", name)
                print("day:", c0, "weekday:", conv.day_of_week(c0))
                print("next counted:", nxt, "weekday:", conv.day_of_week(nxt))
                if failures >= max_failures:
                    return failures

    return failures


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Random round-trip tests: time -> components -> time, plus weekday steps.")
    p.add_argument("--calendars", type=str, default=",".join(polycal.list_calendars()),
                   help="Comma-separated calendar list.")
    p.add_argument("--N", type=int, default=2000, help="Trials per calendar.")
    p.add_argument("--start-year", type=int, default=-2000)
    p.add_argument("--end-year", type=int, default=4000)
    p.add_argument("--seed", type=int, default=123, help="RNG seed.")
    p.add_argument("--max-failures", type=int, default=5, help="Stop after this many failures per calendar.")
    args = p.parse_args(argv)

    total = 0
    for name in parse_calendars(args.calendars):
        n = roundtrip_test(name, args.N, args.start_year, args.end_year, args.seed, max_failures=args.max_failures)
        print(f"{name:12s} failures={n}")
        total += n
    return 1 if total else 0


if __name__ == "__main__":
    raise SystemExit(main())
