from __future__ import annotations

import argparse
from typing import List, Optional, Tuple

import polycal
from polycal.core.types import Components


def cell(top: str, bot: str, w: int = 6) -> Tuple[str, str]:
    return (top[:w].ljust(w), bot[:w].ljust(w))


def dow_header(engine, w: int = 6) -> str:
    return " ".join((wd.abbreviation or wd.name)[:w].ljust(w) for wd in engine.model.weekdays)


def print_grid(title: str, header: str, weeks: List[List[Tuple[str, str]]], extras: List[str]) -> None:
    print(title)
    print(header)
    print("-" * len(header))
    for wk in weeks:
        print(" ".join(c[0] for c in wk))
        print(" ".join(c[1] for c in wk))
    for line in extras:
        print(line)
    print()


def month_calendar(name: str, year: int, month: int) -> None:
    engine = polycal.get_calendar(name)
    conv = engine.converter
    n_week = conv.n_week
    mo = engine.model.months[month]

    weeks: List[List[Tuple[str, str]]] = []
    wk: List[Tuple[str, str]] = []
    extras: List[str] = []

    pad = conv.month_start_weekday(month, year)
    for _ in range(pad):
        wk.append(cell("", ""))

    for info in engine.month_days(year, month):
        dom = info.components.day_of_month
        fest = "" if info.festival is None else info.festival.name
        if not info.weekday_counted:
            extras.append(f"  * {dom + 1:2d} {fest or mo.name} (outside the week)")
            continue
        moon = info.moons[0].name if info.moons else ""
        wk.append(cell(f"{dom + 1:2d}" + ("*" if fest else ""), moon))
        if len(wk) == n_week:
            weeks.append(wk)
            wk = []
    if wk and any(c[0].strip() for c in wk):
        while len(wk) < n_week:
            wk.append(cell("", ""))
        weeks.append(wk)

    era = engine.eras.format_era_year(year)
    leap_tag = " (leap)" if conv.is_leap_year(year) else ""
    title = f"{name}  {mo.name} {era}{leap_tag}"
    print_grid(title, dow_header(engine), weeks, extras)


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Print a month grid with weekday columns, festivals and moon phases.")
    p.add_argument("--calendar", default="gregorian", help="registered calendar name")
    p.add_argument("--year", type=int, default=2024)
    p.add_argument("--month", type=int, default=1, help="1-based month (default: 1)")
    p.add_argument("--months", type=int, default=1, help="number of consecutive months to print")
    args = p.parse_args(argv)

    conv = polycal.get_calendar(args.calendar).converter
    for k in range(args.months):
        c = conv.normalize(Components(args.year, args.month - 1 + k, 0))
        month_calendar(args.calendar, c.year, c.month)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
