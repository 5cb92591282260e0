#!/usr/bin/env python3
"""Plot moon positions (fraction of cycle) day by day, one row per moon."""
from __future__ import annotations

import argparse
from typing import List, Optional

import polycal
from polycal.core.types import Components


def _need_numpy():
    try:
        import numpy as np
        return np
    except ImportError as e:
        raise RuntimeError('Need numpy. Install: pip install "polycal[diagnostics]"') from e


def _need_matplotlib():
    try:
        import matplotlib.pyplot as plt
        return plt
    except ImportError as e:
        raise RuntimeError('Need matplotlib. Install: pip install "polycal[diagnostics]"') from e


def build_positions(np, name: str, year: int, days: int):
    engine = polycal.get_calendar(name)
    conv = engine.converter
    d0 = conv.absolute_day(Components(year, 0, 0))
    x = np.arange(days, dtype=int)
    rows = []
    for i in range(len(engine.moons)):
        rows.append(np.array([engine.moons.moon_position(i, (d0 + int(k)) * conv.spd) for k in x], dtype=float))
    return x, rows


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Moon position strip for one calendar.")
    p.add_argument("--calendar", default="renescara")
    p.add_argument("--year", type=int, default=3247)
    p.add_argument("--days", type=int, default=365)
    p.add_argument("--outbase", default="moon_strip", help="Output base name (writes .png)")
    args = p.parse_args(argv)

    np = _need_numpy()
    plt = _need_matplotlib()

    model = polycal.get_model(args.calendar)
    if not model.moons:
        print(f"{args.calendar} has no moons")
        return 1

    x, rows = build_positions(np, args.calendar, args.year, args.days)

    fig, axes = plt.subplots(len(rows), 1, figsize=(9.2, 1.6 + 1.4 * len(rows)), sharex=True, constrained_layout=True)
    if len(rows) == 1:
        axes = [axes]
    for ax, moon, y in zip(axes, model.moons, rows):
        ax.scatter(x, y, s=6, c=y, cmap="twilight")
        for ph in moon.phases:
            ax.axhline(ph.start, color="0.85", linewidth=0.6)
        ax.set_ylim(0.0, 1.0)
        ax.set_ylabel(moon.name)
    axes[-1].set_xlabel(f"Days since start of year {args.year}")
    axes[0].set_title(f"{args.calendar}: moon positions")

    outbase = args.outbase
    fig.savefig(outbase + ".png", dpi=200)
    print(f"Saved: {outbase}.png")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
