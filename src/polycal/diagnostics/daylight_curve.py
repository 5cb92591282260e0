#!/usr/bin/env python3
from __future__ import annotations

import argparse
from typing import List, Optional

import polycal


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


def build_series(np, name: str):
    engine = polycal.get_calendar(name)
    n = engine.model.days_per_year
    x = np.arange(n, dtype=int)
    y = np.array([engine.daylight.daylight_hours(int(d)) for d in x], dtype=float)
    return x, y


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(description="Plot daylight hours across the year for one or more calendars.")
    p.add_argument("--calendars", default=",".join(polycal.list_calendars()), help="Comma-separated calendar list.")
    p.add_argument("--outbase", default="daylight_curve", help="Output base name (writes .png)")
    p.add_argument("--seasons", action="store_true", help="Shade the seasons of the first calendar.")
    p.add_argument("--latitudes", type=float, nargs="*", default=[],
                   help="Extra curves at these latitudes, using the first calendar's year and solstice.")
    args = p.parse_args(argv)

    np = _need_numpy()
    plt = _need_matplotlib()

    names = [x.strip() for x in args.calendars.split(",") if x.strip()]

    fig, ax = plt.subplots(figsize=(9.2, 4.8), constrained_layout=True)
    ax.set_axisbelow(True)
    ax.grid(True, which="major", color="0.88", linewidth=0.7)
    ax.set_xlabel("Day of year (0-based)")
    ax.set_ylabel("Daylight (hours)")
    ax.set_title("Daylight across the year")

    for name in names:
        x, y = build_series(np, name)
        info = polycal.calendar_info(name)
        ax.plot(x, y, linewidth=1.6, label=f"{name} ({info['daylight']})")

    if args.latitudes and names:
        engine = polycal.get_calendar(names[0])
        n = engine.model.days_per_year
        x = np.arange(n, dtype=int)
        for lat in args.latitudes:
            y = np.array([
                polycal.compute_daylight_from_latitude(
                    lat, int(d), n, engine.model.time.hours_per_day, engine.daylight.summer_solstice_day
                )
                for d in x
            ], dtype=float)
            ax.plot(x, y, linewidth=1.0, linestyle="--", label=f"latitude {lat:g}")

    if args.seasons and names:
        model = polycal.get_model(names[0])
        n = model.days_per_year
        for i, s in enumerate(model.seasons):
            alpha = 0.04 * (1 + i % 2)
            if s.wraps:
                ax.axvspan(s.day_start, n - 1, alpha=alpha, color=s.color or "0.3")
                ax.axvspan(0, s.day_end, alpha=alpha, color=s.color or "0.3")
            else:
                ax.axvspan(s.day_start, s.day_end, alpha=alpha, color=s.color or "0.3")

    ax.legend(loc="center left", bbox_to_anchor=(1.02, 0.5), frameon=False)

    outbase = args.outbase
    fig.savefig(outbase + ".png", dpi=200)
    print(f"Saved: {outbase}.png")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
