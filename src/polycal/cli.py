from __future__ import annotations

import argparse
import importlib
import inspect
import json
import sys
from typing import List, Optional


def _run_module_main(modpath: str, argv: List[str]) -> int:
    """
    Import module and run its main().

    Supports:
      - main(argv: list[str] | None = None) -> int|None
      - main() -> int|None
    """
    mod = importlib.import_module(modpath)
    if not hasattr(mod, "main"):
        raise SystemExit(f"Module {modpath} has no main()")
    fn = getattr(mod, "main")

    sig = inspect.signature(fn)
    if len(sig.parameters) == 0:
        rv = fn()
    else:
        rv = fn(argv)
    return int(rv or 0)


def _components(year: int, month: int, day: int):
    from polycal.core.types import Components

    # CLI months and days are 1-based
    return Components(year, month - 1, day - 1)


def cmd_day(argv: List[str]) -> int:
    import polycal

    p = argparse.ArgumentParser(prog="polycal day", description="Describe one calendar day")
    p.add_argument("calendar")
    p.add_argument("year", type=int)
    p.add_argument("month", type=int, help="1-based month")
    p.add_argument("day", type=int, help="1-based day of month")
    p.add_argument("--debug", action="store_true")
    p.add_argument("--json", action="store_true", help="print the explain() dictionary as JSON")
    args = p.parse_args(argv)

    c = _components(args.year, args.month, args.day)
    if args.json:
        print(json.dumps(polycal.explain(c, args.calendar), indent=2, default=str))
    else:
        print(polycal.day_info(c, args.calendar, debug=args.debug))
    return 0


def cmd_time(argv: List[str]) -> int:
    import polycal

    p = argparse.ArgumentParser(prog="polycal time", description="Scalar time (seconds) -> calendar components")
    p.add_argument("calendar")
    p.add_argument("seconds", type=float)
    args = p.parse_args(argv)

    t = int(args.seconds) if args.seconds.is_integer() else args.seconds
    c = polycal.time_to_components(t, args.calendar)
    print(json.dumps(c.to_dict()))
    return 0


def cmd_list(argv: List[str]) -> int:
    import polycal

    p = argparse.ArgumentParser(prog="polycal list", description="List registered calendars")
    p.add_argument("--verbose", "-v", action="store_true")
    args = p.parse_args(argv)

    for name in polycal.list_calendars():
        if args.verbose:
            print(json.dumps(polycal.calendar_info(name)))
        else:
            print(name)
    return 0


def cmd_recur(argv: List[str]) -> int:
    import polycal

    p = argparse.ArgumentParser(prog="polycal recur", description="List occurrences of a recurring event")
    p.add_argument("calendar")
    p.add_argument("event", help="path to an event JSON file")
    p.add_argument("--from", dest="start", nargs=3, type=int, metavar=("Y", "M", "D"), required=True)
    p.add_argument("--to", dest="end", nargs=3, type=int, metavar=("Y", "M", "D"), required=True)
    p.add_argument("--limit", type=int, default=100)
    args = p.parse_args(argv)

    with open(args.event, "r", encoding="utf-8") as f:
        event = polycal.event_from_dict(json.load(f))

    print(polycal.describe_recurrence(event))
    hits = polycal.occurrences_in_range(
        event, _components(*args.start), _components(*args.end), args.calendar, limit=args.limit
    )
    for c in hits:
        print(f"{c.year}-{c.month + 1:02d}-{c.day_of_month + 1:02d}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    p = argparse.ArgumentParser(prog="polycal", description="Custom calendar conversion toolkit CLI.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("day", help="Describe one calendar day")
    sub.add_parser("time", help="Scalar time -> calendar components")
    sub.add_parser("list", help="List registered calendars")
    sub.add_parser("recur", help="List occurrences of a recurring event")
    sub.add_parser("month", help="Print a month grid (diagnostics)")

    p_diag = sub.add_parser("diag", help="Diagnostics tools")
    p_diag.add_argument(
        "tool",
        choices=["round-trip", "month-grid", "daylight-curve", "moon-strip"],
        help="Which diagnostic to run",
    )

    args, rest = p.parse_known_args(argv)

    if args.cmd == "day":
        return cmd_day(rest)

    if args.cmd == "time":
        return cmd_time(rest)

    if args.cmd == "list":
        return cmd_list(rest)

    if args.cmd == "recur":
        return cmd_recur(rest)

    if args.cmd == "month":
        return _run_module_main("polycal.diagnostics.month_grid", rest)

    if args.cmd == "diag":
        tool_map = {
            "round-trip": "polycal.diagnostics.round_trip",
            "month-grid": "polycal.diagnostics.month_grid",
            "daylight-curve": "polycal.diagnostics.daylight_curve",
            "moon-strip": "polycal.diagnostics.moon_strip",
        }
        return _run_module_main(tool_map[args.tool], rest)

    raise RuntimeError("unreachable")


if __name__ == "__main__":
    raise SystemExit(main())
