"""Diagnostics package.

- month_grid, round_trip: always available, plain-text checks
- daylight_curve, moon_strip: optional (requires the diagnostics extras)
"""

__all__ = ["month_grid", "round_trip", "daylight_curve", "moon_strip"]
