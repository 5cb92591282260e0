"""
polycal.engines.daylight
------------------------
Hours of daylight per day-of-year, and the sun-clock helpers built on it.

Resolution order:
  1. ``enabled`` with a latitude: spherical sunrise equation with a
     sinusoidal solar declination peaking on the summer solstice day.
  2. explicit shortest/longest hours: cosine interpolation between the
     winter and summer solstice days (the two halves of the year may have
     different lengths).
  3. ``hours_per_day / 2``.

The sun is centered on midday: sunrise = midday - daylight/2.
"""

from __future__ import annotations

import math

from ..core.types import Components
from .converter import TimeConverter

# Axial tilt of the reference world, in degrees.
AXIAL_TILT = 23.44


def compute_daylight_from_latitude(
    latitude: float,
    day_of_year: float,
    days_per_year: int,
    hours_per_day: float,
    summer_solstice_day: float,
    *,
    altitude: float = 0.0,
) -> float:
    """Hours of daylight at ``latitude`` (degrees) on ``day_of_year``."""
    decl = math.radians(AXIAL_TILT) * math.cos(2 * math.pi * (day_of_year - summer_solstice_day) / days_per_year)
    phi = math.radians(max(-90.0, min(90.0, latitude)))
    h0 = math.radians(altitude)

    den = math.cos(phi) * math.cos(decl)
    if abs(den) < 1e-12:
        # pole: all day or all night
        s = math.sin(phi) * math.sin(decl)
        return hours_per_day if s > 0 else (hours_per_day / 2 if s == 0 else 0.0)

    cos_h = (math.sin(h0) - math.sin(phi) * math.sin(decl)) / den
    cos_h = max(-1.0, min(1.0, cos_h))
    return hours_per_day * math.acos(cos_h) / math.pi


def interpolate_daylight(
    shortest: float,
    longest: float,
    day_of_year: float,
    days_per_year: int,
    winter_solstice_day: float,
    summer_solstice_day: float,
) -> float:
    """Half-cosine ramps winter -> summer -> winter."""
    amp = longest - shortest
    rise = (summer_solstice_day - winter_solstice_day) % days_per_year
    if rise == 0:
        f = (day_of_year - winter_solstice_day) / days_per_year
        return shortest + amp * (1 - math.cos(2 * math.pi * f)) / 2

    since_winter = (day_of_year - winter_solstice_day) % days_per_year
    if since_winter <= rise:
        f = since_winter / rise
        return shortest + amp * (1 - math.cos(math.pi * f)) / 2
    fall = days_per_year - rise
    f = (since_winter - rise) / fall
    return longest - amp * (1 - math.cos(math.pi * f)) / 2


class DaylightModel:
    def __init__(self, converter: TimeConverter):
        self.converter = converter
        model = converter.model
        self.cfg = model.daylight
        self.hours_per_day = model.time.hours_per_day
        self.days_per_year = model.days_per_year

        half = self.days_per_year // 2
        summer = self.cfg.summer_solstice_day
        winter = self.cfg.winter_solstice_day
        if summer is None:
            summer = half if winter is None else (winter + half) % self.days_per_year
        if winter is None:
            winter = (summer + half) % self.days_per_year
        self.summer_solstice_day = summer
        self.winter_solstice_day = winter

    @property
    def mode(self) -> str:
        if self.cfg.enabled and self.cfg.latitude is not None:
            return "latitude"
        if self.cfg.shortest_day is not None and self.cfg.longest_day is not None:
            return "explicit"
        return "default"

    def daylight_hours(self, day_of_year: float) -> float:
        mode = self.mode
        if mode == "latitude":
            return compute_daylight_from_latitude(
                self.cfg.latitude, day_of_year, self.days_per_year, self.hours_per_day, self.summer_solstice_day
            )
        if mode == "explicit":
            return interpolate_daylight(
                self.cfg.shortest_day,
                self.cfg.longest_day,
                day_of_year,
                self.days_per_year,
                self.winter_solstice_day,
                self.summer_solstice_day,
            )
        return self.hours_per_day / 2

    def hours_on(self, c: Components) -> float:
        return self.daylight_hours(self.converter.day_of_year(c))

    # ---------------------------------------------------------
    # Sun clock (hours as floats, 0 = midnight)
    # ---------------------------------------------------------

    def midday(self) -> float:
        return self.hours_per_day / 2

    def sunrise(self, c: Components) -> float:
        return self.midday() - self.hours_on(c) / 2

    def sunset(self, c: Components) -> float:
        return self.midday() + self.hours_on(c) / 2

    def _hour(self, c: Components) -> float:
        c = self.converter.normalize(c)
        t = self.converter.model.time
        return c.hour + c.minute / t.minutes_per_hour + c.second / t.seconds_per_hour

    def is_daytime(self, c: Components) -> bool:
        h = self._hour(c)
        return self.sunrise(c) <= h < self.sunset(c)

    def progress_day(self, c: Components) -> float:
        """0 at sunrise, 1 at sunset; clamped outside daylight."""
        rise, sset = self.sunrise(c), self.sunset(c)
        if sset <= rise:
            return 0.0
        return max(0.0, min(1.0, (self._hour(c) - rise) / (sset - rise)))

    def progress_night(self, c: Components) -> float:
        """0 at sunset, 1 at the next sunrise; 0 during daylight."""
        if self.is_daytime(c):
            return 0.0
        rise, sset = self.sunrise(c), self.sunset(c)
        night = self.hours_per_day - (sset - rise)
        if night <= 0:
            return 0.0
        return min(1.0, ((self._hour(c) - sset) % self.hours_per_day) / night)

    def time_until(self, c: Components, target: str) -> int:
        """Seconds from ``c`` to the next sunrise/sunset/midday/midnight, in (0, one day]."""
        key = target.lower()
        if key == "sunrise":
            hour = self.sunrise(c)
        elif key == "sunset":
            hour = self.sunset(c)
        elif key in ("midday", "noon"):
            hour = self.midday()
        elif key == "midnight":
            hour = 0.0
        else:
            raise ValueError(f"Unknown sun-clock target '{target}'")
        until = hour - self._hour(c)
        if until <= 0:
            until += self.hours_per_day
        return int(until * self.converter.sph)

    def darkness_level(self, c: Components) -> float:
        """0 at midday, 1 at midnight, cosine in between."""
        p = self._hour(c) / self.hours_per_day
        return max(0.0, min(1.0, (math.cos(2 * math.pi * p) + 1) / 2))
