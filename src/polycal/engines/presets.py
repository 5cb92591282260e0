"""
polycal.engines.presets
-----------------------
Built-in calendars, written in the same schema dict shape importers emit.
Months and festival days here are 1-based the way stored data is; the
loader turns them into 0-based components.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple


def _phases(names: Sequence[Tuple[str, Optional[str], Optional[str]]]) -> List[Dict[str, Any]]:
    """Equal-width phases from (name, rising, fading) triples."""
    n = len(names)
    out = []
    for i, (name, rising, fading) in enumerate(names):
        p: Dict[str, Any] = {"name": name, "start": i / n, "end": (i + 1) / n}
        if rising:
            p["rising"] = rising
        if fading:
            p["fading"] = fading
        out.append(p)
    return out


STANDARD_PHASES = _phases([
    ("New Moon", None, None),
    ("Waxing Crescent", None, None),
    ("First Quarter", None, None),
    ("Waxing Gibbous", None, None),
    ("Full Moon", None, None),
    ("Waning Gibbous", None, None),
    ("Last Quarter", None, None),
    ("Waning Crescent", None, None),
])


# ============================================================
# Gregorian (proleptic, astronomical year numbering)
# ============================================================

_GREGORIAN_MONTHS = [
    ("January", "Jan", 31, None), ("February", "Feb", 28, 29), ("March", "Mar", 31, None),
    ("April", "Apr", 30, None), ("May", "May", 31, None), ("June", "Jun", 30, None),
    ("July", "Jul", 31, None), ("August", "Aug", 31, None), ("September", "Sep", 30, None),
    ("October", "Oct", 31, None), ("November", "Nov", 30, None), ("December", "Dec", 31, None),
]

GREGORIAN: Dict[str, Any] = {
    "name": "gregorian",
    "days": {
        "values": [
            {"name": n, "abbreviation": n[:3], "isRestDay": n in ("Saturday", "Sunday")}
            for n in ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
        ],
        "hoursPerDay": 24,
        "minutesPerHour": 60,
        "secondsPerMinute": 60,
        "daysPerYear": 365,
    },
    "months": {
        "values": [
            {"name": n, "abbreviation": a, "ordinal": i + 1, "days": d,
             **({"leapDays": ld} if ld is not None else {})}
            for i, (n, a, d, ld) in enumerate(_GREGORIAN_MONTHS)
        ]
    },
    # 1 January of year 0 (1 BC) was a Saturday.
    "years": {"yearZero": 0, "firstWeekday": 5},
    "leapYearConfig": {"rule": "gregorian", "start": 0},
    "festivals": [],
    "moons": [
        {
            "name": "Moon",
            "cycleLength": 29.530588853,
            # new moon of 6 January 2000; centers each named phase on its event
            "referenceDate": {"year": 2000, "month": 0, "dayOfMonth": 5},
            "cycleDayAdjust": 29.530588853 / 16,
            "phases": STANDARD_PHASES,
            "color": "#ffffff",
        }
    ],
    "seasons": {
        "values": [
            {"name": "Winter", "dayStart": 355, "dayEnd": 78, "icon": "fas fa-snowflake"},
            {"name": "Spring", "dayStart": 79, "dayEnd": 171, "icon": "fas fa-seedling"},
            {"name": "Summer", "dayStart": 172, "dayEnd": 265, "icon": "fas fa-sun"},
            {"name": "Autumn", "dayStart": 266, "dayEnd": 354, "icon": "fas fa-leaf"},
        ]
    },
    "eras": [
        {"name": "Common Era", "abbreviation": "CE", "startYear": 1, "endYear": None, "format": "suffix"},
    ],
    "daylight": {"enabled": True, "latitude": 40.0, "summerSolsticeDay": 171, "winterSolsticeDay": 354},
    "metadata": {"id": "gregorian", "system": "Earth"},
}


# ============================================================
# Calendar of Harptos
# ============================================================

_HARPTOS_ENTRIES = [
    ("Hammer", 30, None, False), ("Midwinter", 1, None, True),
    ("Alturiak", 30, None, False), ("Ches", 30, None, False), ("Tarsakh", 30, None, False),
    ("Greengrass", 1, None, True),
    ("Mirtul", 30, None, False), ("Kythorn", 30, None, False), ("Flamerule", 30, None, False),
    ("Midsummer", 1, None, True), ("Shieldmeet", 0, 1, True),
    ("Eleasis", 30, None, False), ("Eleint", 30, None, False),
    ("Highharvestide", 1, None, True),
    ("Marpenoth", 30, None, False), ("Uktar", 30, None, False),
    ("Feast of the Moon", 1, None, True),
    ("Nightal", 30, None, False),
]

HARPTOS: Dict[str, Any] = {
    "name": "harptos",
    "days": {
        "values": [
            {"name": f"{o}-day"}
            for o in ("First", "Second", "Third", "Fourth", "Fifth",
                      "Sixth", "Seventh", "Eighth", "Ninth", "Tenth")
        ],
        "hoursPerDay": 24,
        "minutesPerHour": 60,
        "secondsPerMinute": 60,
        "daysPerYear": 365,
    },
    "months": {
        "values": [
            {"name": n, "ordinal": i + 1, "days": d,
             **({"leapDays": ld} if ld is not None else {}),
             **({"type": "intercalary"} if inter else {})}
            for i, (n, d, ld, inter) in enumerate(_HARPTOS_ENTRIES)
        ]
    },
    "years": {"yearZero": 0, "firstWeekday": 0},
    "leapYearConfig": {"rule": "simple", "interval": 4, "start": 0},
    # each holiday labels the single day of its own month
    "festivals": [
        {"name": n, "month": i + 1, "day": 1, "countsForWeekday": False, "leapYearOnly": d == 0}
        for i, (n, d, _, inter) in enumerate(_HARPTOS_ENTRIES)
        if inter
    ],
    "moons": [
        {
            "name": "Selûne",
            "cycleLength": 30.4375,
            "referenceDate": {"year": 1372, "month": 0, "dayOfMonth": 0},
            "cycleDayAdjust": 30.4375 / 2,
            "phases": STANDARD_PHASES,
            "color": "#e8e8ff",
        }
    ],
    "seasons": {
        "values": [
            {"name": "Winter", "dayStart": 335, "dayEnd": 60},
            {"name": "Spring", "dayStart": 61, "dayEnd": 151},
            {"name": "Summer", "dayStart": 152, "dayEnd": 242},
            {"name": "Autumn", "dayStart": 243, "dayEnd": 334},
        ]
    },
    "eras": [{"name": "Dale Reckoning", "abbreviation": "DR", "startYear": 1, "endYear": None}],
    "daylight": {"enabled": True, "latitude": 45.0, "summerSolsticeDay": 171, "winterSolsticeDay": 354},
    "metadata": {"id": "harptos", "system": "Forgotten Realms"},
}


# ============================================================
# Renescara
# ============================================================

def _sided(names: Sequence[str]) -> List[Tuple[str, str, str]]:
    return [(n, f"Rising {n}", f"Fading {n}") for n in names]


RENESCARA: Dict[str, Any] = {
    "name": "renescara",
    "days": {
        "values": [
            {"name": n}
            for n in ("Solday", "Ferriday", "Verday", "Midweek", "Mercday", "Shadeday", "Tideday")
        ],
        "hoursPerDay": 24,
        "minutesPerHour": 60,
        "secondsPerMinute": 60,
        "daysPerYear": 365,
    },
    "months": {
        "values": [
            {"name": n, "ordinal": i + 1, "days": 28}
            for i, n in enumerate((
                "Thawmoon", "Seedmoon", "Blossmoon", "Greenmoon", "Summertide", "Goldmoon", "Harvestmoon",
                "Ambermoon", "Fadingmoon", "Frostmoon", "Winterdeep", "Ironmoon", "Shadowmoon",
            ))
        ] + [{"name": "Day of Threshold", "ordinal": 14, "days": 1, "type": "intercalary"}]
    },
    "years": {"yearZero": 0, "firstWeekday": 0, "leapYear": None},
    "festivals": [
        {"name": n, "month": m, "day": d}
        for n, m, d in (
            ("Firstlight Festival", 1, 15), ("Sowtide", 2, 7), ("Firstbloom", 3, 21),
            ("Greenfire", 4, 14), ("Solstice Crown", 5, 14), ("First Reaping", 6, 8),
            ("The Gathering", 7, 15), ("The Turning", 8, 21), ("Lastlight", 9, 7),
            ("Firstfrost Fair", 10, 14), ("The Long Night", 11, 1), ("Iron Feast", 12, 28),
            ("The Veilwalk", 13, 14),
        )
    ],
    "moons": [
        {
            "name": "Aela",
            "cycleLength": 28,
            "color": "#C0C0C0",
            "referenceDate": {"year": 3247, "month": 0, "day": 1},
            "phases": _phases(_sided(
                ["Dark Sister", "Growing", "Growing", "Growing",
                 "Silver Crown", "Fading", "Fading", "Fading"]
            )),
        },
        {
            "name": "Ruan",
            "cycleLength": 73,
            "color": "#B44622",
            "referenceDate": {"year": 3247, "month": 0, "day": 19},
            "phases": _phases(_sided(
                ["Hidden Eye", "Awakening", "Awakening", "Awakening",
                 "Blood Moon", "Closing", "Closing", "Closing"]
            )),
        },
    ],
    "seasons": {
        "values": [
            {"name": "Spring", "icon": "fas fa-seedling", "color": "#90ee90", "dayStart": 0, "dayEnd": 83},
            {"name": "Summer", "icon": "fas fa-sun", "color": "#ffd700", "dayStart": 84, "dayEnd": 167},
            {"name": "Autumn", "icon": "fas fa-leaf", "color": "#d2691e", "dayStart": 168, "dayEnd": 251},
            {"name": "Winter", "icon": "fas fa-snowflake", "color": "#87ceeb", "dayStart": 252, "dayEnd": 364},
        ]
    },
    "eras": [
        {"name": "First Age", "abbreviation": "FA", "startYear": -2000, "endYear": -501,
         "template": "Year {{yearInEra}} of the {{era}}"},
        {"name": "Dark Centuries", "abbreviation": "DC", "startYear": -500, "endYear": 0,
         "template": "Year {{yearInEra}} of the {{era}}"},
        {"name": "Second Age", "abbreviation": "SA", "startYear": 1, "endYear": None,
         "template": "Year {{year}} of the {{era}}"},
    ],
    "cycles": [
        {
            "name": "Five Wanderers",
            "length": 5,
            "offset": 0,
            "basedOn": "year",
            "entries": [{"name": n} for n in ("Ferrus", "Verdantis", "Crystallus", "Umbralis", "Temporis")],
        }
    ],
    "daylight": {"enabled": True, "shortestDay": 8, "longestDay": 16, "winterSolstice": 281, "summerSolstice": 126},
    "metadata": {"id": "renescara", "author": "calendaria", "system": "Renescara"},
}


ALL_PRESETS: Dict[str, Dict[str, Any]] = {
    "gregorian": GREGORIAN,
    "harptos": HARPTOS,
    "renescara": RENESCARA,
}
