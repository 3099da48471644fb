"""Scene heading (slug line) parser.

Parses strings like:
    INT. COFFEE SHOP - DAY       -> (INT, "COFFEE SHOP", DAY)
    EXT. FOREST - NIGHT          -> (EXT, "FOREST", NIGHT)
    INT./EXT. CAR - CONTINUOUS   -> (INT/EXT, "CAR", CONTINUOUS)
    THE ROOFTOP                  -> ("", "THE ROOFTOP", "")
"""

import re
from dataclasses import dataclass

from core.models import LocationType, TimeOfDay

# Longer alternatives first so "INT./EXT." is not cut short at "INT."
_PREFIX_RE = re.compile(
    r"^(INT\./EXT\.|INT/EXT\.|EXT\./INT\.|EXT/INT\.|I/E\.|INT\.|EXT\.)\s*",
    re.IGNORECASE,
)

_TIME_TOKENS = "|".join(t.value for t in TimeOfDay if t is not TimeOfDay.NONE)
_TIME_SUFFIX_RE = re.compile(rf"\s*[-–—]\s*({_TIME_TOKENS})\s*$", re.IGNORECASE)

# Fountain scene numbers: "INT. HOUSE - DAY #1A#"
_SCENE_NUMBER_RE = re.compile(r"\s*#[\w.\-]+#\s*$")


@dataclass(frozen=True, slots=True)
class HeadingComponents:
    """Parsed components of a scene heading."""

    location_type: LocationType
    location: str
    time_of_day: TimeOfDay


def _classify_prefix(prefix: str) -> LocationType:
    upper = prefix.upper()
    if upper == "I/E.":
        return LocationType.INT_EXT
    has_int = "INT" in upper
    has_ext = "EXT" in upper
    if has_int and has_ext:
        return LocationType.INT_EXT
    if has_int:
        return LocationType.INT
    if has_ext:
        return LocationType.EXT
    return LocationType.NONE


def parse_scene_heading(heading: str) -> HeadingComponents:
    """Split a scene heading into location type, location and time of day.

    Never raises: a heading without a recognized prefix yields
    ``LocationType.NONE`` and an unrecognized time yields ``TimeOfDay.NONE``.
    """
    remainder = heading.strip()

    # 1. Interior/exterior prefix
    loc_type = LocationType.NONE
    prefix_match = _PREFIX_RE.match(remainder)
    if prefix_match:
        loc_type = _classify_prefix(prefix_match.group(1))
        remainder = remainder[prefix_match.end() :]

    remainder = _SCENE_NUMBER_RE.sub("", remainder)

    # 2. Time-of-day suffix
    tod = TimeOfDay.NONE
    time_match = _TIME_SUFFIX_RE.search(remainder)
    if time_match:
        tod = TimeOfDay(time_match.group(1).upper())
        remainder = remainder[: time_match.start()]

    return HeadingComponents(
        location_type=loc_type,
        location=remainder.strip(),
        time_of_day=tod,
    )
