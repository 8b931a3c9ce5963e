from __future__ import annotations

import re
from typing import Literal

from geo.bounds import LatLng


InputKind = Literal["coordinates", "text"]

_PART = r"""
    (?P<{p}pre>[NSEWnsew])?\s*
    (?P<{p}sign>[+-])?\s*
    (?P<{p}deg>\d+(?:\.\d+)?)\s*(?:°|º)?\s*
    (?:(?P<{p}min>\d+(?:\.\d+)?)\s*(?:'|′|’)\s*)?
    (?:(?P<{p}sec>\d+(?:\.\d+)?)\s*(?:"|″|'')\s*)?
    (?P<{p}post>[NSEWnsew])?
"""

_PAIR_RE = re.compile(
    r"^\s*" + _PART.format(p="a") + r"(?:\s*[,;]\s*|\s+|(?<=[NSEWnsew]))" + _PART.format(p="b") + r"\s*$",
    re.VERBOSE,
)


def _part_value(m: re.Match, p: str) -> tuple[float, str | None] | None:
    pre, post = m.group(f"{p}pre"), m.group(f"{p}post")
    if pre and post:
        return None
    hemi = (pre or post or "").upper() or None

    deg = float(m.group(f"{p}deg"))
    minutes = float(m.group(f"{p}min") or 0.0)
    seconds = float(m.group(f"{p}sec") or 0.0)
    if minutes >= 60.0 or seconds >= 60.0:
        return None
    value = deg + minutes / 60.0 + seconds / 3600.0
    if m.group(f"{p}sign") == "-" or hemi in {"S", "W"}:
        value = -value
    return value, hemi


def parse_coordinates(text: str | None) -> LatLng | None:
    """
    Parse a lat/lon pair typed into the search box.

    Accepts decimal degrees ("55.75, 37.61") and degree/minute/second notation
    with optional hemisphere letters ("55°45'N 37°36'E"). Without hemisphere letters
    the first value is the latitude; "E"/"W" on the first value swaps the order.
    """
    m = _PAIR_RE.match(text or "")
    if m is None:
        return None
    a = _part_value(m, "a")
    b = _part_value(m, "b")
    if a is None or b is None:
        return None
    (va, ha), (vb, hb) = a, b

    if ha in {"E", "W"} or hb in {"N", "S"}:
        if (ha is not None and ha not in {"E", "W"}) or (hb is not None and hb not in {"N", "S"}):
            return None
        lat, lon = vb, va
    else:
        lat, lon = va, vb

    if not (-90.0 <= lat <= 90.0) or not (-180.0 <= lon <= 180.0):
        return None
    return LatLng(lat=lat, lon=lon)


def classify_input(text: str | None) -> InputKind:
    return "coordinates" if parse_coordinates(text) is not None else "text"


def has_text(text: str | None) -> bool:
    return bool(text) and re.search(r"\S", text) is not None
