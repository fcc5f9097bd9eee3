# -*- coding: utf-8 -*-
"""
Daily frames over [start, end).

The last frame start is the largest start + k*width that is strictly < end,
so with end = today 00:00 UTC the current day is not part of the run.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import List, Union

from .errors import InvalidConfiguration


@dataclass(frozen=True)
class Frame:
    start: datetime
    end: datetime


# -----------------------
# time helpers
# -----------------------
_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})?$"
)


def parse_rfc3339(s: str) -> datetime:
    """Parse '2020-12-01T00:00:00Z' style timestamps into UTC. Naive input is a ValueError."""
    m = _RFC3339.match((s or "").strip())
    if not m:
        raise ValueError(f"not an RFC3339 timestamp: {s!r}")
    day, clock, frac, offset = m.groups()
    if offset is None:
        raise ValueError(f"timestamp has no UTC offset: {s!r}")
    if offset in ("Z", "z"):
        offset = "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    frac = f".{(frac + '000000')[:6]}" if frac else ""
    dt = datetime.fromisoformat(f"{day}T{clock}{frac}{offset}")
    return dt.astimezone(timezone.utc)


def format_rfc3339(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


def utc_midnight(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        value = value.date()
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def generate(start: datetime, end: datetime, width: timedelta) -> List[Frame]:
    if width <= timedelta(0):
        raise InvalidConfiguration(f"frame width must be positive, got {width}")
    if start.tzinfo is None or end.tzinfo is None:
        raise InvalidConfiguration("frame bounds must be timezone-aware")
    if start > end:
        raise InvalidConfiguration(f"start {format_rfc3339(start)} is after end {format_rfc3339(end)}")

    frames: List[Frame] = []
    cur = start
    while cur < end:
        frames.append(Frame(start=cur, end=cur + width))
        cur = cur + width
    return frames
