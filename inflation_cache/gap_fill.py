# -*- coding: utf-8 -*-
"""
One backfill pass over daily frames.

Per frame, ascending:
1. cached + confirmed          -> copy, free
2. pass stopped / no budget    -> keep the cached (unconfirmed) point if any, else leave unresolved
3. otherwise                   -> executor(resolve), charged only if the frame was not cached
   - number                    -> confirmed point
   - None (open month)         -> previous day's value carried as unconfirmed;
                                  without a previous day keep the cached point or leave unresolved
   - stop signal               -> remaining frames only carry what the cache already had

Unresolved frames get no row and are retried on a later run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from . import log
from .budget import FetchExecutor
from .cache_csv import Point
from .config import FRAME_WIDTH
from .framer import Frame, format_rfc3339

Resolver = Callable[[datetime], Optional[float]]


@dataclass
class FillReport:
    points: Dict[datetime, Point] = field(default_factory=dict)
    cached: int = 0
    fetched: int = 0
    derived: int = 0
    carried: int = 0
    unresolved: int = 0
    calls_used: int = 0
    stop_reason: Optional[str] = None

    def summary(self) -> str:
        return (
            f"rows={len(self.points)} cached={self.cached} fetched={self.fetched} "
            f"derived={self.derived} carried={self.carried} unresolved={self.unresolved} "
            f"calls_used={self.calls_used} stop={self.stop_reason or 'NA'}"
        )


def _derive(prev: Optional[Point]) -> Optional[Point]:
    if prev is None:
        return None
    return Point(prev.value, confirmed=False)


def fill_gaps(
    cached: Dict[datetime, Point],
    frames: List[Frame],
    executor: FetchExecutor,
    resolve: Resolver,
    width: timedelta = FRAME_WIDTH,
) -> FillReport:
    rep = FillReport()
    out = rep.points
    calls_before = executor.calls_used

    def carry(key: datetime) -> None:
        pt = cached.get(key)
        if pt is None:
            rep.unresolved += 1
            return
        out[key] = pt
        rep.carried += 1

    for fr in frames:
        key = fr.start
        hit = cached.get(key)

        if hit is not None and hit.confirmed:
            out[key] = hit
            rep.cached += 1
            continue

        if rep.stop_reason is not None or not executor.has_budget():
            carry(key)
            continue

        log.info(f"filling remote inflation for {format_rfc3339(key)}")
        resolved: Dict[str, Optional[Point]] = {}

        def action() -> None:
            v = resolve(key)
            if v is not None:
                resolved["point"] = Point(v, confirmed=True)
                return
            resolved["point"] = _derive(out.get(key - width))
            resolved["derived"] = resolved["point"]

        res = executor.execute(action, charged=hit is None)
        if res.stopped:
            rep.stop_reason = res.reason
            log.warn(f"stopping pass at {format_rfc3339(key)}: {res.reason}")
            carry(key)
            continue

        pt = resolved.get("point")
        if pt is None:
            carry(key)
        else:
            out[key] = pt
            if "derived" in resolved:
                rep.derived += 1
            else:
                rep.fetched += 1

    rep.calls_used = executor.calls_used - calls_before
    return rep
