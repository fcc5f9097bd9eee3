# -*- coding: utf-8 -*-
"""
inflation.csv updater (single bounded backfill pass)

Steps:
1) read inflation.csv (fatal if missing or malformed)
2) daily frames over [DAY_ZERO, today 00:00 UTC)
3) fill gaps: cached confirmed frames are free, at most REQUEST_LIMIT new
   frames hit the BLS API, the open month is carried from the previous day
4) rewrite inflation.csv sorted by date

Exit codes:
- 0 : done, including an early stop on quota/retry exhaustion (next run resumes)
- 1 : any I/O, parse, protocol or configuration error
"""

from __future__ import annotations

import time
from datetime import date, datetime, timezone
from typing import Callable, Optional

import requests

from . import log
from .bls import SeriesResolver
from .budget import FetchExecutor
from .cache_csv import read_cache, write_cache
from .config import USER_AGENT, Settings, load_settings
from .errors import InflationCacheError
from .framer import format_rfc3339, generate, utc_midnight
from .gap_fill import FillReport, fill_gaps


def run(
    settings: Settings,
    session: requests.Session,
    today: Optional[date] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> FillReport:
    today = today or datetime.now(timezone.utc).date()

    cached = read_cache(settings.cache_file)

    start = settings.day_zero
    end = utc_midnight(today)
    frames = generate(start, end, settings.frame_width)

    log.info(
        f"backfill start: range=[{format_rfc3339(start)}, {format_rfc3339(end)}) "
        f"frames={len(frames)} cached_rows={len(cached)} budget={settings.request_limit}"
    )

    executor = FetchExecutor(
        limit=settings.request_limit,
        delay_secs=settings.call_delay_secs,
        max_attempts=settings.max_attempts,
        backoff_schedule=settings.backoff_schedule,
        sleep=sleep,
    )
    resolver = SeriesResolver(session, today, api_key=settings.api_key, timeout=settings.timeout_secs)

    rep = fill_gaps(cached, frames, executor, resolver, width=settings.frame_width)

    n = write_cache(settings.cache_file, rep.points)
    log.info(f"wrote {settings.cache_file} ({n} rows): {rep.summary()}")
    return rep


def main() -> int:
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    try:
        run(load_settings(), session)
    except InflationCacheError as e:
        log.fatal(f"{type(e).__name__}: {e}")
        return 1
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
