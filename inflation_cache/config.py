# -*- coding: utf-8 -*-
"""
Run configuration.

Env:
- INFLATION_CACHE_FILE     (optional, default "inflation.csv")
- INFLATION_DAY_ZERO       (optional, default "2020-12-01T00:00:00Z", RFC3339)
- INFLATION_REQUEST_LIMIT  (optional, default 10, clamped to 0..100)
- BLS_API_KEY              (optional) registration key for higher API limits;
                           has to be renewed every year, the public limit is
                           enough for normal collection
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from .errors import InvalidConfiguration
from .framer import parse_rfc3339

# -------------------------
# cache policy
# -------------------------
CACHE_FILE = "inflation.csv"
DAY_ZERO = "2020-12-01T00:00:00Z"
FRAME_WIDTH = timedelta(hours=24)

# -------------------------
# remote policy
# -------------------------
SERIES_ID = "CUUR0000SA0"  # CPI-U, US city average, all items, NSA
API_FMT = "https://api.bls.gov/publicAPI/v2/timeseries/data/{series_id}?startyear={start}&endyear={end}"
USER_AGENT = "inflation-cache/1.0"

REQUEST_LIMIT = 10  # new (uncached) frames per run
CALL_DELAY_SECS = 0.2

# -------------------------
# network policy
# -------------------------
TIMEOUT_SECS = 10
MAX_ATTEMPTS = 3
BACKOFF_SCHEDULE = [2, 4, 8]
RETRY_STATUS = {429, 500, 502, 503, 504}


def env_int(name: str, default: int, min_v: Optional[int] = None, max_v: Optional[int] = None) -> int:
    """
    Parse env int with fallback, never raising.
    Optional bounds (min_v/max_v) to prevent accidental runaway.
    """
    raw = os.getenv(name, str(default))
    try:
        v = int(str(raw).strip())
    except ValueError:
        return default
    if min_v is not None and v < min_v:
        return min_v
    if max_v is not None and v > max_v:
        return max_v
    return v


def env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    s = raw.strip()
    return s or default


@dataclass(frozen=True)
class Settings:
    cache_file: str = CACHE_FILE
    day_zero: datetime = field(default_factory=lambda: parse_rfc3339(DAY_ZERO))
    request_limit: int = REQUEST_LIMIT
    api_key: str = ""
    timeout_secs: float = TIMEOUT_SECS
    call_delay_secs: float = CALL_DELAY_SECS
    max_attempts: int = MAX_ATTEMPTS
    backoff_schedule: List[int] = field(default_factory=lambda: list(BACKOFF_SCHEDULE))
    frame_width: timedelta = FRAME_WIDTH


def load_settings() -> Settings:
    day_zero_raw = env_str("INFLATION_DAY_ZERO", DAY_ZERO)
    try:
        day_zero = parse_rfc3339(day_zero_raw)
    except ValueError as e:
        raise InvalidConfiguration(f"INFLATION_DAY_ZERO={day_zero_raw!r}: {e}") from e

    return Settings(
        cache_file=env_str("INFLATION_CACHE_FILE", CACHE_FILE),
        day_zero=day_zero,
        request_limit=env_int("INFLATION_REQUEST_LIMIT", REQUEST_LIMIT, min_v=0, max_v=100),
        api_key=os.getenv("BLS_API_KEY", "").strip(),
    )
