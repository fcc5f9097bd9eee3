# -*- coding: utf-8 -*-
"""
BLS CPI-U resolver.

For a target day we fetch the window [year-2, year] of CUUR0000SA0 and compute
the year-over-year change of that month's index:

    inflation = value(year, Mmm) / value(year-1, Mmm) - 1

Policy:
- the current, still-open month has no finalized figure => None (no request)
- a missing or zero index on either side => None (not published yet)
- exactly one series must come back; anything else aborts with the raw body,
  a changed API shape must not silently produce wrong numbers
- "REQUEST_NOT_PROCESSED" (daily threshold reached) cancels the pass

Transport errors are classified, not retried here; the executor owns retries.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple, Union

import requests

from .config import API_FMT, RETRY_STATUS, SERIES_ID, TIMEOUT_SECS
from .errors import FetchCancelled, MalformedNumber, ProtocolError, TransientFetchError

MISSING_VALUES = {"", "-", "NA", "N/A"}


def api_url(start_year: int, end_year: int, series_id: str = SERIES_ID, api_key: str = "") -> str:
    url = API_FMT.format(series_id=series_id, start=start_year, end=end_year)
    if api_key:
        url += f"&registrationkey={requests.utils.quote(api_key)}"
    return url


def redact(s: str, api_key: str = "") -> str:
    """Never let the registration key reach a log line or an error message."""
    if not s:
        return s
    if api_key and api_key in s:
        s = s.replace(api_key, "***REDACTED***")
    return re.sub(r"registrationkey=[^&\s]+", "registrationkey=***REDACTED***", s, flags=re.IGNORECASE)


def _as_day(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def is_open_month(day: Union[date, datetime], today: Union[date, datetime]) -> bool:
    d, t = _as_day(day), _as_day(today)
    return (d.year, d.month) == (t.year, t.month)


# -------------------------
# http
# -------------------------
def _http_get(session: requests.Session, url: str, timeout: float, api_key: str = "") -> str:
    safe_url = redact(url, api_key)
    try:
        r = session.get(url, timeout=timeout)
    except requests.Timeout as e:
        raise TransientFetchError(f"timeout: {safe_url}") from e
    except requests.ConnectionError as e:
        raise TransientFetchError(f"req_exc:{type(e).__name__}: {safe_url}") from e

    if r.status_code in RETRY_STATUS:
        raise TransientFetchError(f"http_{r.status_code}: {safe_url}")
    if r.status_code != 200:
        raise ProtocolError(f"http_{r.status_code}: {safe_url}", body=redact(r.text, api_key))
    return r.text


def fetch_series(
    session: requests.Session,
    start_year: int,
    end_year: int,
    api_key: str = "",
    timeout: float = TIMEOUT_SECS,
) -> List[Dict[str, Any]]:
    """Returns the data points of the single series in the response envelope."""
    text = _http_get(session, api_url(start_year, end_year, api_key=api_key), timeout, api_key)
    body = redact(text, api_key)

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"bad_json: {e}", body=body) from e
    if not isinstance(payload, dict):
        raise ProtocolError("envelope is not an object", body=body)

    if payload.get("status") == "REQUEST_NOT_PROCESSED":
        msgs = payload.get("message") or []
        raise FetchCancelled(f"request not processed: {'; '.join(str(m) for m in msgs) or 'NA'}")

    results = payload.get("Results")
    series = results.get("series") if isinstance(results, dict) else None
    if not isinstance(series, list) or len(series) != 1:
        n = len(series) if isinstance(series, list) else 0
        raise ProtocolError(f"expected exactly 1 series, got {n}", body=body)

    data = series[0].get("data") if isinstance(series[0], dict) else None
    if not isinstance(data, list):
        raise ProtocolError("series has no data list", body=body)
    return [x for x in data if isinstance(x, dict)]


# -------------------------
# extraction
# -------------------------
def _to_float(s: Any) -> Optional[float]:
    ss = str(s if s is not None else "").strip()
    if ss in MISSING_VALUES:
        return None
    try:
        return float(ss.replace(",", ""))
    except ValueError as e:
        raise MalformedNumber(f"bad series value {ss!r}") from e


def extract_month_values(data: List[Dict[str, Any]], day: Union[date, datetime]) -> Tuple[Optional[float], Optional[float]]:
    """Returns (current, previous): day's month in day's year, and the same month one year earlier."""
    d = _as_day(day)
    period = f"M{d.month:02d}"
    cur_year, prev_year = str(d.year), str(d.year - 1)

    current: Optional[float] = None
    previous: Optional[float] = None
    for x in data:
        if str(x.get("period", "")) != period:
            continue
        year = str(x.get("year", ""))
        if year == cur_year:
            current = _to_float(x.get("value"))
        elif year == prev_year:
            previous = _to_float(x.get("value"))
    return current, previous


def month_over_month(current: Optional[float], previous: Optional[float]) -> Optional[float]:
    if not current or not previous:
        return None
    return (current / previous) - 1


def resolve(
    session: requests.Session,
    day: Union[date, datetime],
    today: Union[date, datetime],
    api_key: str = "",
    timeout: float = TIMEOUT_SECS,
) -> Optional[float]:
    if is_open_month(day, today):
        return None

    d = _as_day(day)
    data = fetch_series(session, d.year - 2, d.year, api_key=api_key, timeout=timeout)
    current, previous = extract_month_values(data, d)
    return month_over_month(current, previous)


class SeriesResolver:
    """Binds session/today/key so the gap filler only has to pass the day."""

    def __init__(
        self,
        session: requests.Session,
        today: Union[date, datetime],
        api_key: str = "",
        timeout: float = TIMEOUT_SECS,
    ) -> None:
        self.session = session
        self.today = _as_day(today)
        self.api_key = api_key
        self.timeout = timeout

    def __call__(self, day: Union[date, datetime]) -> Optional[float]:
        return resolve(self.session, day, self.today, api_key=self.api_key, timeout=self.timeout)
