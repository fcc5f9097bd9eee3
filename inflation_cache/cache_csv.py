# -*- coding: utf-8 -*-
"""
inflation.csv read/write.

Format (UTF-8):
    date,inflation,updated
    2020-12-01T00:00:00Z,0.01362,1

- date      : RFC3339, UTC
- inflation : decimal (any valid decimal on read, 5 fractional digits on write)
- updated   : 1 = confirmed by a remote observation, 0 = carried from the previous day

The loader is strict: the cache is the ground truth for confirmed data, so any
bad row is fatal instead of being skipped.
"""

from __future__ import annotations

import csv
import math
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Sequence, Union

from .errors import CacheIOError, MalformedDate, MalformedFlag, MalformedNumber, MalformedRow
from .framer import format_rfc3339, parse_rfc3339

CSV_FIELDNAMES = ["date", "inflation", "updated"]


@dataclass(frozen=True)
class Point:
    value: float
    confirmed: bool


@dataclass(frozen=True)
class ResultRow:
    date: datetime
    inflation: float
    updated: int


# -------------------------
# read
# -------------------------
def parse_rows(raw_rows: Iterable[Sequence[str]]) -> Dict[datetime, Point]:
    out: Dict[datetime, Point] = {}
    for i, row in enumerate(raw_rows):
        line = i + 1
        if i == 0:
            continue  # header
        if not row or all(not str(c).strip() for c in row):
            continue
        if len(row) != 3:
            raise MalformedRow(f"expected 3 columns, got {len(row)}: {list(row)}", line=line)

        d_raw, v_raw, flag = (str(c).strip() for c in row)

        try:
            d = parse_rfc3339(d_raw)
        except ValueError as e:
            raise MalformedDate(str(e), line=line) from e

        try:
            v = float(v_raw)
        except ValueError as e:
            raise MalformedNumber(f"bad inflation value {v_raw!r}", line=line) from e
        if not math.isfinite(v):
            raise MalformedNumber(f"non-finite inflation value {v_raw!r}", line=line)

        if flag == "0":
            out[d] = Point(v, confirmed=False)
        elif flag == "1":
            out[d] = Point(v, confirmed=True)
        else:
            raise MalformedFlag(f"updated flag must be 0 or 1, got {flag!r}", line=line)

    return out


def read_cache(path: Union[str, Path]) -> Dict[datetime, Point]:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
    except OSError as e:
        raise CacheIOError(f"cannot read {p}: {type(e).__name__}: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedRow(f"{p}: not UTF-8: {e}") from e
    except csv.Error as e:
        raise MalformedRow(f"{p}: {e}") from e
    return parse_rows(rows)


# -------------------------
# write
# -------------------------
def to_rows(points: Dict[datetime, Point]) -> List[ResultRow]:
    rows = [
        ResultRow(date=k, inflation=v.value, updated=1 if v.confirmed else 0)
        for k, v in points.items()
    ]
    rows.sort(key=lambda r: r.date)
    return rows


def write_cache(path: Union[str, Path], points: Dict[datetime, Point]) -> int:
    """Rewrite the whole cache (tmp file + os.replace). Returns the number of data rows."""
    p = Path(path)
    rows = to_rows(points)
    tmp = p.with_name(p.name + ".tmp")
    try:
        if p.parent and not p.parent.exists():
            p.parent.mkdir(parents=True, exist_ok=True)
        with tmp.open("w", encoding="utf-8", newline="") as f:
            w = csv.writer(f, lineterminator="\n")
            w.writerow(CSV_FIELDNAMES)
            for r in rows:
                w.writerow([format_rfc3339(r.date), f"{r.inflation:.5f}", str(r.updated)])
        os.replace(tmp, p)
    except OSError as e:
        raise CacheIOError(f"cannot write {p}: {type(e).__name__}: {e}") from e
    return len(rows)
