#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Update ./inflation.csv (CPI-U month-over-month inflation, one row per day).
Requires the package to be installed (pip install -e .).

Env:
- INFLATION_CACHE_FILE (optional, default "inflation.csv")
- INFLATION_REQUEST_LIMIT (optional, default 10)
- BLS_API_KEY (optional)
"""

from __future__ import annotations

from inflation_cache.update import main


if __name__ == "__main__":
    raise SystemExit(main())
