# -*- coding: utf-8 -*-
"""Tagged plain-text log lines: [INFO] to stdout, [WARN]/[FATAL] to stderr."""

from __future__ import annotations

import sys


def info(msg: str) -> None:
    print(f"[INFO] {msg}", flush=True)


def warn(msg: str) -> None:
    print(f"[WARN] {msg}", file=sys.stderr, flush=True)


def fatal(msg: str) -> None:
    print(f"[FATAL] {msg}", file=sys.stderr, flush=True)
