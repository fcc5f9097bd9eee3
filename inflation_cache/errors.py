# -*- coding: utf-8 -*-
"""
Exception taxonomy.

Fatal (process exits non-zero via update.main):
- InvalidConfiguration, CacheIOError, CacheFormatError (+ subclasses), ProtocolError

Recoverable at the executor level (never reach main):
- TransientFetchError : retried with back-off, then stops the pass
- FetchCancelled      : stops the pass immediately, no retry
"""

from __future__ import annotations

from typing import Optional


class InflationCacheError(Exception):
    """Base for every error the runner turns into a fatal exit."""


class InvalidConfiguration(InflationCacheError):
    pass


class CacheIOError(InflationCacheError):
    pass


class CacheFormatError(InflationCacheError):
    def __init__(self, msg: str, line: Optional[int] = None) -> None:
        self.line = line
        if line is not None:
            msg = f"line {line}: {msg}"
        super().__init__(msg)


class MalformedRow(CacheFormatError):
    pass


class MalformedDate(CacheFormatError):
    pass


class MalformedNumber(CacheFormatError):
    pass


class MalformedFlag(CacheFormatError):
    pass


class ProtocolError(InflationCacheError):
    """The remote answered with something we refuse to interpret."""

    def __init__(self, msg: str, body: str = "") -> None:
        self.body = body
        if body:
            msg = f"{msg}; body={body}"
        super().__init__(msg)


class TransientFetchError(Exception):
    """Timeout / connection error / retryable HTTP status."""


class FetchCancelled(Exception):
    """The operation asked for the whole pass to stop (e.g. API daily quota reached)."""
