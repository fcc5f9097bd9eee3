# -*- coding: utf-8 -*-
"""
Rate-limited fetch executor.

- run-scoped call budget: only frames absent from the cache at load time are
  charged; re-attempting a cached-but-unconfirmed frame is free
- retry with backoff (2s -> 4s -> 8s) on TransientFetchError, max 3 attempts
- FetchCancelled or running out of attempts => stop signal (not an error)
- anything else propagates and ends the run
- fixed delay after every charged call, to stay under the API's own limits
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, List, Optional

from . import log
from .config import BACKOFF_SCHEDULE, CALL_DELAY_SECS, MAX_ATTEMPTS, REQUEST_LIMIT
from .errors import FetchCancelled, InvalidConfiguration, TransientFetchError

STOP_CANCELLED = "cancelled"
STOP_RETRY_EXHAUSTED = "retry_exhausted"


@dataclass
class ExecResult:
    stopped: bool = False
    reason: Optional[str] = None
    attempts: int = 0


class FetchExecutor:
    def __init__(
        self,
        limit: int = REQUEST_LIMIT,
        delay_secs: float = CALL_DELAY_SECS,
        max_attempts: int = MAX_ATTEMPTS,
        backoff_schedule: Optional[List[float]] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if limit < 0:
            raise InvalidConfiguration(f"request limit must be >= 0, got {limit}")
        if max_attempts < 1:
            raise InvalidConfiguration(f"max_attempts must be >= 1, got {max_attempts}")
        self.limit = limit
        self.delay_secs = delay_secs
        self.max_attempts = max_attempts
        self.backoff_schedule = list(BACKOFF_SCHEDULE if backoff_schedule is None else backoff_schedule)
        self.sleep = sleep
        self.calls_used = 0

    def has_budget(self) -> bool:
        return self.calls_used < self.limit

    def _backoff(self, i: int) -> float:
        if not self.backoff_schedule:
            return 0
        return self.backoff_schedule[min(i, len(self.backoff_schedule) - 1)]

    def _run_with_retry(self, operation: Callable[[], None]) -> ExecResult:
        res = ExecResult()
        for i in range(self.max_attempts):
            res.attempts = i + 1
            try:
                operation()
                return res
            except FetchCancelled as e:
                log.warn(f"operation cancelled the pass: {e}")
                res.stopped, res.reason = True, STOP_CANCELLED
                return res
            except TransientFetchError as e:
                if res.attempts < self.max_attempts:
                    wait_s = self._backoff(i)
                    log.warn(f"transient failure (try {res.attempts}/{self.max_attempts}), retry in {wait_s}s: {e}")
                    self.sleep(wait_s)
                    continue
                log.warn(f"giving up after {res.attempts} attempts: {e}")

        res.stopped, res.reason = True, STOP_RETRY_EXHAUSTED
        return res

    def execute(self, operation: Callable[[], None], charged: bool = True) -> ExecResult:
        if charged:
            self.calls_used += 1
        res = self._run_with_retry(operation)
        if charged:
            self.sleep(self.delay_secs)
        return res
