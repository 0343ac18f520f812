"""Request counters shared by the load workers."""
from __future__ import annotations

import logging
import sys
import threading
from typing import Optional

from dnsFlail.generator.models import StatsSnapshot
from dnsFlail.logging_config import get_logger

logger = get_logger("generator")


class StatsCounter:
    """Thread-safe request/success/failure counters.

    Both record methods bump the request total in the same critical section
    as the outcome counter, so ``requests == successes + failures`` holds for
    every snapshot.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests = 0
        self._successes = 0
        self._failures = 0

    def record_success(self) -> StatsSnapshot:
        with self._lock:
            self._requests += 1
            self._successes += 1
            return self._snapshot_locked()

    def record_failure(self) -> StatsSnapshot:
        with self._lock:
            self._requests += 1
            self._failures += 1
            return self._snapshot_locked()

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def _snapshot_locked(self) -> StatsSnapshot:
        return StatsSnapshot(
            requests=self._requests,
            successes=self._successes,
            failures=self._failures,
        )

    def report(
        self,
        log: Optional[logging.Logger] = None,
        snapshot: Optional[StatsSnapshot] = None,
    ) -> None:
        """Log the counters at INFO. Never raises."""
        try:
            snap = snapshot or self.snapshot()
            (log or logger).info(
                snap.summary(),
                extra={
                    "requests": snap.requests,
                    "successes": snap.successes,
                    "failures": snap.failures,
                },
            )
        except Exception as exc:
            sys.stderr.write(f"Failed to report statistics: {exc}\n")
