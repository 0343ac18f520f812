"""The load loop: sample, send, count, pace, report."""
from __future__ import annotations

import asyncio
import logging
import random
from enum import Enum
from typing import Optional

from dnsFlail.generator.corpus import NameCorpus
from dnsFlail.generator.models import StatsSnapshot
from dnsFlail.generator.resolver import ResolverClient, SendError
from dnsFlail.generator.stats import StatsCounter
from dnsFlail.logging_config import get_logger, reset_worker_id, set_worker_id

logger = get_logger("generator")

DEFAULT_PACE_SECONDS = 0.005
DEFAULT_REPORT_EVERY = 10


class LoopState(Enum):
    """Load loop states."""
    RUNNING = "running"
    TERMINATED = "terminated"


class LoadLoop:
    """Issues queries until stopped, one at a time per worker.

    A failed query is logged and counted, never raised: the loop keeps
    generating load whatever the server does. The pacing delay is fixed.
    """

    def __init__(
        self,
        corpus: NameCorpus,
        client: ResolverClient,
        stats: StatsCounter,
        *,
        rng: Optional[random.Random] = None,
        pace_seconds: float = DEFAULT_PACE_SECONDS,
        report_every: int = DEFAULT_REPORT_EVERY,
        workers: int = 1,
        log: Optional[logging.Logger] = None,
    ) -> None:
        if report_every < 1:
            raise ValueError("report_every must be at least 1")
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if pace_seconds < 0:
            raise ValueError("pace_seconds must not be negative")
        self.corpus = corpus
        self.client = client
        self.stats = stats
        self.rng = rng or random.SystemRandom()
        self.pace_seconds = pace_seconds
        self.report_every = report_every
        self.workers = workers
        self.log = log or logger
        self.state: Optional[LoopState] = None
        self._stop = asyncio.Event()
        self._issued = 0

    def stop(self) -> None:
        """Ask every worker to finish its current query and exit."""
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    async def run(self, max_iterations: Optional[int] = None) -> StatsSnapshot:
        """Run until stop() is called or max_iterations queries were issued.

        Each call starts afresh: a stop requested before or during an earlier
        run does not carry over.
        """
        self.state = LoopState.RUNNING
        self._issued = 0
        self._stop.clear()
        self.log.info(
            f"Load loop starting against {self.client.server}",
            extra={
                "state": "running",
                "server": self.client.server.address,
                "port": self.client.server.port,
                "corpus_size": len(self.corpus),
                "pace_ms": self.pace_seconds * 1000,
                "report_every": self.report_every,
                "workers": self.workers,
            },
        )
        try:
            if self.workers == 1:
                await self._worker(None, max_iterations)
            else:
                await asyncio.gather(
                    *(self._worker(index, max_iterations) for index in range(self.workers))
                )
        finally:
            self.state = LoopState.TERMINATED
            final = self.stats.snapshot()
            self.log.info(
                f"Load loop stopped: {final.summary()}",
                extra={
                    "state": "terminated",
                    "requests": final.requests,
                    "successes": final.successes,
                    "failures": final.failures,
                },
            )
        return self.stats.snapshot()

    def _claim(self, max_iterations: Optional[int]) -> bool:
        # Workers share one event loop, so this needs no lock.
        if max_iterations is not None and self._issued >= max_iterations:
            return False
        self._issued += 1
        return True

    async def _worker(self, index: Optional[int], max_iterations: Optional[int]) -> None:
        token = set_worker_id(f"worker-{index}") if index is not None else None
        try:
            while not self._stop.is_set() and self._claim(max_iterations):
                await self.step()
        finally:
            if token is not None:
                reset_worker_id(token)

    async def step(self) -> StatsSnapshot:
        """Run a single iteration and return the counters after it."""
        name = self.corpus.sample(self.rng)
        try:
            await self.client.send(name)
        except SendError as exc:
            self.log.error(
                f"{exc.name}: {exc.cause}",
                exc_info=exc.__cause__ if self.log.isEnabledFor(logging.DEBUG) else None,
                extra={
                    "qname": exc.name,
                    "cause": exc.cause,
                    "error_type": type(exc.__cause__).__name__ if exc.__cause__ else None,
                    "outcome": "failure",
                },
            )
            snapshot = self.stats.record_failure()
        else:
            snapshot = self.stats.record_success()

        await self._pace()

        if snapshot.requests % self.report_every == 0:
            self.stats.report(self.log, snapshot)
        return snapshot

    async def _pace(self) -> None:
        if self._stop.is_set():
            return
        if self.pace_seconds <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=self.pace_seconds)
        except asyncio.TimeoutError:
            pass
