"""
Expiry sweeper.

Background maintenance task that evicts idle conversations and expired
dedup records on a fixed interval, independent of request traffic.

A failing sweep is logged and skipped; the next cycle runs as scheduled.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from agent.memory import ConversationStore, DedupCache, utcnow

logger = logging.getLogger(__name__)

DEFAULT_RETENTION = timedelta(hours=24)
DEFAULT_INTERVAL_S = 300.0


@dataclass(frozen=True)
class SweepReport:
    conversations_removed: int
    dedup_removed: int


class ExpirySweeper:
    """Periodic eviction over a ConversationStore and DedupCache."""

    def __init__(
        self,
        store: ConversationStore,
        dedup: DedupCache,
        retention: timedelta = DEFAULT_RETENTION,
        interval_s: float = DEFAULT_INTERVAL_S,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.dedup = dedup
        self.retention = retention
        self.interval_s = interval_s
        self._clock = clock
        self._task: Optional[asyncio.Task] = None
        self.cycles = 0
        self.failures = 0

    def sweep_once(self) -> Optional[SweepReport]:
        """Run one sweep. Returns None if the sweep failed."""
        now = self._clock()
        try:
            conversations = self.store.sweep_expired(self.retention, now)
            dedup = self.dedup.evict_expired(now)
        except Exception as e:
            self.failures += 1
            logger.error(f"Expiry sweep failed: {e}", exc_info=True)
            return None

        self.cycles += 1
        if conversations or dedup:
            logger.info(
                f"Expiry sweep removed {conversations} conversations, {dedup} dedup records",
                extra={"conversations_removed": conversations, "dedup_removed": dedup},
            )
        return SweepReport(conversations_removed=conversations, dedup_removed=dedup)

    def sweep_now(self) -> int:
        """Sweep immediately. Returns the number of conversations removed."""
        report = self.sweep_once()
        return report.conversations_removed if report else 0

    async def _run(self) -> None:
        logger.info(f"Expiry sweeper started (every {self.interval_s}s, retention {self.retention})")
        while True:
            await asyncio.sleep(self.interval_s)
            self.sweep_once()

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(), name="expiry-sweeper")

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Expiry sweeper stopped")

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()
