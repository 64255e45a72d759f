"""
Inbound message de-duplication.

Providers redeliver webhooks. Every message id is remembered from the
moment it is accepted until dedup_ttl has passed, so a redelivery inside
that window is dropped without side effects.

Eviction is time-bounded only: ids expire one by one on sweep, never in
bulk, so an accepted id is never forgotten early.
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from agent.memory.conversation_store import utcnow

logger = logging.getLogger(__name__)

DEFAULT_DEDUP_TTL = timedelta(hours=24)


class DedupCache:
    """Set of accepted message ids with per-id acceptance time."""

    def __init__(
        self,
        ttl: timedelta = DEFAULT_DEDUP_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.ttl = ttl
        self._clock = clock
        self._accepted: Dict[str, datetime] = {}
        self._lock = threading.RLock()

    def is_duplicate(self, message_id: str) -> bool:
        """True if message_id was accepted before. Does not mutate."""
        with self._lock:
            return message_id in self._accepted

    def mark_accepted(self, message_id: str) -> None:
        """Record message_id as accepted. Call before any side effect."""
        if not message_id:
            raise ValueError("message_id is required")
        with self._lock:
            self._accepted.setdefault(message_id, self._clock())

    def evict_expired(self, now: Optional[datetime] = None) -> int:
        """
        Forget ids accepted more than ttl ago.

        Returns:
            Number of ids evicted
        """
        now = now or self._clock()
        cutoff = now - self.ttl
        with self._lock:
            expired = [mid for mid, accepted_at in self._accepted.items() if accepted_at < cutoff]
            for mid in expired:
                del self._accepted[mid]
        if expired:
            logger.debug(f"Evicted {len(expired)} dedup records")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._accepted)
