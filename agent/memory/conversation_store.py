"""
In-memory conversation store.

Holds per-sender conversation state for the relay. Entries live until the
sender goes quiet for longer than the retention window or the conversation
is cleared explicitly.

Key properties:
- history never exceeds history_cap turns; oldest turns are dropped first
- all map operations are atomic under one re-entrant lock
- callers receive snapshots, never the live entry
- no persistence: a restart starts from an empty store
"""

import logging
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional

from agent.memory.types import ConversationEntry, StoreNotFound, Turn

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_CAP = 20


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    """
    Keyed store of ConversationEntry objects, one per sender.
    """

    def __init__(
        self,
        history_cap: int = DEFAULT_HISTORY_CAP,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Args:
            history_cap: Maximum number of turns kept per sender
            clock: Returns the current UTC time (injectable for tests)
        """
        if history_cap < 2:
            raise ValueError("history_cap must hold at least one exchange (2 turns)")
        self.history_cap = history_cap
        self._clock = clock
        self._entries: Dict[str, ConversationEntry] = {}
        self._lock = threading.RLock()

    def get_or_create(self, sender_id: str) -> ConversationEntry:
        """
        Return the sender's entry, creating an empty one on first contact.

        Called once per accepted message, so an existing entry has its
        last_activity refreshed here. History and message_count only change
        in append_turn().
        """
        with self._lock:
            now = self._clock()
            entry = self._entries.get(sender_id)
            if entry is not None:
                entry.last_activity = now
            else:
                entry = ConversationEntry(
                    sender_id=sender_id,
                    conversation_id=uuid.uuid4().hex,
                    last_activity=now,
                    created_at=now,
                )
                self._entries[sender_id] = entry
                logger.debug(
                    f"Conversation created for {sender_id}",
                    extra={"sender_id": sender_id, "conversation_id": entry.conversation_id},
                )
            return entry.snapshot()

    def get(self, sender_id: str) -> Optional[ConversationEntry]:
        """Return a snapshot of the sender's entry, or None."""
        with self._lock:
            entry = self._entries.get(sender_id)
            return entry.snapshot() if entry is not None else None

    def append_turn(self, sender_id: str, user_text: str, assistant_text: str) -> ConversationEntry:
        """
        Record one exchange for the sender.

        Raises:
            StoreNotFound: get_or_create() was not called for this sender
                           (or the entry was removed in between)
        """
        with self._lock:
            entry = self._entries.get(sender_id)
            if entry is None:
                raise StoreNotFound(sender_id)

            entry.history.append(Turn(role="user", text=user_text))
            entry.history.append(Turn(role="assistant", text=assistant_text))

            overflow = len(entry.history) - self.history_cap
            if overflow > 0:
                del entry.history[:overflow]

            entry.message_count += 1
            entry.last_activity = self._clock()
            return entry.snapshot()

    def remove(self, sender_id: str) -> bool:
        """Delete the sender's entry. Returns False if there was none."""
        with self._lock:
            return self._entries.pop(sender_id, None) is not None

    def sweep_expired(self, retention: timedelta, now: Optional[datetime] = None) -> int:
        """
        Remove every entry idle for longer than `retention`.

        Returns:
            Number of entries removed
        """
        now = now or self._clock()
        cutoff = now - retention
        with self._lock:
            expired = [
                sender_id
                for sender_id, entry in self._entries.items()
                if entry.last_activity < cutoff
            ]
            for sender_id in expired:
                del self._entries[sender_id]
        return len(expired)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "conversations": len(self._entries),
                "turns": sum(len(e.history) for e in self._entries.values()),
            }

    def __contains__(self, sender_id: object) -> bool:
        with self._lock:
            return sender_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
