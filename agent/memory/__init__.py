"""
Memory module exports.

In-memory conversation state and inbound de-duplication.
"""

from agent.memory.types import ConversationEntry, StoreNotFound, Turn, TurnRole
from agent.memory.conversation_store import DEFAULT_HISTORY_CAP, ConversationStore, utcnow
from agent.memory.dedup import DEFAULT_DEDUP_TTL, DedupCache

__all__ = [
    "ConversationEntry",
    "Turn",
    "TurnRole",
    "StoreNotFound",
    "ConversationStore",
    "DEFAULT_HISTORY_CAP",
    "utcnow",
    "DedupCache",
    "DEFAULT_DEDUP_TTL",
]
