"""
Conversation state types.

Defines the turn/entry records held by the ConversationStore and the
errors raised by the in-memory stores.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Literal

TurnRole = Literal["user", "assistant"]


class StoreNotFound(KeyError):
    """append_turn() called for a sender with no entry."""

    def __init__(self, sender_id: str):
        super().__init__(sender_id)
        self.sender_id = sender_id

    def __str__(self) -> str:
        return f"No conversation entry for sender {self.sender_id}"


@dataclass(frozen=True)
class Turn:
    """One chronological message in a conversation."""

    role: TurnRole
    text: str


@dataclass
class ConversationEntry:
    """Per-sender conversation state."""

    sender_id: str                    # Phone number or equivalent
    conversation_id: str              # Assigned at first contact, stable
    last_activity: datetime           # Last accepted inbound message (UTC)
    created_at: datetime
    history: List[Turn] = field(default_factory=list)
    message_count: int = 0

    def snapshot(self) -> "ConversationEntry":
        """Copy safe to hand out of the store."""
        return ConversationEntry(
            sender_id=self.sender_id,
            conversation_id=self.conversation_id,
            last_activity=self.last_activity,
            created_at=self.created_at,
            history=list(self.history),
            message_count=self.message_count,
        )
