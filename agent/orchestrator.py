"""
Conversation Orchestrator

Main entry point for inbound message handling. Given one validated inbound
message it decides whether the message is new, attaches the sender's recent
context, calls the completion backend and records the exchange.

Per-message state machine:

    RECEIVED → VALIDATED → DEDUPED → CONTEXT_LOADED → COMPLETED → REPLIED

with terminal exits REJECTED_INVALID, REJECTED_EMPTY, REJECTED_DUPLICATE
(no reply) and FAILED_CONFIG, FAILED_TRANSIENT (fixed apology), FAILED_STORE
(reply dropped).

The dedup mark is committed before the completion call. A message whose
processing is interrupted after that point is never processed again.
"""

import asyncio
import logging
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Dict, Optional

from agent.memory import ConversationStore, DedupCache, StoreNotFound
from agent.prompting import (
    DEFAULT_PERSONA,
    DEFAULT_WINDOW_TURNS,
    build_completion_input,
    system_prompt_for,
)
from inference import (
    CompletionError,
    ConfigError,
    ModelBackend,
    ModelRequest,
    ProviderError,
    raise_for_response,
)

logger = logging.getLogger(__name__)

CONFIG_APOLOGY = (
    "I'm sorry, but the AI service is not properly configured. Please contact support."
)
TRANSIENT_APOLOGY = (
    "I'm sorry, I'm having trouble processing your request right now. "
    "Please try again in a moment."
)


class MessageState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    DEDUPED = "deduped"
    CONTEXT_LOADED = "context_loaded"
    COMPLETED = "completed"
    REPLIED = "replied"
    REJECTED_INVALID = "rejected_invalid"
    REJECTED_EMPTY = "rejected_empty"
    REJECTED_DUPLICATE = "rejected_duplicate"
    FAILED_CONFIG = "failed_config"
    FAILED_TRANSIENT = "failed_transient"
    FAILED_STORE = "failed_store"


@dataclass(frozen=True)
class HandleResult:
    """Terminal outcome of one handle_message() call."""

    state: MessageState
    reply: Optional[str] = None
    conversation_id: Optional[str] = None


class ConversationOrchestrator:
    """
    Owns the per-message pipeline over the conversation store and dedup cache.

    Messages for the same sender are processed one at a time; different
    senders run concurrently. The completion call is the only await.
    """

    def __init__(
        self,
        store: ConversationStore,
        dedup: DedupCache,
        model_backend: ModelBackend,
        persona: str = DEFAULT_PERSONA,
        window_size: int = DEFAULT_WINDOW_TURNS,
        timeout_s: Optional[int] = 30,
        strict: bool = False,
    ):
        """
        Args:
            store: Conversation store shared with the sweeper
            dedup: Dedup cache shared with the sweeper
            model_backend: Completion collaborator
            persona: Base system prompt
            window_size: Turns of history sent per request
            timeout_s: Passed to the backend with every request
            strict: Raise StoreNotFound instead of dropping the reply
        """
        self.store = store
        self.dedup = dedup
        self.model_backend = model_backend
        self.persona = persona
        self.window_size = window_size
        self.timeout_s = timeout_s
        self.strict = strict

        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}
        self._outcomes: Counter = Counter()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def handle(self, sender_id: str, message_id: str, text: str) -> Optional[str]:
        """Process one inbound message. Returns the reply text or None."""
        result = await self.handle_message(sender_id, message_id, text)
        return result.reply

    async def handle_message(
        self,
        sender_id: Optional[str],
        message_id: Optional[str],
        text: Optional[str],
    ) -> HandleResult:
        """Process one inbound message and report the terminal state."""
        if not sender_id or not message_id:
            return self._finish(sender_id, message_id, HandleResult(MessageState.REJECTED_INVALID))
        if text is None or not text.strip():
            return self._finish(sender_id, message_id, HandleResult(MessageState.REJECTED_EMPTY))

        async with self._serialized(sender_id):
            if self.dedup.is_duplicate(message_id):
                return self._finish(
                    sender_id, message_id, HandleResult(MessageState.REJECTED_DUPLICATE)
                )
            self.dedup.mark_accepted(message_id)

            entry = self.store.get_or_create(sender_id)
            window = build_completion_input(entry.history, text, self.window_size)

            request = ModelRequest(
                prompt=text,
                history=window.history,
                system_prompt=system_prompt_for(window.variant, self.persona),
                timeout_s=self.timeout_s,
                trace_id=message_id,
            )

            try:
                reply = await self._complete(request)
            except ConfigError as e:
                logger.error(
                    f"Completion unavailable: {e}",
                    extra={"sender_id": sender_id, "message_id": message_id},
                )
                return self._finish(
                    sender_id,
                    message_id,
                    HandleResult(MessageState.FAILED_CONFIG, CONFIG_APOLOGY, entry.conversation_id),
                )
            except CompletionError as e:
                logger.warning(
                    f"Completion failed ({e.error_type}): {e}",
                    extra={"sender_id": sender_id, "message_id": message_id},
                )
                return self._finish(
                    sender_id,
                    message_id,
                    HandleResult(
                        MessageState.FAILED_TRANSIENT, TRANSIENT_APOLOGY, entry.conversation_id
                    ),
                )

            try:
                self.store.append_turn(sender_id, text, reply)
            except StoreNotFound:
                if self.strict:
                    raise
                logger.error(
                    f"Conversation for {sender_id} vanished before the reply was recorded",
                    exc_info=True,
                    extra={"sender_id": sender_id, "message_id": message_id},
                )
                return self._finish(
                    sender_id,
                    message_id,
                    HandleResult(MessageState.FAILED_STORE, None, entry.conversation_id),
                )

            return self._finish(
                sender_id,
                message_id,
                HandleResult(MessageState.REPLIED, reply, entry.conversation_id),
            )

    def clear_conversation(self, sender_id: str) -> bool:
        """Forget the sender's conversation. Returns False if there was none."""
        removed = self.store.remove(sender_id)
        if removed:
            logger.info(f"Conversation cleared for {sender_id}", extra={"sender_id": sender_id})
        return removed

    def stats(self) -> Dict[str, int]:
        """Count of messages per terminal state since start-up."""
        return {state.value: count for state, count in self._outcomes.items()}

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _serialized(self, sender_id: str) -> AsyncIterator[None]:
        """Hold the sender's lock; the lock is dropped once nobody uses it."""
        lock = self._locks.get(sender_id)
        if lock is None:
            lock = self._locks[sender_id] = asyncio.Lock()
        self._lock_users[sender_id] = self._lock_users.get(sender_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[sender_id] -= 1
            if self._lock_users[sender_id] == 0:
                del self._lock_users[sender_id]
                del self._locks[sender_id]

    async def _complete(self, request: ModelRequest) -> str:
        """Run the blocking backend call off the event loop."""
        try:
            response = await asyncio.to_thread(self.model_backend.generate, request)
        except Exception as e:
            raise ProviderError(f"Backend raised {type(e).__name__}: {e}") from e
        return raise_for_response(response)

    def _finish(
        self,
        sender_id: Optional[str],
        message_id: Optional[str],
        result: HandleResult,
    ) -> HandleResult:
        self._outcomes[result.state] += 1
        extra = {"sender_id": sender_id, "message_id": message_id, "state": result.state.value}

        if result.state is MessageState.REPLIED:
            logger.info(f"Reply generated for {sender_id}", extra=extra)
        else:
            logger.debug(f"Message {message_id} finished as {result.state.value}", extra=extra)
        return result
