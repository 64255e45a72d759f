"""
Infrastructure initialization and bootstrap.

Builds the process-wide relay context once at start-up: completion backend,
conversation store, dedup cache, orchestrator, sweeper and outbound sender.
The instance is passed to the app explicitly; several independent instances
can coexist in one process (tests do this).
"""

from typing import Optional

from agent.memory import ConversationStore, DedupCache
from agent.orchestrator import ConversationOrchestrator
from agent.prompting import load_persona
from agent.sweeper import ExpirySweeper
from inference import ModelBackend
from transport.whatsapp.sender import InfobipSender

from .config import InfraConfig, get_config


class InfraBootstrap:
    """
    Relay context built from configuration.
    """

    def __init__(
        self,
        config: Optional[InfraConfig] = None,
        llm_backend: Optional[ModelBackend] = None,
        sender: Optional[InfobipSender] = None,
    ):
        """
        Args:
            config: Infrastructure configuration (read from env when omitted)
            llm_backend: Override the configured backend
            sender: Override the outbound sender
        """
        self.config = config or get_config()
        self.llm_backend = llm_backend or self.config.create_llm_backend()

        self.store = ConversationStore(history_cap=self.config.history_cap)
        self.dedup = DedupCache(ttl=self.config.dedup_ttl)

        self.orchestrator = ConversationOrchestrator(
            store=self.store,
            dedup=self.dedup,
            model_backend=self.llm_backend,
            persona=load_persona(self.config.persona_file),
            window_size=self.config.context_window_turns,
            timeout_s=self.config.llm_timeout_s,
            strict=self.config.strict_store,
        )
        self.sweeper = ExpirySweeper(
            store=self.store,
            dedup=self.dedup,
            retention=self.config.conversation_ttl,
            interval_s=self.config.sweep_interval_s,
        )
        self.sender = sender or InfobipSender.from_config()

    def sweep_now(self) -> int:
        """Run one expiry sweep outside the schedule."""
        return self.sweeper.sweep_now()

    def __repr__(self) -> str:
        """String representation showing configured backends."""
        return (
            f"InfraBootstrap(llm={self.config.llm_backend}, "
            f"history_cap={self.config.history_cap}, "
            f"window={self.config.context_window_turns}, "
            f"ttl={self.config.conversation_ttl_hours}h)"
        )


def bootstrap_infrastructure(config: Optional[InfraConfig] = None) -> InfraBootstrap:
    """
    Bootstrap all infrastructure backends.

    Args:
        config: Optional custom configuration

    Returns:
        A new InfraBootstrap instance
    """
    return InfraBootstrap(config)
