"""
Infrastructure configuration system.

Environment-based backend selection and conversation tuning with the
defaults the relay was designed around.
"""

import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Literal, Optional

from inference import ModelBackend, OllamaModelBackend, OpenAIModelBackend, StubModelBackend


LLMBackendType = Literal["openai", "ollama", "stub"]
SUPPORTED_LLM_BACKENDS = ("openai", "ollama", "stub")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.lower() in ("1", "true", "yes")


@dataclass
class InfraConfig:
    """Infrastructure configuration from environment."""

    # LLM
    llm_backend: LLMBackendType = "openai"
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4"
    ollama_model: str = "phi"
    ollama_base_url: str = "http://localhost:11434"
    llm_timeout_s: int = 30

    # Conversation state
    history_cap: int = 20
    context_window_turns: int = 10
    conversation_ttl_hours: float = 24.0
    dedup_ttl_hours: float = 24.0
    sweep_interval_s: float = 300.0
    strict_store: bool = False

    # Persona
    persona_file: Optional[str] = None

    def __post_init__(self):
        if self.llm_backend not in SUPPORTED_LLM_BACKENDS:
            raise ValueError(
                f"Unknown LLM_BACKEND {self.llm_backend!r}; "
                f"expected one of: {', '.join(SUPPORTED_LLM_BACKENDS)}"
            )

    @classmethod
    def from_env(cls) -> "InfraConfig":
        """
        Load configuration from environment variables.

        STRICT_STORE defaults to true in development so store defects
        surface immediately.
        """
        environment = os.getenv("ENVIRONMENT", "development")
        return cls(
            # LLM Configuration
            llm_backend=os.getenv("LLM_BACKEND", "openai").strip().lower(),  # type: ignore
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4"),
            ollama_model=os.getenv("OLLAMA_MODEL", "phi"),
            ollama_base_url=os.getenv("OLLAMA_BASE_URL", "http://localhost:11434"),
            llm_timeout_s=int(os.getenv("LLM_TIMEOUT_SECONDS", "30")),

            # Conversation state
            history_cap=int(os.getenv("HISTORY_CAP", "20")),
            context_window_turns=int(os.getenv("CONTEXT_WINDOW_TURNS", "10")),
            conversation_ttl_hours=float(os.getenv("CONVERSATION_TTL_HOURS", "24")),
            dedup_ttl_hours=float(os.getenv("DEDUP_TTL_HOURS", "24")),
            sweep_interval_s=float(os.getenv("SWEEP_INTERVAL_SECONDS", "300")),
            strict_store=_env_bool("STRICT_STORE", environment == "development"),

            # Persona
            persona_file=os.getenv("BOT_PERSONA_FILE") or None,
        )

    @property
    def conversation_ttl(self) -> timedelta:
        return timedelta(hours=self.conversation_ttl_hours)

    @property
    def dedup_ttl(self) -> timedelta:
        return timedelta(hours=self.dedup_ttl_hours)

    def create_llm_backend(self) -> ModelBackend:
        """Create LLM backend instance based on configuration."""
        if self.llm_backend == "ollama":
            return OllamaModelBackend(
                model_name=self.ollama_model,
                base_url=self.ollama_base_url,
            )
        elif self.llm_backend == "stub":
            return StubModelBackend()
        else:
            return OpenAIModelBackend(
                api_key=self.openai_api_key,
                model_name=self.openai_model,
            )


def get_config() -> InfraConfig:
    """Get infrastructure configuration from the environment."""
    return InfraConfig.from_env()
