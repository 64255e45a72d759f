"""
Infrastructure configuration and bootstrap tests.
"""

from datetime import timedelta

import pytest

from infra import InfraBootstrap, InfraConfig
from inference import OllamaModelBackend, OpenAIModelBackend, StubModelBackend
from transport.whatsapp.sender import InfobipSender


ENV_KEYS = [
    "LLM_BACKEND", "OPENAI_API_KEY", "OPENAI_MODEL", "HISTORY_CAP", "CONTEXT_WINDOW_TURNS",
    "CONVERSATION_TTL_HOURS", "DEDUP_TTL_HOURS", "SWEEP_INTERVAL_SECONDS", "STRICT_STORE",
    "ENVIRONMENT", "BOT_PERSONA_FILE", "LLM_TIMEOUT_SECONDS",
]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


class TestInfraConfig:

    def test_defaults(self, clean_env):
        config = InfraConfig.from_env()

        assert config.llm_backend == "openai"
        assert config.openai_model == "gpt-4"
        assert config.history_cap == 20
        assert config.context_window_turns == 10
        assert config.conversation_ttl == timedelta(hours=24)
        assert config.dedup_ttl == timedelta(hours=24)
        assert config.strict_store is True  # ENVIRONMENT defaults to development

    def test_overrides(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "Ollama")
        clean_env.setenv("HISTORY_CAP", "30")
        clean_env.setenv("CONVERSATION_TTL_HOURS", "1.5")
        clean_env.setenv("ENVIRONMENT", "production")

        config = InfraConfig.from_env()

        assert config.llm_backend == "ollama"
        assert config.history_cap == 30
        assert config.conversation_ttl == timedelta(minutes=90)
        assert config.strict_store is False

    def test_strict_store_explicit(self, clean_env):
        clean_env.setenv("ENVIRONMENT", "production")
        clean_env.setenv("STRICT_STORE", "true")
        assert InfraConfig.from_env().strict_store is True

    def test_unknown_backend_rejected(self, clean_env):
        clean_env.setenv("LLM_BACKEND", "opnai")

        with pytest.raises(ValueError, match="opnai"):
            InfraConfig.from_env()

    def test_unknown_backend_rejected_on_construction(self):
        with pytest.raises(ValueError):
            InfraConfig(llm_backend="gpt")

    def test_backend_name_is_trimmed(self, clean_env):
        clean_env.setenv("LLM_BACKEND", " Stub ")
        assert InfraConfig.from_env().llm_backend == "stub"

    @pytest.mark.parametrize(
        "name, expected",
        [("stub", StubModelBackend), ("ollama", OllamaModelBackend), ("openai", OpenAIModelBackend)],
    )
    def test_create_llm_backend(self, name, expected):
        assert isinstance(InfraConfig(llm_backend=name).create_llm_backend(), expected)


class TestBootstrap:

    def test_builds_shared_context(self):
        sender = InfobipSender(api_key="k" * 32, sender_number="385916376631")
        relay = InfraBootstrap(InfraConfig(llm_backend="stub", history_cap=8), sender=sender)

        assert relay.orchestrator.store is relay.store
        assert relay.sweeper.store is relay.store
        assert relay.orchestrator.dedup is relay.dedup
        assert relay.sweeper.dedup is relay.dedup
        assert relay.store.history_cap == 8
        assert relay.sender is sender

    def test_instances_are_independent(self):
        sender = InfobipSender(api_key="", sender_number="")
        a = InfraBootstrap(InfraConfig(llm_backend="stub"), sender=sender)
        b = InfraBootstrap(InfraConfig(llm_backend="stub"), sender=sender)

        a.store.get_or_create("41780000000")
        assert "41780000000" not in b.store

    def test_persona_file(self, tmp_path):
        persona = tmp_path / "persona.txt"
        persona.write_text("Act as an event coordinator for ZajednoSwiss.", encoding="utf-8")
        relay = InfraBootstrap(
            InfraConfig(llm_backend="stub", persona_file=str(persona)),
            sender=InfobipSender(api_key="", sender_number=""),
        )

        assert relay.orchestrator.persona == "Act as an event coordinator for ZajednoSwiss."
