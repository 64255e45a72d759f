"""
tests/prompting/test_prompt_builder.py

Unit tests for the prompt builder.

Verifies:
✔ DEFAULT_PERSONA is a non-empty behavioral contract
✔ FIRST_CONTACT prompt asks for a greeting
✔ CONTINUATION prompt forbids re-greeting
✔ The persona is kept verbatim as the prefix
✔ load_persona() reads overrides from file
"""

import pytest

from agent.prompting.prompt_builder import (
    CONTINUATION_NOTE,
    DEFAULT_PERSONA,
    FIRST_CONTACT_NOTE,
    PromptVariant,
    load_persona,
    system_prompt_for,
)


class TestPersona:

    def test_default_persona_is_nonempty_string(self):
        assert isinstance(DEFAULT_PERSONA, str)
        assert len(DEFAULT_PERSONA) > 0

    def test_default_persona_mentions_conciseness(self):
        assert "concise" in DEFAULT_PERSONA.lower()


class TestSystemPromptFor:

    def test_first_contact_includes_greeting_note(self):
        prompt = system_prompt_for(PromptVariant.FIRST_CONTACT)
        assert FIRST_CONTACT_NOTE in prompt
        assert CONTINUATION_NOTE not in prompt

    def test_continuation_suppresses_greeting(self):
        prompt = system_prompt_for(PromptVariant.CONTINUATION)
        assert CONTINUATION_NOTE in prompt
        assert "without greetings" in prompt
        assert FIRST_CONTACT_NOTE not in prompt

    def test_persona_is_prefix(self):
        persona = "You coordinate the Zurich networking evening."
        for variant in PromptVariant:
            assert system_prompt_for(variant, persona).startswith(persona)

    def test_variants_differ(self):
        assert system_prompt_for(PromptVariant.FIRST_CONTACT) != system_prompt_for(
            PromptVariant.CONTINUATION
        )


class TestLoadPersona:

    def test_no_path_returns_default(self):
        assert load_persona(None) == DEFAULT_PERSONA
        assert load_persona("") == DEFAULT_PERSONA

    def test_reads_file(self, tmp_path):
        path = tmp_path / "persona.txt"
        path.write_text("  Act as an event coordinator.\n", encoding="utf-8")

        assert load_persona(str(path)) == "Act as an event coordinator."

    def test_empty_file_falls_back(self, tmp_path):
        path = tmp_path / "persona.txt"
        path.write_text("   \n", encoding="utf-8")

        assert load_persona(str(path)) == DEFAULT_PERSONA

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_persona(str(tmp_path / "missing.txt"))
