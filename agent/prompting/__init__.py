"""
Prompt layer for the relay.

Exports the persona, prompt variants and the context window builder.
"""

from .prompt_builder import (
    CONTINUATION_NOTE,
    DEFAULT_PERSONA,
    FIRST_CONTACT_NOTE,
    PromptVariant,
    load_persona,
    system_prompt_for,
)
from .context_window import DEFAULT_WINDOW_TURNS, CompletionInput, build_completion_input

__all__ = [
    "DEFAULT_PERSONA",
    "FIRST_CONTACT_NOTE",
    "CONTINUATION_NOTE",
    "PromptVariant",
    "system_prompt_for",
    "load_persona",
    "CompletionInput",
    "DEFAULT_WINDOW_TURNS",
    "build_completion_input",
]
