"""
Context window selection.

Stored history is capped at 20 turns, but only the most recent 10 are sent
to the model. The larger stored history keeps room for later trims; the
smaller window bounds tokens per request.
"""

from typing import Dict, List, NamedTuple, Sequence

from agent.memory.types import Turn
from agent.prompting.prompt_builder import PromptVariant

DEFAULT_WINDOW_TURNS = 10


class CompletionInput(NamedTuple):
    history: List[Dict[str, str]]   # [{"role": ..., "content": ...}], chronological
    variant: PromptVariant

    @property
    def is_new_conversation(self) -> bool:
        return self.variant is PromptVariant.FIRST_CONTACT


def build_completion_input(
    history: Sequence[Turn],
    new_user_text: str,
    window_size: int = DEFAULT_WINDOW_TURNS,
) -> CompletionInput:
    """
    Select and format the history window for one completion request.

    The most recent `window_size` stored turns are taken first; turns with
    blank text are then dropped, so the result can be shorter than the
    window. The variant depends only on whether stored history was empty.

    new_user_text is not part of the window; it is sent as the final user
    message by the model backend.
    """
    recent = list(history)[-window_size:] if window_size > 0 else []
    formatted = [
        {"role": turn.role, "content": turn.text}
        for turn in recent
        if turn.text and turn.text.strip()
    ]

    variant = PromptVariant.FIRST_CONTACT if not history else PromptVariant.CONTINUATION
    return CompletionInput(history=formatted, variant=variant)
