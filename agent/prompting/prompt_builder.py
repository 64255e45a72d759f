"""
Prompt Builder Layer
====================

Renders the system prompt sent with every completion request.

Responsibilities:
- Defines the default bot persona (overridable from a file)
- Defines the two prompt variants: first contact and continuation
- Appends the variant instruction to the persona

Invariants:
- The persona text is never modified, only suffixed
- FIRST_CONTACT asks for a short greeting; CONTINUATION forbids re-greeting
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# ── Behavioral Contract ───────────────────────────────────────────────────────
DEFAULT_PERSONA = """You are a friendly assistant answering questions over WhatsApp.

Core Behavior:
- Be concise: WhatsApp messages should be short and easy to read on a phone.
- Answer in the language the user writes in.
- If you do not know something, say so and suggest who to contact.
- Never invent prices, dates or contact details."""

FIRST_CONTACT_NOTE = (
    "NOTE: This is the FIRST message from this user. "
    "Greet them briefly before answering."
)

CONTINUATION_NOTE = (
    "NOTE: This is a CONTINUING conversation. The user has already been greeted. "
    "Answer their question directly without greetings."
)


class PromptVariant(str, Enum):
    """Which system prompt suffix to use for a request."""

    FIRST_CONTACT = "first_contact"
    CONTINUATION = "continuation"


def system_prompt_for(variant: PromptVariant, persona: str = DEFAULT_PERSONA) -> str:
    """Render the full system prompt for a variant."""
    note = FIRST_CONTACT_NOTE if variant is PromptVariant.FIRST_CONTACT else CONTINUATION_NOTE
    return f"{persona.strip()}\n\n{note}"


def load_persona(path: Optional[str]) -> str:
    """
    Read the persona from a text file.

    Falls back to DEFAULT_PERSONA when no path is given or the file is empty.
    A configured path that does not exist is an operator error and raises.
    """
    if not path:
        return DEFAULT_PERSONA

    text = Path(path).read_text(encoding="utf-8").strip()
    if not text:
        logger.warning(f"Persona file {path} is empty, using default persona")
        return DEFAULT_PERSONA

    logger.info(f"Loaded bot persona from {path} ({len(text)} chars)")
    return text
