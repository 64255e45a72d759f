"""
WhatsApp Input Normalization

PURE CONVERSION - NO LOGIC, NO MODEL CALLS

Converts Infobip inbound results into canonical NormalizedMessage.
- TEXT: Extract text, trim, no enrichment
- Everything else: logged and rejected with UnsupportedMessageType
"""

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from .schemas import InboundResult, InfobipWebhookPayload, NormalizedMessage

logger = logging.getLogger(__name__)

# Placeholders used in logs for message types the relay does not answer
MEDIA_PLACEHOLDERS = {
    "IMAGE": "[Image received]",
    "DOCUMENT": "[Document received]",
    "AUDIO": "[Audio received]",
    "VIDEO": "[Video received]",
    "STICKER": "[Sticker received]",
    "LOCATION": "[Location received]",
    "CONTACT": "[Contact received]",
}

_RECEIVED_AT_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z")


class NormalizationError(Exception):
    """Input normalization failed."""
    pass


class UnsupportedMessageType(NormalizationError):
    """The message is valid but not a type the relay answers."""

    def __init__(self, message_type: Optional[str], description: str):
        super().__init__(f"Unsupported message type: {message_type}")
        self.message_type = message_type
        self.description = description


def describe_content(content: Any) -> str:
    """Human-readable summary of a message object, for logging."""
    if content is None:
        return "[Empty message]"
    message_type = (content.type or "").upper()
    if message_type == "TEXT":
        return content.text or ""
    if message_type == "BUTTON":
        return content.text or content.payload or ""
    if message_type == "LIST":
        return content.title or content.description or ""
    return MEDIA_PLACEHOLDERS.get(message_type, "[Unsupported message type]")


def _parse_received_at(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    for fmt in _RECEIVED_AT_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def normalize_result(result: dict | InboundResult) -> NormalizedMessage:
    """
    Convert one Infobip inbound result into NormalizedMessage.

    Args:
        result: Raw result dict or parsed InboundResult

    Returns:
        NormalizedMessage for TEXT messages (input_text may be empty)

    Raises:
        UnsupportedMessageType: Any non-TEXT message
        NormalizationError: Malformed result
    """
    if isinstance(result, dict):
        try:
            result = InboundResult.model_validate(result)
        except ValidationError as e:
            raise NormalizationError(f"Invalid result structure: {e}")

    content = result.message
    if content is None:
        raise NormalizationError("Result missing 'message' object")

    message_type = (content.type or "").upper()
    if message_type != "TEXT":
        raise UnsupportedMessageType(content.type, describe_content(content))

    return NormalizedMessage(
        input_text=(content.text or "").strip(),
        sender_id=(result.from_ or "").strip(),
        message_id=(result.message_id or "").strip(),
        recipient_id=result.to,
        contact_name=result.contact.name if result.contact else None,
        received_at=_parse_received_at(result.received_at),
        transport="whatsapp",
        input_type="text",
    )


def normalize_payload(payload: Any) -> list[NormalizedMessage]:
    """
    Normalize every forwardable message of a webhook payload.

    Non-TEXT, blank and malformed results are logged and skipped.
    """
    if not isinstance(payload, dict):
        logger.warning("Webhook payload is not a JSON object, ignoring")
        return []

    try:
        parsed = InfobipWebhookPayload.model_validate(payload)
    except ValidationError as e:
        logger.warning(f"Invalid webhook payload: {e}")
        return []

    messages: list[NormalizedMessage] = []
    for raw in parsed.results:
        if not isinstance(raw, dict):
            logger.warning(f"Skipping result that is not a JSON object: {raw!r}")
            continue

        try:
            normalized = normalize_result(raw)
        except UnsupportedMessageType as e:
            logger.info(f"Skipping {e.message_type} message from {raw.get('from')}: {e.description}")
            continue
        except NormalizationError as e:
            logger.warning(f"Skipping malformed message {raw.get('messageId')!r}: {e}")
            continue

        logger.info(
            f"Message received from {normalized.sender_id} ({normalized.contact_name or 'Unknown'})",
            extra={
                "sender_id": normalized.sender_id,
                "recipient_id": normalized.recipient_id,
                "message_id": normalized.message_id,
            },
        )

        if not normalized.input_text:
            logger.info(f"Skipping empty text message {normalized.message_id}")
            continue

        messages.append(normalized)

    return messages
