"""WhatsApp Transport Layer - Module Exports"""

from .normalize import (
    NormalizationError,
    UnsupportedMessageType,
    describe_content,
    normalize_payload,
    normalize_result,
)
from .schemas import (
    InboundContact,
    InboundMessageContent,
    InboundResult,
    InfobipSendResponse,
    InfobipWebhookPayload,
    NormalizedMessage,
)
from .sender import InfobipSender, WhatsAppSenderError
from .webhook import process_message, process_messages, router

__all__ = [
    # Schemas
    "NormalizedMessage",
    "InfobipWebhookPayload",
    "InboundResult",
    "InboundMessageContent",
    "InboundContact",
    "InfobipSendResponse",
    # Normalization
    "normalize_payload",
    "normalize_result",
    "describe_content",
    "NormalizationError",
    "UnsupportedMessageType",
    # Sender
    "InfobipSender",
    "WhatsAppSenderError",
    # Router
    "router",
    "process_message",
    "process_messages",
]
