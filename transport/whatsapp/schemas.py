"""
WhatsApp Transport Layer - Pydantic Schemas

PURE DATA MODELS - NO LOGIC
Only defines the contract between Infobip and the normalized interface.
"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# NORMALIZED MESSAGE (THE CONTRACT)
# ============================================================================

class NormalizedMessage(BaseModel):
    """
    Canonical input format that the orchestrator consumes.

    Empty sender_id / message_id are passed through unchanged; the
    orchestrator rejects them as invalid input.
    """

    input_text: str = Field(..., description="Message text, trimmed")
    sender_id: str = Field(..., description="Sender phone number as sent by Infobip")
    message_id: str = Field(..., description="Infobip message ID")
    recipient_id: Optional[str] = Field(None, description="Our WhatsApp number")
    contact_name: Optional[str] = Field(None, description="Sender profile name")
    received_at: Optional[datetime] = Field(None, description="Provider receive time")
    transport: Literal["whatsapp"] = Field(
        "whatsapp",
        description="Always 'whatsapp' - identifies transport layer"
    )
    input_type: str = Field(..., description="Lower-cased Infobip message type")

    class Config:
        """Pydantic config."""
        frozen = True  # Immutable - transport shouldn't mutate


# ============================================================================
# INFOBIP INBOUND WEBHOOK SCHEMAS (INPUT)
# ============================================================================

class InboundMessageContent(BaseModel):
    """The `message` object of one inbound result."""

    type: Optional[str] = None        # TEXT, IMAGE, DOCUMENT, AUDIO, VIDEO, ...
    text: Optional[str] = None
    url: Optional[str] = None
    caption: Optional[str] = None
    payload: Optional[str] = None     # BUTTON replies
    title: Optional[str] = None       # LIST replies
    description: Optional[str] = None

    class Config:
        extra = "allow"


class InboundContact(BaseModel):
    name: Optional[str] = None


class InboundResult(BaseModel):
    """A single inbound WhatsApp message as delivered by Infobip."""

    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None
    message_id: Optional[str] = Field(None, alias="messageId")
    received_at: Optional[str] = Field(None, alias="receivedAt")
    contact: Optional[InboundContact] = None
    message: Optional[InboundMessageContent] = None

    class Config:
        populate_by_name = True
        extra = "allow"


class InfobipWebhookPayload(BaseModel):
    """
    Full Infobip inbound webhook payload.

    Results stay raw here and are validated one by one in normalization, so
    a single malformed result does not discard the rest of the batch.

    ref: https://www.infobip.com/docs/api/channels/whatsapp/whatsapp-inbound-messages
    """

    results: list[Any] = Field(default_factory=list)
    message_count: Optional[int] = Field(None, alias="messageCount")
    pending_message_count: Optional[int] = Field(None, alias="pendingMessageCount")

    class Config:
        populate_by_name = True
        extra = "allow"  # Infobip may add fields


# ============================================================================
# INFOBIP API RESPONSE (OUTPUT)
# ============================================================================

class InfobipSendResponse(BaseModel):
    """Response from Infobip when sending a WhatsApp text message."""

    to: Optional[str] = None
    message_count: Optional[int] = Field(None, alias="messageCount")
    message_id: Optional[str] = Field(None, alias="messageId")
    status: dict[str, Any] = Field(default_factory=dict)

    class Config:
        populate_by_name = True
        extra = "allow"

    @property
    def status_name(self) -> str:
        return str(self.status.get("name", "Unknown"))
