"""
WhatsApp Response Sender

Sends relay replies back to WhatsApp through the Infobip API.
No formatting intelligence. No retries. No logic.
"""

import logging
import uuid
from typing import Optional

import httpx

from .schemas import InfobipSendResponse

logger = logging.getLogger(__name__)

TEXT_MESSAGE_PATH = "/whatsapp/1/message/text"


class WhatsAppSenderError(Exception):
    """Failed to send response to WhatsApp."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class InfobipSender:
    """
    Infobip WhatsApp text sender.

    A missing API key does not prevent construction; send_text() fails with
    WhatsAppSenderError instead so the server can still start and answer
    health checks.
    """

    def __init__(
        self,
        api_key: str,
        sender_number: str,
        base_url: str = "https://api.infobip.com",
        timeout_s: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            api_key: Infobip API key
            sender_number: Our WhatsApp sender number
            base_url: Infobip account base URL
            timeout_s: HTTP timeout per request
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self.api_key = api_key
        self.sender_number = sender_number
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    @classmethod
    def from_config(cls) -> "InfobipSender":
        from config import Config

        if not Config.INFOBIP_API_KEY:
            logger.error("INFOBIP_API_KEY is not set; replies cannot be delivered")
        if not Config.WHATSAPP_SENDER:
            logger.warning("WHATSAPP_SENDER is not set; it is required for sending WhatsApp messages")

        logger.info(
            f"InfobipSender initialized (base URL {Config.INFOBIP_BASE_URL}, "
            f"API key {Config.masked_api_key()}, sender {Config.WHATSAPP_SENDER or 'NOT SET'})"
        )
        return cls(
            api_key=Config.INFOBIP_API_KEY,
            sender_number=Config.WHATSAPP_SENDER,
            base_url=Config.INFOBIP_BASE_URL,
        )

    @staticmethod
    def format_phone_number(phone: str) -> str:
        """Trim and ensure the international '+' prefix."""
        formatted = phone.strip()
        if not formatted.startswith("+"):
            formatted = f"+{formatted}"
        return formatted

    @staticmethod
    def generate_message_id() -> str:
        return uuid.uuid4().hex

    async def send_text(
        self,
        to: str,
        text: str,
        message_id: Optional[str] = None,
        callback_data: Optional[str] = None,
        notify_url: Optional[str] = None,
    ) -> InfobipSendResponse:
        """
        Send a WhatsApp text message.

        Args:
            to: Recipient phone number, with or without '+'
            text: Message body
            message_id: Custom message ID (generated when omitted)
            callback_data: Echoed back in delivery reports
            notify_url: Delivery report URL override

        Returns:
            InfobipSendResponse

        Raises:
            WhatsAppSenderError: If send fails
        """
        if not self.api_key:
            raise WhatsAppSenderError("INFOBIP_API_KEY not configured")

        message_id = message_id or self.generate_message_id()
        formatted_to = self.format_phone_number(to)

        payload = {
            "from": self.sender_number,
            "to": formatted_to,
            "messageId": message_id,
            "content": {"text": text},
        }
        if callback_data:
            payload["callbackData"] = callback_data
        if notify_url:
            payload["notifyUrl"] = notify_url

        headers = {
            "Authorization": f"App {self.api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        logger.info(f"Sending message to {formatted_to}", extra={"message_id": message_id})

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout_s,
                transport=self._transport,
            ) as client:
                response = await client.post(TEXT_MESSAGE_PATH, json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.error(
                f"HTTP request failed: {e}",
                exc_info=True,
                extra={"to": formatted_to, "error": str(e)},
            )
            raise WhatsAppSenderError(f"HTTP request failed: {e}")

        if response.status_code == 401:
            logger.error(
                "Authentication Error (401 Unauthorized): the Infobip API key is invalid, "
                "expired, or lacks WhatsApp permissions",
                extra={"error_body": response.text},
            )
            raise WhatsAppSenderError("Infobip rejected the API key", status_code=401)

        if response.status_code >= 300:
            logger.error(
                f"Infobip API error: {response.status_code} - {response.text}",
                extra={"status_code": response.status_code, "error_body": response.text},
            )
            raise WhatsAppSenderError(
                f"Infobip API returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            result = InfobipSendResponse.model_validate(response.json())
        except ValueError as e:
            raise WhatsAppSenderError(f"Unreadable Infobip response: {e}")

        logger.info(
            f"Message sent! ID: {result.message_id or message_id}, status: {result.status_name}",
            extra={"to": formatted_to, "message_id": result.message_id or message_id},
        )
        return result
