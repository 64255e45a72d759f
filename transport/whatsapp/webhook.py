"""
WhatsApp Webhook Receiver

FastAPI router that receives Infobip WhatsApp callbacks.
Acknowledges immediately; messages are processed as a background task.
"""

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, Request

from .normalize import normalize_payload
from .schemas import NormalizedMessage
from .sender import WhatsAppSenderError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["WhatsApp Transport"])


async def process_message(relay: Any, message: NormalizedMessage) -> Optional[str]:
    """
    Run one normalized message through the orchestrator and send the reply.

    Never raises: the webhook has already been acknowledged.
    """
    try:
        reply = await relay.orchestrator.handle(
            message.sender_id, message.message_id, message.input_text
        )
    except Exception as e:
        logger.error(
            f"Error processing message: {e}",
            exc_info=True,
            extra={"sender_id": message.sender_id, "message_id": message.message_id},
        )
        return None

    if not reply:
        return None

    try:
        await relay.sender.send_text(message.sender_id, reply)
    except WhatsAppSenderError as e:
        # Delivery failures do not roll back the recorded exchange
        logger.error(f"Failed to send response: {e}", extra={"sender_id": message.sender_id})
    except Exception as e:
        logger.error(f"Unexpected error sending response: {e}", exc_info=True)

    return reply


async def process_messages(relay: Any, messages: list[NormalizedMessage]) -> None:
    """Process a webhook batch in delivery order."""
    for message in messages:
        await process_message(relay, message)


# ============================================================================
# WEBHOOK RECEIVER (Message processing)
# ============================================================================

@router.post("/whatsapp")
async def whatsapp_webhook_receiver(
    request: Request,
    background_tasks: BackgroundTasks,
) -> dict[str, str]:
    """
    Receive WhatsApp messages via Infobip webhook.

    Flow:
    1. Parse the JSON body
    2. Normalize each TEXT result to NormalizedMessage
    3. Schedule orchestrator + sender as a background task
    4. Acknowledge with 200

    Always returns 200 so Infobip does not redeliver.
    """
    body = await request.body()
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON, acknowledging without processing")
        return {"status": "ok"}

    logger.debug(f"Incoming webhook: {payload}")

    messages = normalize_payload(payload)
    if messages:
        background_tasks.add_task(process_messages, request.app.state.relay, messages)

    return {"status": "ok"}


# ============================================================================
# STATUS REPORTS
# ============================================================================

async def _report_results(request: Request) -> list[dict]:
    try:
        report = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return []
    if not isinstance(report, dict):
        return []
    return [r for r in report.get("results", []) if isinstance(r, dict)]


@router.post("/delivery")
async def whatsapp_delivery_report(request: Request) -> dict[str, str]:
    """Log delivery reports for sent messages."""
    for result in await _report_results(request):
        status = result.get("status") or {}
        logger.info(
            f"Delivery report for {result.get('messageId')}: {status.get('name', 'Unknown')}",
            extra={"message_id": result.get("messageId"), "to": result.get("to")},
        )
    return {"status": "ok"}


@router.post("/seen")
async def whatsapp_seen_report(request: Request) -> dict[str, str]:
    """Log seen reports for sent messages."""
    for result in await _report_results(request):
        logger.info(
            f"Seen report for {result.get('messageId')}",
            extra={"message_id": result.get("messageId"), "seen_at": result.get("seenAt")},
        )
    return {"status": "ok"}
