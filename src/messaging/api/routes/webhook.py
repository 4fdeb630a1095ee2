from __future__ import annotations

from typing import Any, Dict, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, Query, Request

from src.config import Settings
from src.dependencies import get_app_settings, get_webhook_service
from src.messaging.api.schemas import (
    ReprocessSummaryResponse,
    WebhookCreateRequest,
    WebhookResponse,
)
from src.messaging.application.services.webhook_service import WebhookService
from src.messaging.domain.exceptions import WebhookVerificationError
from src.shared.http.responses import ResponseBuilder
from src.shared.logging import get_logger
from src.shared.security import verify_hub_signature

logger = get_logger(__name__)

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


async def verify_inbound_signature(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    x_hub_signature_256: Optional[str] = Header(None),
) -> None:
    """Enforced only when WEBHOOK_SECRET is configured."""
    if not settings.WEBHOOK_SECRET:
        return
    raw = await request.body()
    if not verify_hub_signature(raw, settings.WEBHOOK_SECRET, x_hub_signature_256):
        logger.warning("webhook_signature_invalid", has_header=x_hub_signature_256 is not None)
        raise WebhookVerificationError("Invalid webhook signature")


@router.post("", dependencies=[Depends(verify_inbound_signature)])
async def receive_webhook(
    body: WebhookCreateRequest,
    svc: WebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    webhook = await svc.receive(body.event_type, body.payload)
    return ResponseBuilder.success(
        {"webhookId": webhook.id}, "Webhook received and queued for processing"
    )


@router.get("/status/unprocessed")
async def list_unprocessed_webhooks(
    limit: int = Query(100, ge=1, le=1000),
    svc: WebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    items = await svc.list_unprocessed(limit=limit)
    return ResponseBuilder.success([WebhookResponse.from_entity(w) for w in items])


@router.get("/event/{event_type}")
async def list_webhooks_by_event_type(
    event_type: str,
    limit: int = Query(100, ge=1, le=1000),
    svc: WebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    items = await svc.list_by_event_type(event_type, limit=limit)
    return ResponseBuilder.success([WebhookResponse.from_entity(w) for w in items])


@router.post("/reprocess")
async def reprocess_webhooks(
    svc: WebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    summary = await svc.reprocess_all_unprocessed()
    return ResponseBuilder.success(
        ReprocessSummaryResponse(**summary.to_dict()), "Unprocessed webhooks reprocessed"
    )


@router.get("/{webhook_id}")
async def get_webhook(
    webhook_id: UUID,
    svc: WebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    webhook = await svc.get_webhook(webhook_id)
    return ResponseBuilder.success(WebhookResponse.from_entity(webhook))


@router.post("/{webhook_id}/retry")
async def retry_webhook(
    webhook_id: UUID,
    svc: WebhookService = Depends(get_webhook_service),
) -> Dict[str, Any]:
    result = await svc.retry(webhook_id)
    if result is None:
        # another run holds the claim; report the current record
        webhook = await svc.get_webhook(webhook_id)
        return ResponseBuilder.success(WebhookResponse.from_entity(webhook), "Webhook is being processed")
    message = "Webhook processing failed" if result.failed else "Webhook processed"
    return ResponseBuilder.success(WebhookResponse.from_entity(result), message)
