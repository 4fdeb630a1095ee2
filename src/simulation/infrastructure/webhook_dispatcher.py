# src/simulation/infrastructure/webhook_dispatcher.py
"""
Signed status-callback delivery.

One POST per status event to the configured receiver, signed the way the
provider signs its webhooks. Delivery is best effort: failures are logged and
reported in the returned DeliveryResult, never raised, never retried.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

import httpx

from src.messaging.domain.value_objects import MessageStatus
from src.shared.logging import get_logger
from src.shared.security import SIGNATURE_HEADER, compute_hub_signature
from src.simulation.domain.status_payload import (
    DEFAULT_DISPLAY_PHONE_NUMBER,
    DEFAULT_WABA_ID,
    build_status_payload,
)

logger = get_logger(__name__)

USER_AGENT = "WhatsApp/FakeSimulator"

StatusRecorder = Callable[[str, MessageStatus], Awaitable[Any]]


@dataclass
class DeliveryResult:
    delivered: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class WebhookDispatcher:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        callback_url: Optional[str],
        app_secret: str,
        *,
        waba_id: str = DEFAULT_WABA_ID,
        display_phone_number: str = DEFAULT_DISPLAY_PHONE_NUMBER,
        status_recorder: Optional[StatusRecorder] = None,
    ) -> None:
        self.http_client = http_client
        self.callback_url = callback_url or None
        self.app_secret = app_secret
        self.waba_id = waba_id
        self.display_phone_number = display_phone_number
        self.status_recorder = status_recorder

    @property
    def enabled(self) -> bool:
        return self.callback_url is not None

    async def send_status_update(
        self,
        phone_number_id: str,
        wamid: str,
        recipient_id: str,
        status: MessageStatus,
    ) -> DeliveryResult:
        """Record ``status`` on the stored message, then post the signed callback."""
        status = MessageStatus(status)
        await self._record_status(wamid, status)

        payload = build_status_payload(
            phone_number_id,
            wamid,
            recipient_id,
            status,
            waba_id=self.waba_id,
            display_phone_number=self.display_phone_number,
        )
        return await self.send_webhook(payload, status=status.value, wamid=wamid)

    async def send_webhook(self, payload: Dict[str, Any], **log_fields: Any) -> DeliveryResult:
        if self.callback_url is None:
            logger.warning("callback_url_not_configured", **log_fields)
            return DeliveryResult(delivered=False, error="callback url not configured")

        # serialized once; the signature covers exactly these bytes
        body = json.dumps(payload, separators=(",", ":")).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
            SIGNATURE_HEADER: compute_hub_signature(body, self.app_secret),
        }

        logger.info("status_webhook_sending", url=self.callback_url, **log_fields)
        try:
            response = await self.http_client.post(self.callback_url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("status_webhook_network_error", error=str(exc), **log_fields)
            return DeliveryResult(delivered=False, error=str(exc) or exc.__class__.__name__)

        if not response.is_success:
            logger.warning(
                "status_webhook_rejected",
                status_code=response.status_code,
                reason=response.reason_phrase,
                **log_fields,
            )
            return DeliveryResult(
                delivered=False,
                status_code=response.status_code,
                error=response.reason_phrase,
            )

        logger.debug("status_webhook_delivered", status_code=response.status_code, **log_fields)
        return DeliveryResult(delivered=True, status_code=response.status_code)

    async def _record_status(self, wamid: str, status: MessageStatus) -> None:
        if self.status_recorder is None:
            return
        try:
            await self.status_recorder(wamid, status)
        except Exception as exc:
            logger.warning(
                "status_record_failed",
                wamid=wamid,
                status=status.value,
                error=str(exc),
            )
