# src/messaging/application/handlers.py
"""
Webhook event handlers.

Processing of a stored webhook is delegated to the handler registered for its
``event_type``. Event types without a handler are accepted and completed as a
no-op.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Iterator, Optional

from src.messaging.application.services.message_service import MessageService
from src.messaging.domain.exceptions import InvalidStatusTransitionError
from src.messaging.domain.value_objects import MessageStatus
from src.shared.logging import get_logger

logger = get_logger(__name__)

WebhookHandler = Callable[[Dict[str, Any]], Awaitable[None]]

STATUS_EVENT_TYPE = "message.status"


class WebhookHandlerRegistry:
    def __init__(self) -> None:
        self._handlers: Dict[str, WebhookHandler] = {}

    def register(self, event_type: str, handler: WebhookHandler) -> None:
        self._handlers[event_type] = handler

    def get(self, event_type: str) -> Optional[WebhookHandler]:
        return self._handlers.get(event_type)

    def __contains__(self, event_type: str) -> bool:
        return event_type in self._handlers

    async def dispatch(self, event_type: str, payload: Dict[str, Any]) -> bool:
        """Run the handler for ``event_type``; False when none is registered."""
        handler = self._handlers.get(event_type)
        if handler is None:
            logger.debug("webhook_no_handler", event_type=event_type)
            return False
        await handler(payload)
        return True


def iter_statuses(payload: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
    """Yield every ``statuses[]`` item of a WhatsApp business account envelope."""
    for entry in payload.get("entry") or []:
        for change in entry.get("changes") or []:
            value = change.get("value") or {}
            for status in value.get("statuses") or []:
                yield status


class StatusUpdateHandler:
    """Applies the statuses carried by a provider status envelope to stored messages."""

    def __init__(self, message_service: MessageService) -> None:
        self.message_service = message_service

    async def __call__(self, payload: Dict[str, Any]) -> None:
        statuses = list(iter_statuses(payload))
        if not statuses:
            raise ValueError("payload carries no statuses")

        for item in statuses:
            wamid = item.get("id")
            if not wamid:
                raise ValueError("status without message id")
            status = MessageStatus(item.get("status"))
            try:
                await self.message_service.apply_provider_status(wamid, status)
            except InvalidStatusTransitionError as exc:
                # late callback for a message that already moved on
                logger.info("status_ignored", wamid=wamid, status=status.value, reason=exc.message)


def build_default_registry(message_service: MessageService) -> WebhookHandlerRegistry:
    registry = WebhookHandlerRegistry()
    registry.register(STATUS_EVENT_TYPE, StatusUpdateHandler(message_service))
    return registry
