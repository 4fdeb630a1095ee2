"""Webhook DTOs."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.messaging.domain.entities.webhook_event import WebhookEvent


class WebhookCreateRequest(BaseModel):
    """Inbound webhook call."""
    model_config = ConfigDict(extra="ignore")

    event_type: str = Field(..., min_length=1, max_length=100, examples=["message.status"])
    payload: Dict[str, Any]


class WebhookResponse(BaseModel):
    """Stored webhook record."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_type: str
    payload: Dict[str, Any]
    processed: bool
    processed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, webhook: WebhookEvent) -> "WebhookResponse":
        return cls.model_validate(webhook)


class ReprocessSummaryResponse(BaseModel):
    total: int
    processed: int
    failed: int
    skipped: int
