"""Webhook event entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID


@dataclass
class WebhookEvent:
    """
    Inbound webhook call stored for asynchronous processing.

    ``processed`` flips to True once per lifecycle, whether the handling
    attempt succeeded or not; only ``error_message`` tells them apart.
    """

    id: Optional[UUID]
    event_type: str
    payload: Dict[str, Any] = field(default_factory=dict)
    processed: bool = False
    processed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    claimed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def failed(self) -> bool:
        return self.processed and self.error_message is not None
