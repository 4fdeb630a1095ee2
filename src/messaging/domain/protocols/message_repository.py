"""
Repository Protocols
Persistence interfaces for messages and webhook events.
"""
from abc import abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Tuple
from uuid import UUID

from src.messaging.domain.entities.message import Message
from src.messaging.domain.entities.webhook_event import WebhookEvent
from src.messaging.domain.value_objects.message_status import MessageStatus


class MessageRepository(Protocol):
    """Repository protocol for Message."""

    @abstractmethod
    async def create(self, message: Message) -> Message:
        """Persist new message; id and timestamps are store-assigned."""
        ...

    @abstractmethod
    async def find_by_id(self, message_id: UUID) -> Optional[Message]:
        ...

    @abstractmethod
    async def find_by_whatsapp_message_id(self, wamid: str) -> Optional[Message]:
        ...

    @abstractmethod
    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Message]:
        """Newest first."""
        ...

    @abstractmethod
    async def count(self) -> int:
        ...

    @abstractmethod
    async def find_by_phone_number(self, phone_number: str, limit: int = 50) -> List[Message]:
        """Messages sent from or to ``phone_number``, newest first."""
        ...

    @abstractmethod
    async def update(
        self,
        message_id: UUID,
        *,
        status: Optional[MessageStatus] = None,
        whatsapp_message_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Message]:
        """Partial update honouring the status and provider-id invariants."""
        ...

    @abstractmethod
    async def delete(self, message_id: UUID) -> bool:
        ...


class WebhookRepository(Protocol):
    """Repository protocol for WebhookEvent."""

    @abstractmethod
    async def create(self, event_type: str, payload: Dict[str, Any]) -> WebhookEvent:
        ...

    @abstractmethod
    async def find_by_id(self, webhook_id: UUID) -> Optional[WebhookEvent]:
        ...

    @abstractmethod
    async def find_unprocessed(
        self, limit: int = 100, *, after: Optional[Tuple[datetime, UUID]] = None
    ) -> List[WebhookEvent]:
        """Oldest first; ``after`` is a (created_at, id) cursor from the previous page."""
        ...

    @abstractmethod
    async def find_by_event_type(self, event_type: str, limit: int = 100) -> List[WebhookEvent]:
        """Newest first."""
        ...

    @abstractmethod
    async def claim(self, webhook_id: UUID, *, stale_before: datetime) -> Optional[WebhookEvent]:
        """Mark an unprocessed record in-progress unless another live claim holds it."""
        ...

    @abstractmethod
    async def mark_as_processed(
        self, webhook_id: UUID, *, error_message: Optional[str] = None
    ) -> Optional[WebhookEvent]:
        """Flip processed false → true; None if it was already processed."""
        ...

    @abstractmethod
    async def reset(self, webhook_id: UUID, *, stale_before: datetime) -> Optional[WebhookEvent]:
        """Start a new processing lifecycle for a record (manual retry) unless a live claim holds it."""
        ...
