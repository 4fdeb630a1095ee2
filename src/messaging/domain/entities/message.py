"""Message entity."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from src.messaging.domain.exceptions import (
    InvalidStatusTransitionError,
    WhatsAppMessageIdImmutableError,
)
from src.messaging.domain.value_objects.message_status import MessageStatus


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Message:
    """Stored WhatsApp message (outbound, simulated or created through the API)."""

    id: Optional[UUID]
    from_number: str
    to_number: str
    message_text: str
    message_type: str = "text"
    status: MessageStatus = MessageStatus.PENDING
    whatsapp_message_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def apply_status(self, target: MessageStatus) -> bool:
        """
        Move to ``target`` if the transition is monotonic.

        Returns:
            True if the status changed, False if it was already ``target``

        Raises:
            InvalidStatusTransitionError: for a backward move or a move out of a terminal state
        """
        target = MessageStatus(target)
        if not self.status.can_transition_to(target):
            raise InvalidStatusTransitionError(
                f"Cannot move message from '{self.status.value}' to '{target.value}'",
                details={"from": self.status.value, "to": target.value},
            )
        if target == self.status:
            return False
        self.status = target
        self.updated_at = _utcnow()
        return True

    def assign_whatsapp_message_id(self, wamid: str) -> bool:
        """Attach the provider id once; re-assigning the same value is a no-op."""
        if self.whatsapp_message_id == wamid:
            return False
        if self.whatsapp_message_id is not None:
            raise WhatsAppMessageIdImmutableError(
                "whatsapp_message_id is already assigned",
                details={"current": self.whatsapp_message_id},
            )
        self.whatsapp_message_id = wamid
        self.updated_at = _utcnow()
        return True
