# src/messaging/domain/value_objects/message_status.py
"""
Message Status Enum and transition rules
"""
from enum import Enum


class MessageStatus(str, Enum):
    """
    WhatsApp message delivery status.

    Flow: pending → sent → delivered → read
    Can fail at any non-terminal stage → failed
    """
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"

    @property
    def rank(self) -> int:
        return _RANK[self]

    @property
    def is_terminal(self) -> bool:
        return self in (MessageStatus.READ, MessageStatus.FAILED)

    def can_transition_to(self, target: "MessageStatus") -> bool:
        """
        True when moving from ``self`` to ``target`` keeps the lifecycle monotonic.

        Re-applying the current status is allowed (idempotent), skipping forward
        (pending → delivered) is allowed, moving backward never is.
        """
        if target == self:
            return True
        if self.is_terminal:
            return False
        if target == MessageStatus.FAILED:
            return True
        return target.rank > self.rank


_RANK = {
    MessageStatus.PENDING: 0,
    MessageStatus.SENT: 1,
    MessageStatus.DELIVERED: 2,
    MessageStatus.READ: 3,
    MessageStatus.FAILED: 4,
}

# Statuses the simulator reports back through callbacks, in emission order.
LIFECYCLE_STATUSES = (MessageStatus.SENT, MessageStatus.DELIVERED, MessageStatus.READ)
