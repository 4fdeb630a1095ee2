# src/messaging/domain/value_objects/__init__.py
"""
Messaging Domain Value Objects
"""
from .message_status import LIFECYCLE_STATUSES, MessageStatus
from .phone_number import is_valid_phone_number

__all__ = ["LIFECYCLE_STATUSES", "MessageStatus", "is_valid_phone_number"]
