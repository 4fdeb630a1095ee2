# src/messaging/domain/exceptions.py
"""
Messaging Domain Exceptions
"""
from src.shared.exceptions import (
    ConflictError,
    InvalidSignatureError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)


class InvalidPhoneNumberError(ValidationError):
    """Raised for invalid phone number format."""
    code = "invalid_phone_number"


class MessageNotFoundError(NotFoundError):
    """Raised when message is not found."""
    code = "message_not_found"


class WebhookNotFoundError(NotFoundError):
    """Raised when webhook record is not found."""
    code = "webhook_not_found"


class WhatsAppMessageIdImmutableError(ConflictError):
    """Raised when a different provider message id is assigned to a message that has one."""
    code = "whatsapp_message_id_immutable"


class WebhookVerificationError(InvalidSignatureError):
    """Raised when inbound webhook signature verification fails."""


__all__ = [
    "InvalidPhoneNumberError",
    "InvalidStatusTransitionError",
    "MessageNotFoundError",
    "WebhookNotFoundError",
    "WebhookVerificationError",
    "WhatsAppMessageIdImmutableError",
]
