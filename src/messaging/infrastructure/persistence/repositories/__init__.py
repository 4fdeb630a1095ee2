"""
Messaging Repository Implementations
"""
from .message_repository_impl import SQLAlchemyMessageRepository
from .webhook_repository_impl import SQLAlchemyWebhookRepository

__all__ = [
    "SQLAlchemyMessageRepository",
    "SQLAlchemyWebhookRepository",
]
