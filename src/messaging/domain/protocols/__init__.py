from .message_repository import MessageRepository, WebhookRepository

__all__ = ["MessageRepository", "WebhookRepository"]
