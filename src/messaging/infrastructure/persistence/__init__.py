"""
Messaging persistence: ORM models and repository implementations
"""
from .models import MessageModel, WebhookEventModel

__all__ = ["MessageModel", "WebhookEventModel"]
