# src/messaging/domain/entities/__init__.py
"""
Messaging Domain Entities
"""
from .message import Message
from .webhook_event import WebhookEvent

__all__ = ["Message", "WebhookEvent"]
