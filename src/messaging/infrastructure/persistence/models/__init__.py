from .message_model import MessageModel
from .webhook_event_model import WebhookEventModel

__all__ = ["MessageModel", "WebhookEventModel"]
