from .webhook_dispatcher import DeliveryResult, WebhookDispatcher

__all__ = ["DeliveryResult", "WebhookDispatcher"]
