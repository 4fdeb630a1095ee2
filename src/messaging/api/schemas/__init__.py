from .message_dto import MessageCreateRequest, MessageResponse, MessageUpdateRequest
from .webhook_dto import ReprocessSummaryResponse, WebhookCreateRequest, WebhookResponse

__all__ = [
    "MessageCreateRequest",
    "MessageResponse",
    "MessageUpdateRequest",
    "ReprocessSummaryResponse",
    "WebhookCreateRequest",
    "WebhookResponse",
]
