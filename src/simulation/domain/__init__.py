from .status_payload import (
    WAMID_PREFIX,
    build_send_ack,
    build_status_payload,
    conversation_id_for,
    generate_wamid,
)
from .whatsapp_types import SendMessageResponse, TemplateMessagePayload

__all__ = [
    "WAMID_PREFIX",
    "SendMessageResponse",
    "TemplateMessagePayload",
    "build_send_ack",
    "build_status_payload",
    "conversation_id_for",
    "generate_wamid",
]
