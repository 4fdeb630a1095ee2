"""Message DTOs."""

from datetime import datetime
from typing import Any, Dict, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.messaging.domain.entities.message import Message
from src.messaging.domain.value_objects import MessageStatus
from src.messaging.domain.value_objects.phone_number import E164_PATTERN

PHONE_PATTERN = E164_PATTERN.pattern


class MessageCreateRequest(BaseModel):
    """Store a message."""
    model_config = ConfigDict(extra="ignore")

    from_number: str = Field(..., pattern=PHONE_PATTERN, examples=["+14155550100"])
    to_number: str = Field(..., pattern=PHONE_PATTERN, examples=["+919876543210"])
    message_text: str = Field(..., min_length=1, max_length=4096)
    message_type: Literal["text", "image", "video", "audio", "document"] = "text"
    metadata: Optional[Dict[str, Any]] = None


class MessageUpdateRequest(BaseModel):
    """Partial update; at least one field is required."""
    model_config = ConfigDict(extra="ignore")

    status: Optional[MessageStatus] = None
    whatsapp_message_id: Optional[str] = Field(None, min_length=1)
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _not_empty(self) -> "MessageUpdateRequest":
        if self.status is None and self.whatsapp_message_id is None and self.metadata is None:
            raise ValueError("at least one of status, whatsapp_message_id, metadata is required")
        return self


class MessageResponse(BaseModel):
    """Stored message."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    from_number: str
    to_number: str
    message_text: str
    message_type: str
    status: MessageStatus
    whatsapp_message_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, message: Message) -> "MessageResponse":
        return cls.model_validate(message)
