"""Message ORM Model"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.database.base_model import Base, utcnow


class MessageModel(Base):
    """
    Stored WhatsApp message.

    ``whatsapp_message_id`` is the provider id (wamid) assigned on simulated
    send; status callbacks are matched back to the row through it.
    """

    __tablename__ = "messages"
    __table_args__ = (
        Index("idx_messages_from_number", "from_number"),
        Index("idx_messages_to_number", "to_number"),
        Index("idx_messages_created_at", "created_at"),
    )

    from_number: Mapped[str] = mapped_column(String(20), nullable=False)
    to_number: Mapped[str] = mapped_column(String(20), nullable=False)
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    message_type: Mapped[str] = mapped_column(String(50), nullable=False, default="text")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    whatsapp_message_id: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True, unique=True
    )
    # "metadata" is reserved on declarative classes
    metadata_: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        "metadata", JSON, nullable=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<MessageModel(id={self.id}, status={self.status})>"
