"""Webhook Event ORM Model"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.database.base_model import Base


class WebhookEventModel(Base):
    """
    Inbound webhook event.

    Stores the raw payload for audit and replay. Events are processed
    asynchronously and flipped to processed exactly once per lifecycle.
    ``claimed_at`` marks a record as in progress so two reprocessing passes
    do not handle it concurrently.
    """

    __tablename__ = "webhooks"
    __table_args__ = (
        Index("idx_webhooks_event_type", "event_type"),
        Index(
            "idx_webhooks_unprocessed",
            "created_at",
            postgresql_where=text("processed = false"),
        ),
    )

    event_type: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    processed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    processed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    def __repr__(self) -> str:
        return f"<WebhookEventModel(id={self.id}, type={self.event_type})>"
