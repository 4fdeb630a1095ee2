# src/messaging/infrastructure/persistence/repositories/webhook_repository_impl.py
"""
SQLAlchemy Implementation of WebhookRepository
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import and_, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.messaging.domain.entities.webhook_event import WebhookEvent
from src.messaging.domain.protocols.message_repository import WebhookRepository
from src.messaging.infrastructure.persistence.models.webhook_event_model import WebhookEventModel
from src.shared.database.base_model import utcnow
from src.shared.logging import get_logger

logger = get_logger(__name__)


def _to_entity(model: WebhookEventModel) -> WebhookEvent:
    return WebhookEvent(
        id=model.id,
        event_type=model.event_type,
        payload=dict(model.payload or {}),
        processed=model.processed,
        processed_at=model.processed_at,
        error_message=model.error_message,
        claimed_at=model.claimed_at,
        created_at=model.created_at,
    )


class SQLAlchemyWebhookRepository(WebhookRepository):
    """
    Webhook event persistence over one AsyncSession.

    State changes (claim, mark, reset) are conditional UPDATE statements so
    the row is only touched when it is in the expected state; the rowcount
    tells the caller whether it won.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, event_type: str, payload: Dict[str, Any]) -> WebhookEvent:
        model = WebhookEventModel(event_type=event_type, payload=payload, processed=False)
        self.session.add(model)
        await self.session.flush()
        logger.debug("webhook_stored", webhook_id=str(model.id), event_type=event_type)
        return _to_entity(model)

    async def find_by_id(self, webhook_id: UUID) -> Optional[WebhookEvent]:
        stmt = (
            select(WebhookEventModel)
            .where(WebhookEventModel.id == webhook_id)
            .execution_options(populate_existing=True)
        )
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        return _to_entity(model) if model else None

    async def find_unprocessed(
        self, limit: int = 100, *, after: Optional[Tuple[datetime, UUID]] = None
    ) -> List[WebhookEvent]:
        stmt = select(WebhookEventModel).where(WebhookEventModel.processed.is_(False))
        if after is not None:
            created_at, webhook_id = after
            stmt = stmt.where(
                or_(
                    WebhookEventModel.created_at > created_at,
                    and_(
                        WebhookEventModel.created_at == created_at,
                        WebhookEventModel.id > webhook_id,
                    ),
                )
            )
        stmt = stmt.order_by(WebhookEventModel.created_at.asc(), WebhookEventModel.id.asc()).limit(limit)
        result = await self.session.execute(stmt)
        return [_to_entity(m) for m in result.scalars().all()]

    async def find_by_event_type(self, event_type: str, limit: int = 100) -> List[WebhookEvent]:
        stmt = (
            select(WebhookEventModel)
            .where(WebhookEventModel.event_type == event_type)
            .order_by(WebhookEventModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_to_entity(m) for m in result.scalars().all()]

    async def claim(self, webhook_id: UUID, *, stale_before: datetime) -> Optional[WebhookEvent]:
        stmt = (
            update(WebhookEventModel)
            .where(
                WebhookEventModel.id == webhook_id,
                WebhookEventModel.processed.is_(False),
                or_(
                    WebhookEventModel.claimed_at.is_(None),
                    WebhookEventModel.claimed_at < stale_before,
                ),
            )
            .values(claimed_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.find_by_id(webhook_id)

    async def mark_as_processed(
        self, webhook_id: UUID, *, error_message: Optional[str] = None
    ) -> Optional[WebhookEvent]:
        values: Dict[str, Any] = {
            "processed": True,
            "processed_at": utcnow(),
            "claimed_at": None,
        }
        if error_message is not None:
            values["error_message"] = error_message
        stmt = (
            update(WebhookEventModel)
            .where(
                WebhookEventModel.id == webhook_id,
                WebhookEventModel.processed.is_(False),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            logger.warning("webhook_already_processed", webhook_id=str(webhook_id))
            return None
        return await self.find_by_id(webhook_id)

    async def reset(self, webhook_id: UUID, *, stale_before: datetime) -> Optional[WebhookEvent]:
        stmt = (
            update(WebhookEventModel)
            .where(
                WebhookEventModel.id == webhook_id,
                or_(
                    WebhookEventModel.claimed_at.is_(None),
                    WebhookEventModel.claimed_at < stale_before,
                ),
            )
            .values(processed=False, processed_at=None, error_message=None, claimed_at=None)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return None
        return await self.find_by_id(webhook_id)
