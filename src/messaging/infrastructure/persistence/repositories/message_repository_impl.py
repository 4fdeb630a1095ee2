# src/messaging/infrastructure/persistence/repositories/message_repository_impl.py
"""
SQLAlchemy Implementation of MessageRepository
"""
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.messaging.domain.entities.message import Message
from src.messaging.domain.protocols.message_repository import MessageRepository
from src.messaging.domain.value_objects.message_status import MessageStatus
from src.messaging.infrastructure.persistence.models.message_model import MessageModel
from src.shared.logging import get_logger

logger = get_logger(__name__)


def _to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.id,
        from_number=model.from_number,
        to_number=model.to_number,
        message_text=model.message_text,
        message_type=model.message_type,
        status=MessageStatus(model.status),
        whatsapp_message_id=model.whatsapp_message_id,
        metadata=dict(model.metadata_ or {}),
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


class SQLAlchemyMessageRepository(MessageRepository):
    """
    Message persistence over one AsyncSession.

    The repository never commits; the surrounding unit of work owns the
    transaction.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, message: Message) -> Message:
        model = MessageModel(
            from_number=message.from_number,
            to_number=message.to_number,
            message_text=message.message_text,
            message_type=message.message_type,
            status=MessageStatus(message.status).value,
            whatsapp_message_id=message.whatsapp_message_id,
            metadata_=message.metadata or None,
        )
        self.session.add(model)
        await self.session.flush()
        logger.debug("message_created", message_id=str(model.id), to=model.to_number)
        return _to_entity(model)

    async def find_by_id(self, message_id: UUID) -> Optional[Message]:
        model = await self._get_model(message_id)
        return _to_entity(model) if model else None

    async def find_by_whatsapp_message_id(self, wamid: str) -> Optional[Message]:
        stmt = select(MessageModel).where(MessageModel.whatsapp_message_id == wamid)
        model = (await self.session.execute(stmt)).scalar_one_or_none()
        return _to_entity(model) if model else None

    async def find_all(self, limit: int = 100, offset: int = 0) -> List[Message]:
        stmt = (
            select(MessageModel)
            .order_by(MessageModel.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return [_to_entity(m) for m in result.scalars().all()]

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(MessageModel))
        return int(result.scalar_one())

    async def find_by_phone_number(self, phone_number: str, limit: int = 50) -> List[Message]:
        stmt = (
            select(MessageModel)
            .where(
                or_(
                    MessageModel.from_number == phone_number,
                    MessageModel.to_number == phone_number,
                )
            )
            .order_by(MessageModel.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [_to_entity(m) for m in result.scalars().all()]

    async def update(
        self,
        message_id: UUID,
        *,
        status: Optional[MessageStatus] = None,
        whatsapp_message_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Optional[Message]:
        """
        Apply a partial update through the entity so lifecycle rules hold.

        Raises:
            InvalidStatusTransitionError: status would move backward
            WhatsAppMessageIdImmutableError: a different provider id is already set
        """
        model = await self._get_model(message_id, for_update=True)
        if model is None:
            return None

        entity = _to_entity(model)
        changed = False
        if status is not None:
            changed |= entity.apply_status(MessageStatus(status))
        if whatsapp_message_id is not None:
            changed |= entity.assign_whatsapp_message_id(whatsapp_message_id)
        if metadata is not None:
            entity.metadata = {**entity.metadata, **metadata}
            changed = True

        if changed:
            model.status = entity.status.value
            model.whatsapp_message_id = entity.whatsapp_message_id
            model.metadata_ = entity.metadata or None
            await self.session.flush()
            logger.debug("message_updated", message_id=str(message_id), status=model.status)
        return _to_entity(model)

    async def delete(self, message_id: UUID) -> bool:
        result = await self.session.execute(
            delete(MessageModel).where(MessageModel.id == message_id)
        )
        return (result.rowcount or 0) > 0

    async def _get_model(self, message_id: UUID, for_update: bool = False) -> Optional[MessageModel]:
        stmt = select(MessageModel).where(MessageModel.id == message_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
