"""Message management service."""

from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from src.messaging.domain.entities.message import Message
from src.messaging.domain.exceptions import InvalidPhoneNumberError, MessageNotFoundError
from src.messaging.domain.value_objects import MessageStatus, is_valid_phone_number
from src.messaging.infrastructure.persistence.unit_of_work import MessagingUnitOfWork
from src.shared.logging import get_logger

logger = get_logger(__name__)

UnitOfWorkFactory = Callable[[], MessagingUnitOfWork]


class MessageService:
    """Create, read, update and delete stored messages."""

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    async def create_message(
        self,
        from_number: str,
        to_number: str,
        message_text: str,
        message_type: str = "text",
        status: MessageStatus = MessageStatus.PENDING,
        whatsapp_message_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Message:
        for field_name, value in (("from_number", from_number), ("to_number", to_number)):
            if not is_valid_phone_number(value):
                raise InvalidPhoneNumberError(
                    f"Invalid phone number format: {field_name}",
                    details={"field": field_name},
                )

        message = Message(
            id=None,
            from_number=from_number,
            to_number=to_number,
            message_text=message_text,
            message_type=message_type,
            status=MessageStatus(status),
            whatsapp_message_id=whatsapp_message_id,
            metadata=dict(metadata or {}),
        )
        async with self._uow_factory() as uow:
            created = await uow.messages.create(message)
            await uow.commit()

        logger.info("message_created", message_id=str(created.id), to=created.to_number)
        return created

    async def get_message(self, message_id: UUID) -> Message:
        async with self._uow_factory() as uow:
            message = await uow.messages.find_by_id(message_id)
        if message is None:
            raise MessageNotFoundError(f"Message {message_id} not found")
        return message

    async def list_messages(self, limit: int = 100, offset: int = 0) -> Tuple[List[Message], int]:
        """Returns one page (newest first) and the total number of stored messages."""
        async with self._uow_factory() as uow:
            items = await uow.messages.find_all(limit=limit, offset=offset)
            total = await uow.messages.count()
        return items, total

    async def list_by_phone_number(self, phone_number: str, limit: int = 50) -> List[Message]:
        if not is_valid_phone_number(phone_number):
            raise InvalidPhoneNumberError("Invalid phone number format", details={"field": "phone_number"})
        async with self._uow_factory() as uow:
            return await uow.messages.find_by_phone_number(phone_number, limit=limit)

    async def update_message(
        self,
        message_id: UUID,
        *,
        status: Optional[MessageStatus] = None,
        whatsapp_message_id: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Message:
        async with self._uow_factory() as uow:
            updated = await uow.messages.update(
                message_id,
                status=status,
                whatsapp_message_id=whatsapp_message_id,
                metadata=metadata,
            )
            if updated is None:
                raise MessageNotFoundError(f"Message {message_id} not found")
            await uow.commit()

        logger.info("message_updated", message_id=str(message_id), status=updated.status.value)
        return updated

    async def delete_message(self, message_id: UUID) -> None:
        async with self._uow_factory() as uow:
            deleted = await uow.messages.delete(message_id)
            if not deleted:
                raise MessageNotFoundError(f"Message {message_id} not found")
            await uow.commit()
        logger.info("message_deleted", message_id=str(message_id))

    async def apply_provider_status(self, wamid: str, status: MessageStatus) -> Optional[Message]:
        """
        Apply a provider status to the message carrying ``wamid``.

        Returns:
            The updated message, or None when no stored message has that id

        Raises:
            InvalidStatusTransitionError: the status would move the message backward
        """
        async with self._uow_factory() as uow:
            message = await uow.messages.find_by_whatsapp_message_id(wamid)
            if message is None:
                logger.warning("status_for_unknown_message", wamid=wamid, status=str(status))
                return None
            updated = await uow.messages.update(message.id, status=MessageStatus(status))
            await uow.commit()

        logger.debug("message_status_applied", wamid=wamid, status=updated.status.value)
        return updated
