from __future__ import annotations

from typing import Any, Dict
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status

from src.dependencies import get_message_service
from src.messaging.api.schemas import MessageCreateRequest, MessageResponse, MessageUpdateRequest
from src.messaging.application.services.message_service import MessageService
from src.messaging.domain.value_objects.phone_number import E164_PATTERN
from src.shared.http.responses import ResponseBuilder

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_message(
    body: MessageCreateRequest,
    svc: MessageService = Depends(get_message_service),
) -> Dict[str, Any]:
    message = await svc.create_message(
        from_number=body.from_number,
        to_number=body.to_number,
        message_text=body.message_text,
        message_type=body.message_type,
        metadata=body.metadata,
    )
    return ResponseBuilder.success(MessageResponse.from_entity(message), "Message created successfully")


@router.get("")
async def list_messages(
    limit: int = Query(100, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: MessageService = Depends(get_message_service),
) -> Dict[str, Any]:
    items, total = await svc.list_messages(limit=limit, offset=offset)
    return ResponseBuilder.paginated(
        [MessageResponse.from_entity(m) for m in items], total, limit, offset
    )


@router.get("/phone/{phone_number}")
async def list_messages_by_phone_number(
    phone_number: str = Path(..., pattern=E164_PATTERN.pattern),
    limit: int = Query(50, ge=1, le=100),
    svc: MessageService = Depends(get_message_service),
) -> Dict[str, Any]:
    items = await svc.list_by_phone_number(phone_number, limit=limit)
    return ResponseBuilder.success([MessageResponse.from_entity(m) for m in items])


@router.get("/{message_id}")
async def get_message(
    message_id: UUID,
    svc: MessageService = Depends(get_message_service),
) -> Dict[str, Any]:
    message = await svc.get_message(message_id)
    return ResponseBuilder.success(MessageResponse.from_entity(message))


@router.patch("/{message_id}")
async def update_message(
    message_id: UUID,
    body: MessageUpdateRequest,
    svc: MessageService = Depends(get_message_service),
) -> Dict[str, Any]:
    message = await svc.update_message(
        message_id,
        status=body.status,
        whatsapp_message_id=body.whatsapp_message_id,
        metadata=body.metadata,
    )
    return ResponseBuilder.success(MessageResponse.from_entity(message), "Message updated successfully")


@router.delete("/{message_id}")
async def delete_message(
    message_id: UUID,
    svc: MessageService = Depends(get_message_service),
) -> Dict[str, Any]:
    await svc.delete_message(message_id)
    return ResponseBuilder.success(None, "Message deleted successfully")
