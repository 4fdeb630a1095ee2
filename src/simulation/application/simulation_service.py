# src/simulation/application/simulation_service.py
"""
Outbound Simulator
Accepts template sends the way the Cloud API does and starts the simulated lifecycle.
"""
import time
from datetime import datetime, timezone
from typing import Callable

from src.messaging.domain.entities.message import Message
from src.messaging.domain.value_objects import MessageStatus
from src.messaging.infrastructure.persistence.unit_of_work import MessagingUnitOfWork
from src.shared.logging import get_logger
from src.simulation.application.lifecycle_scheduler import LifecycleScheduler
from src.simulation.domain.status_payload import build_send_ack, generate_wamid
from src.simulation.domain.whatsapp_types import SendMessageResponse, TemplateMessagePayload

logger = get_logger(__name__)


class SimulationService:
    def __init__(
        self,
        uow_factory: Callable[[], MessagingUnitOfWork],
        scheduler: LifecycleScheduler,
    ) -> None:
        self._uow_factory = uow_factory
        self.scheduler = scheduler

    async def send_template_message(
        self, phone_number_id: str, payload: TemplateMessagePayload
    ) -> SendMessageResponse:
        """
        Acknowledge a template send and schedule its status callbacks.

        The message is stored as ``pending`` and moved to ``sent`` with its
        wamid in one transaction. A storage failure is logged and the
        acknowledgement is returned regardless; the lifecycle is scheduled
        either way.
        """
        start = time.perf_counter()
        wamid = generate_wamid()
        template = payload.template

        message = Message(
            id=None,
            from_number=phone_number_id,
            to_number=payload.to,
            message_text=f"Template: {template.name} ({template.language.code})",
            message_type="template",
            metadata={
                "simulated": True,
                "messaging_product": payload.messaging_product,
                "recipient_type": payload.recipient_type,
                "template": template.model_dump(mode="json", exclude_none=True),
                "simulated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

        try:
            async with self._uow_factory() as uow:
                created = await uow.messages.create(message)
                await uow.messages.update(
                    created.id,
                    status=MessageStatus.SENT,
                    whatsapp_message_id=wamid,
                )
                await uow.commit()
        except Exception as exc:
            logger.error("simulated_message_persist_failed", wamid=wamid, error=str(exc), exc_info=exc)

        self.scheduler.schedule(phone_number_id, wamid, payload.to)

        logger.info(
            "simulated_send_acknowledged",
            wamid=wamid,
            to=payload.to,
            template=template.name,
            duration_ms=int((time.perf_counter() - start) * 1000),
        )
        return build_send_ack(payload.to, wamid)
