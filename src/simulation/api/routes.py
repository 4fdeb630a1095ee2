from __future__ import annotations

from fastapi import APIRouter, Depends

from src.dependencies import get_simulation_service
from src.shared.logging import get_logger
from src.simulation.application.simulation_service import SimulationService
from src.simulation.domain.whatsapp_types import SendMessageResponse, TemplateMessagePayload

logger = get_logger(__name__)

router = APIRouter(prefix="/simulation", tags=["Simulation"])


@router.post("/{phone_number_id}/messages", response_model=SendMessageResponse)
async def send_template_message(
    phone_number_id: str,
    body: TemplateMessagePayload,
    svc: SimulationService = Depends(get_simulation_service),
) -> SendMessageResponse:
    """Mock of the Cloud API ``POST /{phone_number_id}/messages`` endpoint; returns the raw provider ack."""
    logger.info(
        "simulated_send_received",
        phone_number_id=phone_number_id,
        to=body.to,
        template=body.template.name,
    )
    return await svc.send_template_message(phone_number_id, body)
