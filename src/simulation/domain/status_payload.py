# src/simulation/domain/status_payload.py
"""Message ids and status callback envelopes produced by the simulator."""
import secrets
import time
from typing import Any, Dict, Optional

from src.messaging.domain.value_objects import MessageStatus
from src.simulation.domain.whatsapp_types import Contact, MessageRef, SendMessageResponse

WAMID_PREFIX = "wamid.HBgL"
DEFAULT_WABA_ID = "100000000000000"
DEFAULT_DISPLAY_PHONE_NUMBER = "1555000000"


def generate_wamid() -> str:
    """``wamid.HBgL`` followed by 16 random bytes as 32 uppercase hex characters."""
    return WAMID_PREFIX + secrets.token_hex(16).upper()


def conversation_id_for(wamid: str) -> str:
    return f"CON_{wamid[10:20]}"


def build_send_ack(recipient: str, wamid: str) -> SendMessageResponse:
    return SendMessageResponse(
        contacts=[Contact(input=recipient, wa_id=recipient)],
        messages=[MessageRef(id=wamid)],
    )


def build_status_payload(
    phone_number_id: str,
    wamid: str,
    recipient_id: str,
    status: MessageStatus,
    *,
    waba_id: str = DEFAULT_WABA_ID,
    display_phone_number: str = DEFAULT_DISPLAY_PHONE_NUMBER,
    timestamp: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Status callback envelope for one message.

    ``pricing`` is attached to every status except ``read``.
    """
    status = MessageStatus(status)
    status_obj: Dict[str, Any] = {
        "id": wamid,
        "status": status.value,
        "timestamp": str(int(time.time()) if timestamp is None else timestamp),
        "recipient_id": recipient_id,
        "conversation": {
            "id": conversation_id_for(wamid),
            "origin": {"type": "marketing"},
        },
    }
    if status != MessageStatus.READ:
        status_obj["pricing"] = {
            "billable": True,
            "pricing_model": "CBP",
            "category": "marketing",
        }

    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": waba_id,
                "changes": [
                    {
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {
                                "display_phone_number": display_phone_number,
                                "phone_number_id": phone_number_id,
                            },
                            "statuses": [status_obj],
                        },
                        "field": "messages",
                    }
                ],
            }
        ],
    }
