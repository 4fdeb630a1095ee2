import re
import time

from src.messaging.domain.value_objects import MessageStatus
from src.simulation.domain import (
    build_send_ack,
    build_status_payload,
    conversation_id_for,
    generate_wamid,
)

WAMID_RE = re.compile(r"^wamid\.HBgL[0-9A-F]{32}$")


def test_wamid_format():
    ids = {generate_wamid() for _ in range(50)}
    assert len(ids) == 50
    assert all(WAMID_RE.match(i) for i in ids)


def test_conversation_id_uses_characters_10_to_20():
    wamid = "wamid.HBgL0123456789ABCDEF0123456789ABCDEF"
    assert conversation_id_for(wamid) == "CON_" + wamid[10:20]
    assert conversation_id_for(wamid) == "CON_0123456789"


def test_send_ack_shape():
    ack = build_send_ack("15551234567", "wamid.HBgLX").model_dump()
    assert ack == {
        "messaging_product": "whatsapp",
        "contacts": [{"input": "15551234567", "wa_id": "15551234567"}],
        "messages": [{"id": "wamid.HBgLX"}],
    }


def test_status_envelope_shape():
    wamid = generate_wamid()
    before = int(time.time())
    payload = build_status_payload("PNID1", wamid, "15551234567", MessageStatus.DELIVERED)

    assert payload["object"] == "whatsapp_business_account"
    entry = payload["entry"][0]
    assert entry["id"] == "100000000000000"
    change = entry["changes"][0]
    assert change["field"] == "messages"
    value = change["value"]
    assert value["messaging_product"] == "whatsapp"
    assert value["metadata"] == {"display_phone_number": "1555000000", "phone_number_id": "PNID1"}

    status = value["statuses"][0]
    assert status["id"] == wamid
    assert status["status"] == "delivered"
    assert status["recipient_id"] == "15551234567"
    assert isinstance(status["timestamp"], str)
    assert int(status["timestamp"]) >= before
    assert status["conversation"] == {"id": conversation_id_for(wamid), "origin": {"type": "marketing"}}
    assert status["pricing"] == {"billable": True, "pricing_model": "CBP", "category": "marketing"}


def test_pricing_present_unless_read():
    for status in (MessageStatus.SENT, MessageStatus.DELIVERED):
        item = build_status_payload("P", "wamid.HBgLX", "1", status)["entry"][0]["changes"][0]["value"]["statuses"][0]
        assert "pricing" in item
    read = build_status_payload("P", "wamid.HBgLX", "1", MessageStatus.READ)["entry"][0]["changes"][0]["value"]["statuses"][0]
    assert "pricing" not in read


def test_business_account_overrides():
    payload = build_status_payload(
        "P", "wamid.HBgLX", "1", "sent", waba_id="999", display_phone_number="15550000000", timestamp=42
    )
    assert payload["entry"][0]["id"] == "999"
    value = payload["entry"][0]["changes"][0]["value"]
    assert value["metadata"]["display_phone_number"] == "15550000000"
    assert value["statuses"][0]["timestamp"] == "42"
