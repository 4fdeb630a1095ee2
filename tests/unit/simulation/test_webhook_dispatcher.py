import json

import httpx

from src.messaging.domain.exceptions import InvalidStatusTransitionError
from src.messaging.domain.value_objects import MessageStatus
from src.shared.security import verify_hub_signature
from src.simulation.infrastructure.webhook_dispatcher import WebhookDispatcher
from tests.support import APP_SECRET, CALLBACK_URL, CallbackRecorder

WAMID = "wamid.HBgL0123456789ABCDEF0123456789ABCDEF"


def _dispatcher(handler, **kwargs) -> WebhookDispatcher:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return WebhookDispatcher(client, CALLBACK_URL, APP_SECRET, **kwargs)


async def test_posts_signed_compact_body():
    recorder = CallbackRecorder()
    dispatcher = _dispatcher(recorder)

    result = await dispatcher.send_status_update("PNID1", WAMID, "15551234567", MessageStatus.SENT)

    assert result.delivered is True
    assert result.status_code == 200
    assert len(recorder.requests) == 1
    request = recorder.requests[0]
    assert str(request.url) == CALLBACK_URL
    assert request.method == "POST"
    assert request.headers["content-type"] == "application/json"
    assert request.headers["user-agent"] == "WhatsApp/FakeSimulator"
    assert verify_hub_signature(request.content, APP_SECRET, request.headers["x-hub-signature-256"])
    # signed bytes are the bytes on the wire
    payload = json.loads(request.content)
    assert request.content == json.dumps(payload, separators=(",", ":")).encode()
    assert payload["entry"][0]["changes"][0]["value"]["statuses"][0]["status"] == "sent"


async def test_non_2xx_is_reported_not_raised():
    dispatcher = _dispatcher(CallbackRecorder(status_code=503))

    result = await dispatcher.send_status_update("PNID1", WAMID, "1555", MessageStatus.DELIVERED)

    assert result.delivered is False
    assert result.status_code == 503


async def test_network_error_is_reported_not_raised():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    dispatcher = _dispatcher(refuse)

    result = await dispatcher.send_status_update("PNID1", WAMID, "1555", MessageStatus.READ)

    assert result.delivered is False
    assert "connection refused" in result.error


async def test_status_is_recorded_before_sending():
    calls = []
    recorder = CallbackRecorder()

    async def record(wamid, status):
        calls.append((wamid, status, len(recorder.requests)))

    dispatcher = _dispatcher(recorder, status_recorder=record)
    await dispatcher.send_status_update("PNID1", WAMID, "1555", MessageStatus.DELIVERED)

    assert calls == [(WAMID, MessageStatus.DELIVERED, 0)]
    assert len(recorder.requests) == 1


async def test_rejected_status_update_does_not_stop_callback():
    async def reject(wamid, status):
        raise InvalidStatusTransitionError("backward")

    recorder = CallbackRecorder()
    dispatcher = _dispatcher(recorder, status_recorder=reject)

    result = await dispatcher.send_status_update("PNID1", WAMID, "1555", MessageStatus.SENT)

    assert result.delivered is True
    assert len(recorder.requests) == 1


async def test_without_callback_url_nothing_is_sent():
    recorder = CallbackRecorder()
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    dispatcher = WebhookDispatcher(client, None, APP_SECRET)

    result = await dispatcher.send_status_update("PNID1", WAMID, "1555", MessageStatus.SENT)

    assert dispatcher.enabled is False
    assert result.delivered is False
    assert recorder.requests == []
