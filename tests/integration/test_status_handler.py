from src.messaging.application.handlers import STATUS_EVENT_TYPE, build_default_registry
from src.messaging.application.services.message_service import MessageService
from src.messaging.application.services.webhook_service import WebhookService
from src.messaging.domain.value_objects import MessageStatus
from src.simulation.domain import build_status_payload


async def _sent_message(messages: MessageService, wamid: str):
    return await messages.create_message(
        "15550001111",
        "15550002222",
        "Template: hello (en_US)",
        message_type="template",
        status=MessageStatus.SENT,
        whatsapp_message_id=wamid,
    )


async def test_status_envelope_updates_stored_message(uow_factory, task_queue):
    messages = MessageService(uow_factory)
    service = WebhookService(uow_factory, task_queue, build_default_registry(messages))
    message = await _sent_message(messages, "wamid.HBgLAAAA")

    webhook = await service.receive(
        STATUS_EVENT_TYPE,
        build_status_payload("PNID1", "wamid.HBgLAAAA", "15550002222", MessageStatus.DELIVERED),
    )
    await task_queue.join()

    assert (await service.get_webhook(webhook.id)).error_message is None
    assert (await messages.get_message(message.id)).status == MessageStatus.DELIVERED


async def test_late_status_is_ignored_not_failed(uow_factory, task_queue):
    messages = MessageService(uow_factory)
    service = WebhookService(uow_factory, task_queue, build_default_registry(messages))
    message = await _sent_message(messages, "wamid.HBgLBBBB")
    await messages.update_message(message.id, status=MessageStatus.READ)

    webhook = await service.receive(
        STATUS_EVENT_TYPE,
        build_status_payload("PNID1", "wamid.HBgLBBBB", "15550002222", MessageStatus.SENT),
    )
    await task_queue.join()

    stored = await service.get_webhook(webhook.id)
    assert stored.processed is True
    assert stored.error_message is None
    assert (await messages.get_message(message.id)).status == MessageStatus.READ


async def test_malformed_status_envelope_fails(uow_factory, task_queue):
    messages = MessageService(uow_factory)
    service = WebhookService(uow_factory, task_queue, build_default_registry(messages))

    webhook = await service.receive(STATUS_EVENT_TYPE, {"object": "whatsapp_business_account"})
    await task_queue.join()

    stored = await service.get_webhook(webhook.id)
    assert stored.processed is True
    assert stored.error_message == "payload carries no statuses"
