import asyncio
from datetime import timedelta
from uuid import uuid4

from src.shared.database.base_model import utcnow


async def _stored(uow_factory, event_type="message.status", payload=None):
    async with uow_factory() as uow:
        webhook = await uow.webhooks.create(event_type, payload or {"k": 1})
        await uow.commit()
    return webhook


async def test_create_defaults(uow_factory):
    webhook = await _stored(uow_factory)

    assert webhook.id is not None
    assert webhook.processed is False
    assert webhook.processed_at is None
    assert webhook.error_message is None
    assert webhook.payload == {"k": 1}


async def test_claim_is_exclusive_until_stale(uow_factory):
    webhook = await _stored(uow_factory)

    async with uow_factory() as uow:
        first = await uow.webhooks.claim(webhook.id, stale_before=utcnow() - timedelta(minutes=5))
        await uow.commit()
    async with uow_factory() as uow:
        second = await uow.webhooks.claim(webhook.id, stale_before=utcnow() - timedelta(minutes=5))
        await uow.commit()
    async with uow_factory() as uow:
        # a claim older than the cutoff has expired
        third = await uow.webhooks.claim(webhook.id, stale_before=utcnow() + timedelta(seconds=1))
        await uow.commit()

    assert first is not None and first.claimed_at is not None
    assert second is None
    assert third is not None


async def test_mark_as_processed_only_once(uow_factory):
    webhook = await _stored(uow_factory)

    async with uow_factory() as uow:
        done = await uow.webhooks.mark_as_processed(webhook.id, error_message="handler failed")
        again = await uow.webhooks.mark_as_processed(webhook.id)
        await uow.commit()

    assert done.processed is True
    assert done.processed_at is not None
    assert done.error_message == "handler failed"
    assert done.claimed_at is None
    assert again is None


async def test_processed_records_cannot_be_claimed(uow_factory):
    webhook = await _stored(uow_factory)
    async with uow_factory() as uow:
        await uow.webhooks.mark_as_processed(webhook.id)
        claimed = await uow.webhooks.claim(webhook.id, stale_before=utcnow())
        await uow.commit()

    assert claimed is None


async def test_unprocessed_listing_oldest_first(uow_factory):
    first = await _stored(uow_factory)
    await asyncio.sleep(0.01)
    second = await _stored(uow_factory)
    await asyncio.sleep(0.01)
    done = await _stored(uow_factory)
    async with uow_factory() as uow:
        await uow.webhooks.mark_as_processed(done.id)
        await uow.commit()

    async with uow_factory() as uow:
        pending = await uow.webhooks.find_unprocessed()
        limited = await uow.webhooks.find_unprocessed(limit=1)

    assert [w.id for w in pending] == [first.id, second.id]
    assert [w.id for w in limited] == [first.id]


async def test_find_by_event_type_newest_first(uow_factory):
    older = await _stored(uow_factory, event_type="a")
    await asyncio.sleep(0.01)
    newer = await _stored(uow_factory, event_type="a")
    await _stored(uow_factory, event_type="b")

    async with uow_factory() as uow:
        found = await uow.webhooks.find_by_event_type("a")

    assert [w.id for w in found] == [newer.id, older.id]


async def test_reset_starts_new_lifecycle(uow_factory):
    webhook = await _stored(uow_factory)
    async with uow_factory() as uow:
        await uow.webhooks.mark_as_processed(webhook.id, error_message="x")
        reset = await uow.webhooks.reset(webhook.id, stale_before=utcnow())
        missing = await uow.webhooks.reset(uuid4(), stale_before=utcnow())
        await uow.commit()

    assert reset.processed is False
    assert reset.processed_at is None
    assert reset.error_message is None
    assert missing is None


async def test_find_unprocessed_pages_with_cursor(uow_factory):
    stored = []
    for n in range(3):
        stored.append(await _stored(uow_factory, payload={"n": n}))
        await asyncio.sleep(0.002)

    async with uow_factory() as uow:
        first = await uow.webhooks.find_unprocessed(limit=2)
        last = first[-1]
        rest = await uow.webhooks.find_unprocessed(limit=2, after=(last.created_at, last.id))
        end = await uow.webhooks.find_unprocessed(limit=2, after=(rest[-1].created_at, rest[-1].id))

    assert [w.id for w in first + rest] == [w.id for w in stored]
    assert end == []


async def test_reset_refuses_a_live_claim(uow_factory):
    webhook = await _stored(uow_factory)
    async with uow_factory() as uow:
        await uow.webhooks.claim(webhook.id, stale_before=utcnow())
        await uow.commit()

    async with uow_factory() as uow:
        blocked = await uow.webhooks.reset(webhook.id, stale_before=utcnow() - timedelta(minutes=5))
        taken_over = await uow.webhooks.reset(webhook.id, stale_before=utcnow() + timedelta(seconds=1))
        await uow.commit()

    assert blocked is None
    assert taken_over.claimed_at is None
    assert taken_over.processed is False
