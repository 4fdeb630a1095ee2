import asyncio
import random

import httpx
import pytest
from structlog.testing import capture_logs

from src.messaging.domain.value_objects import MessageStatus
from src.simulation.application.lifecycle_scheduler import LifecycleScheduler
from src.simulation.infrastructure.webhook_dispatcher import WebhookDispatcher
from tests.support import APP_SECRET, CALLBACK_URL, CallbackRecorder

WAMID = "wamid.HBgL0123456789ABCDEF0123456789ABCDEF"


def _scheduler(task_queue, recorder, callback_url=CALLBACK_URL, **kwargs) -> LifecycleScheduler:
    client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    dispatcher = WebhookDispatcher(client, callback_url, APP_SECRET)
    kwargs.setdefault("sent_delay", 0.01)
    kwargs.setdefault("delivered_delay", (0.03, 0.04))
    kwargs.setdefault("read_delay", (0.03, 0.04))
    return LifecycleScheduler(dispatcher, task_queue, **kwargs)


def test_delays_follow_lifecycle_arithmetic():
    scheduler = LifecycleScheduler(
        dispatcher=None,
        task_queue=None,
        sent_delay=0.5,
        delivered_delay=(1.0, 3.0),
        read_delay=(2.0, 5.0),
        rng=random.Random(7),
    )
    for _ in range(100):
        sent, delivered, read = scheduler.delays()
        assert sent == 0.5
        assert 1.5 <= delivered <= 3.5
        assert delivered + 2.0 <= read <= delivered + 5.0


async def test_three_callbacks_in_order(task_queue):
    recorder = CallbackRecorder()
    scheduler = _scheduler(task_queue, recorder)

    events = scheduler.schedule("PNID1", WAMID, "15551234567")

    assert [e.status for e in events] == [MessageStatus.SENT, MessageStatus.DELIVERED, MessageStatus.READ]
    assert events[0].delay < events[1].delay < events[2].delay
    results = await asyncio.gather(*(e.wait() for e in events))
    await scheduler.wait_idle()

    assert all(r.delivered for r in results)
    assert recorder.statuses() == ["sent", "delivered", "read"]
    assert scheduler.pending() == []


async def test_no_callback_url_schedules_nothing(task_queue):
    recorder = CallbackRecorder()
    scheduler = _scheduler(task_queue, recorder, callback_url=None)

    with capture_logs() as logs:
        assert scheduler.schedule("PNID1", WAMID, "15551234567") == []

    [entry] = [e for e in logs if e["event"] == "lifecycle_skipped_no_callback_url"]
    assert entry["log_level"] == "warning"
    assert entry["wamid"] == WAMID
    assert scheduler.scheduler.get_jobs() == []
    await asyncio.sleep(0.1)
    assert recorder.requests == []


async def test_cancel_handle_stops_one_event(task_queue):
    recorder = CallbackRecorder()
    scheduler = _scheduler(task_queue, recorder)

    sent, delivered, read = scheduler.schedule("PNID1", WAMID, "15551234567")
    assert read.cancel() is True
    assert read.cancel() is False
    await scheduler.wait_idle()

    assert recorder.statuses() == ["sent", "delivered"]
    assert await read.wait() is None


async def test_cancel_by_wamid(task_queue):
    recorder = CallbackRecorder()
    scheduler = _scheduler(task_queue, recorder, sent_delay=0.05)

    scheduler.schedule("PNID1", WAMID, "15551234567")
    assert len(scheduler.pending(WAMID)) == 3
    assert len(scheduler.scheduler.get_jobs()) == 3
    assert scheduler.cancel(WAMID) == 3
    assert scheduler.scheduler.get_jobs() == []
    await scheduler.wait_idle()
    await asyncio.sleep(0.1)

    assert recorder.requests == []


async def test_shutdown_reports_lost_events(task_queue):
    recorder = CallbackRecorder()
    scheduler = _scheduler(task_queue, recorder, sent_delay=1.0)

    scheduler.schedule("PNID1", WAMID, "1555")
    scheduler.schedule("PNID1", WAMID.replace("0", "1"), "1555")

    assert len(scheduler.scheduler.get_jobs()) == 6
    with capture_logs() as logs:
        assert scheduler.shutdown() == 6

    [entry] = [e for e in logs if e["event"] == "lifecycle_events_lost"]
    assert entry["log_level"] == "warning"
    assert entry["count"] == 6
    assert scheduler.pending() == []
    assert scheduler.scheduler.get_jobs() == []


async def test_failed_dispatch_does_not_cancel_siblings(task_queue):
    seen = []

    def flaky(request):
        seen.append(request)
        if len(seen) == 1:
            raise httpx.ConnectError("down", request=request)
        return httpx.Response(200)

    scheduler = _scheduler(task_queue, flaky)
    events = scheduler.schedule("PNID1", WAMID, "15551234567")
    results = await asyncio.gather(*(e.wait() for e in events))

    assert len(seen) == 3
    assert [r.delivered for r in results] == [False, True, True]


async def test_dispatch_exception_lands_on_failure_channel(task_queue):
    recorder = CallbackRecorder()
    scheduler = _scheduler(task_queue, recorder)

    async def explode(*args):
        raise RuntimeError("dispatcher bug")

    scheduler.dispatcher.send_status_update = explode
    events = scheduler.schedule("PNID1", WAMID, "15551234567")
    results = await asyncio.gather(*(e.wait() for e in events))

    assert results == [None, None, None]
    assert [f.name.split(":")[0] for f in task_queue.failures] == [
        "lifecycle.sent",
        "lifecycle.delivered",
        "lifecycle.read",
    ]
