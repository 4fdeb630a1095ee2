# src/simulation/application/lifecycle_scheduler.py
"""
Timed status lifecycle for simulated messages.

Each accepted message gets three one-shot jobs (sent, delivered, read) on an
APScheduler ``AsyncIOScheduler``, with run dates computed at enqueue time.
When a job runs it submits the dispatch to the background task queue, so a
slow or failing callback never holds up sibling events.

Jobs live in the scheduler's in-memory job store. Events still pending at
shutdown are removed and counted in the ``lifecycle_events_lost`` log record;
nothing persists them across a restart.
"""
from __future__ import annotations

import asyncio
import random
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from apscheduler.job import Job
from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from src.messaging.domain.value_objects import LIFECYCLE_STATUSES, MessageStatus
from src.shared.logging import get_logger
from src.shared.tasks import BackgroundTaskQueue
from src.simulation.infrastructure.webhook_dispatcher import DeliveryResult, WebhookDispatcher

logger = get_logger(__name__)

DelayRange = Tuple[float, float]


class ScheduledEvent:
    """Handle for one pending status callback, wrapping its scheduler job."""

    def __init__(
        self,
        phone_number_id: str,
        wamid: str,
        recipient_id: str,
        status: MessageStatus,
        delay: float,
    ) -> None:
        self.phone_number_id = phone_number_id
        self.wamid = wamid
        self.recipient_id = recipient_id
        self.status = status
        self.delay = delay
        self.fired = False
        self.cancelled = False
        self.job: Optional[Job] = None
        self._done: asyncio.Future = asyncio.get_running_loop().create_future()

    @property
    def pending(self) -> bool:
        return not (self.fired or self.cancelled)

    def cancel(self) -> bool:
        """Remove the job; False if it already fired or was cancelled."""
        if not self.pending:
            return False
        self.cancelled = True
        if self.job is not None:
            try:
                self.job.remove()
            except JobLookupError:
                # already handed to the executor; _fire checks ``cancelled``
                logger.debug("lifecycle_job_already_running", wamid=self.wamid, status=self.status.value)
        if not self._done.done():
            self._done.set_result(None)
        return True

    async def wait(self) -> Optional[DeliveryResult]:
        """Wait for the callback attempt; None if cancelled or the dispatch raised."""
        return await asyncio.shield(self._done)

    def _resolve(self, job: "asyncio.Future") -> None:
        if self._done.done():
            return
        if job.cancelled() or job.exception() is not None:
            self._done.set_result(None)
        else:
            self._done.set_result(job.result())

    def __repr__(self) -> str:
        return f"<ScheduledEvent({self.wamid}, {self.status.value}, +{self.delay:.2f}s)>"


class LifecycleScheduler:
    def __init__(
        self,
        dispatcher: WebhookDispatcher,
        task_queue: BackgroundTaskQueue,
        *,
        sent_delay: float = 0.5,
        delivered_delay: DelayRange = (1.0, 3.0),
        read_delay: DelayRange = (2.0, 5.0),
        rng: Optional[random.Random] = None,
    ) -> None:
        self.dispatcher = dispatcher
        self.task_queue = task_queue
        self.sent_delay = sent_delay
        self.delivered_delay = delivered_delay
        self.read_delay = read_delay
        self._rng = rng or random.Random()
        # late jobs still run, each one separately
        self.scheduler = AsyncIOScheduler(
            timezone=timezone.utc,
            job_defaults={"misfire_grace_time": None, "coalesce": False},
        )
        self._pending: Dict[str, List[ScheduledEvent]] = {}
        self._idle = asyncio.Event()
        self._idle.set()

    def start(self) -> None:
        """Start the job scheduler on the running loop (idempotent)."""
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("lifecycle_scheduler_started")

    def delays(self) -> List[float]:
        """Absolute offsets for sent, delivered and read, drawn once per message."""
        sent = self.sent_delay
        delivered = sent + self._rng.uniform(*self.delivered_delay)
        read = delivered + self._rng.uniform(*self.read_delay)
        return [sent, delivered, read]

    def schedule(self, phone_number_id: str, wamid: str, recipient_id: str) -> List[ScheduledEvent]:
        if not self.dispatcher.enabled:
            logger.warning("lifecycle_skipped_no_callback_url", wamid=wamid)
            return []

        self.start()
        now = datetime.now(timezone.utc)
        events = []
        for status, delay in zip(LIFECYCLE_STATUSES, self.delays()):
            event = ScheduledEvent(phone_number_id, wamid, recipient_id, status, delay)
            event.job = self.scheduler.add_job(
                self._fire,
                DateTrigger(run_date=now + timedelta(seconds=delay), timezone=timezone.utc),
                args=[event],
                name=f"lifecycle.{status.value}:{wamid}",
            )
            events.append(event)

        self._pending.setdefault(wamid, []).extend(events)
        self._idle.clear()
        logger.info(
            "lifecycle_scheduled",
            wamid=wamid,
            to=recipient_id,
            delays=[round(e.delay, 3) for e in events],
        )
        return events

    def cancel(self, wamid: str) -> int:
        """Cancel every pending event of one message; returns how many were stopped."""
        stopped = sum(1 for event in self._pending.pop(wamid, []) if event.cancel())
        self._refresh_idle()
        if stopped:
            logger.info("lifecycle_cancelled", wamid=wamid, events=stopped)
        return stopped

    def pending(self, wamid: Optional[str] = None) -> List[ScheduledEvent]:
        if wamid is not None:
            return [e for e in self._pending.get(wamid, []) if e.pending]
        return [e for events in self._pending.values() for e in events if e.pending]

    async def wait_idle(self) -> None:
        """Wait until every scheduled event has fired and its dispatch finished."""
        await self._idle.wait()
        await self.task_queue.join()

    def shutdown(self) -> int:
        """
        Remove every pending job and stop the job scheduler.

        Pending events are not persisted; how many were dropped is logged as
        ``lifecycle_events_lost`` and returned.
        """
        lost = 0
        for wamid in list(self._pending):
            lost += sum(1 for event in self._pending.pop(wamid) if event.cancel())
        for job in self.scheduler.get_jobs():
            job.remove()
        self._refresh_idle()
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        if lost:
            logger.warning("lifecycle_events_lost", count=lost)
        return lost

    async def _fire(self, event: ScheduledEvent) -> None:
        if event.cancelled:
            return
        event.fired = True
        self._forget(event)

        if not self.task_queue.running:
            logger.warning("lifecycle_dropped_queue_stopped", wamid=event.wamid, status=event.status.value)
            event._done.set_result(None)
            return

        job = self.task_queue.submit(
            f"lifecycle.{event.status.value}:{event.wamid}",
            lambda: self.dispatcher.send_status_update(
                event.phone_number_id, event.wamid, event.recipient_id, event.status
            ),
        )
        job.add_done_callback(event._resolve)

    def _forget(self, event: ScheduledEvent) -> None:
        events = self._pending.get(event.wamid)
        if events is not None:
            remaining = [e for e in events if e is not event and e.pending]
            if remaining:
                self._pending[event.wamid] = remaining
            else:
                del self._pending[event.wamid]
        self._refresh_idle()

    def _refresh_idle(self) -> None:
        if not any(e.pending for events in self._pending.values() for e in events):
            self._idle.set()
