# src/shared/tasks.py
"""
In-process background work queue.

Fire-and-forget work (webhook processing, lifecycle callbacks) is submitted
here instead of being spawned ad hoc. A fixed pool of asyncio workers drains
the queue; every failure is logged and recorded on the ``failures`` channel so
it can be inspected (and asserted on in tests) rather than only reaching the
log sink.
"""
from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Deque, List, Optional

from src.shared.logging import get_logger

logger = get_logger(__name__)

JobFn = Callable[[], Awaitable[Any]]
FailureListener = Callable[["TaskFailure"], None]


@dataclass
class TaskFailure:
    name: str
    error: BaseException
    failed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class _Job:
    name: str
    fn: JobFn
    future: "asyncio.Future[Any]"


class BackgroundTaskQueue:
    def __init__(self, workers: int = 4, max_failures: int = 1000) -> None:
        self._worker_count = max(1, workers)
        self._queue: "asyncio.Queue[Optional[_Job]]" = asyncio.Queue()
        self._workers: List[asyncio.Task] = []
        self._listeners: List[FailureListener] = []
        self.failures: Deque[TaskFailure] = deque(maxlen=max_failures)
        self.completed = 0

    @property
    def running(self) -> bool:
        return bool(self._workers)

    def on_failure(self, listener: FailureListener) -> None:
        self._listeners.append(listener)

    async def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"bg-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info("task_queue_started", workers=self._worker_count)

    def submit(self, name: str, fn: JobFn) -> "asyncio.Future[Any]":
        """
        Enqueue ``fn`` and return immediately.

        The returned future resolves with the job's result or its exception;
        callers are not required to await it.
        """
        if not self._workers:
            raise RuntimeError("BackgroundTaskQueue.start() must be awaited before submit()")
        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()
        self._queue.put_nowait(_Job(name=name, fn=fn, future=future))
        logger.debug("task_submitted", task=name, depth=self._queue.qsize())
        return future

    async def join(self) -> None:
        """Wait until every job submitted so far has finished."""
        await self._queue.join()

    async def stop(self, drain: bool = True) -> None:
        if not self._workers:
            return
        if drain:
            await self._queue.join()
        for _ in self._workers:
            self._queue.put_nowait(None)
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("task_queue_stopped", completed=self.completed, failed=len(self.failures))

    async def _worker(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                if job is None:
                    return
                await self._run(job)
            finally:
                self._queue.task_done()

    async def _run(self, job: _Job) -> None:
        try:
            result = await job.fn()
        except asyncio.CancelledError:
            job.future.cancel()
            raise
        except Exception as exc:
            failure = TaskFailure(name=job.name, error=exc)
            self.failures.append(failure)
            logger.error("task_failed", task=job.name, error=str(exc), exc_info=exc)
            for listener in self._listeners:
                listener(failure)
            if not job.future.done():
                job.future.set_exception(exc)
                # reported through the failures channel; nobody has to await the future
                job.future.exception()
            return
        self.completed += 1
        if not job.future.done():
            job.future.set_result(result)
