# src/worker/webhook_reprocessor.py
"""
Recovery worker for webhooks that were stored but never processed
(for example when the API process stopped before its background queue drained).

Run: python -m src.worker.webhook_reprocessor
"""
from __future__ import annotations

import asyncio
import signal
from functools import partial
from typing import Optional

from src.config import Settings, get_settings
from src.messaging.application.handlers import build_default_registry
from src.messaging.application.services.message_service import MessageService
from src.messaging.application.services.webhook_service import ReprocessSummary, WebhookService
from src.messaging.infrastructure.persistence.unit_of_work import MessagingUnitOfWork
from src.shared.database import Database
from src.shared.logging import configure_logging, get_logger
from src.shared.tasks import BackgroundTaskQueue

logger = get_logger("worker.webhook_reprocessor")


class WebhookReprocessor:
    def __init__(self, webhook_service: WebhookService, interval_seconds: float) -> None:
        self.webhook_service = webhook_service
        self.interval_seconds = interval_seconds
        self._stop = asyncio.Event()

    def stop(self) -> None:
        self._stop.set()

    async def run_once(self) -> ReprocessSummary:
        return await self.webhook_service.reprocess_all_unprocessed()

    async def run(self) -> None:
        logger.info("reprocessor_starting", interval_seconds=self.interval_seconds)
        try:
            while not self._stop.is_set():
                try:
                    summary = await self.run_once()
                    if summary.total:
                        logger.info("reprocessor_pass", **summary.to_dict())
                except Exception as e:
                    # a failed pass is retried on the next tick
                    logger.error("reprocessor_pass_failed", error=str(e), exc_info=e)

                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self.interval_seconds)
                except asyncio.TimeoutError:
                    pass
        except asyncio.CancelledError:
            pass
        finally:
            logger.info("reprocessor_stopping")


def build_webhook_service(
    db: Database, task_queue: BackgroundTaskQueue, settings: Settings
) -> WebhookService:
    uow_factory = partial(MessagingUnitOfWork, db.session_factory)
    return WebhookService(
        uow_factory,
        task_queue,
        build_default_registry(MessageService(uow_factory)),
        claim_ttl_seconds=settings.WEBHOOK_CLAIM_TTL_SECONDS,
        batch_size=settings.REPROCESS_BATCH_SIZE,
    )


# =========================
# Entrypoint
# =========================

async def main(settings: Optional[Settings] = None) -> None:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON, settings.LOG_CACHE_LOGGERS)

    db = Database(
        settings.DATABASE_URL,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )
    # passes run inline; the queue only backs WebhookService.receive(), which this worker never calls
    task_queue = BackgroundTaskQueue(workers=1)

    worker = WebhookReprocessor(
        build_webhook_service(db, task_queue, settings),
        interval_seconds=settings.REPROCESS_INTERVAL_SECONDS,
    )

    # Graceful shutdown
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, worker.stop)
        except NotImplementedError:
            # Windows
            pass

    try:
        await worker.run()
    finally:
        await db.dispose()


if __name__ == "__main__":
    # Allow: python -m src.worker.webhook_reprocessor
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
