"""
Webhook Service
Stores inbound webhooks and processes them in the background.
"""
import asyncio
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from src.messaging.application.handlers import WebhookHandlerRegistry
from src.messaging.domain.entities.webhook_event import WebhookEvent
from src.messaging.domain.exceptions import WebhookNotFoundError
from src.messaging.infrastructure.persistence.unit_of_work import MessagingUnitOfWork
from src.shared.database.base_model import utcnow
from src.shared.exceptions import PersistenceError
from src.shared.logging import get_logger
from src.shared.tasks import BackgroundTaskQueue

logger = get_logger(__name__)


@dataclass
class ReprocessSummary:
    total: int = 0
    processed: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


class WebhookService:
    """
    Service for inbound webhook events.

    ``receive`` persists the event and hands ``process`` to the background
    queue. ``process`` claims a record before running its handler, so two
    passes over the same record (two reprocess calls, a retry racing the
    queue, or two worker processes) never handle it at the same time.
    A failed handler still marks the record processed; its error is kept in
    ``error_message`` and the record leaves the unprocessed listing.
    """

    def __init__(
        self,
        uow_factory: Callable[[], MessagingUnitOfWork],
        task_queue: BackgroundTaskQueue,
        handlers: WebhookHandlerRegistry,
        *,
        claim_ttl_seconds: float = 300,
        batch_size: int = 100,
    ) -> None:
        self._uow_factory = uow_factory
        self.task_queue = task_queue
        self.handlers = handlers
        self.claim_ttl = timedelta(seconds=claim_ttl_seconds)
        self.batch_size = batch_size
        self._locks: Dict[UUID, asyncio.Lock] = {}

    async def receive(self, event_type: str, payload: Dict[str, Any]) -> WebhookEvent:
        """Persist an inbound event and schedule its processing without awaiting it."""
        try:
            async with self._uow_factory() as uow:
                webhook = await uow.webhooks.create(event_type, payload)
                await uow.commit()
        except SQLAlchemyError as exc:
            logger.error("webhook_store_failed", event_type=event_type, error=str(exc))
            raise PersistenceError("Failed to store webhook") from exc

        logger.info("webhook_received", webhook_id=str(webhook.id), event_type=event_type)
        webhook_id = webhook.id
        self.task_queue.submit(f"webhook.process:{webhook_id}", lambda: self.process(webhook_id))
        return webhook

    async def process(self, webhook_id: UUID) -> Optional[WebhookEvent]:
        """
        Run the handler for one stored webhook and mark it processed.

        Returns:
            The processed record, or None when the record is missing, already
            processed, or being processed by another run
        """
        lock = self._locks.setdefault(webhook_id, asyncio.Lock())
        if lock.locked():
            logger.debug("webhook_in_progress", webhook_id=str(webhook_id))
            return None

        async with lock:
            try:
                return await self._process_claimed(webhook_id)
            finally:
                self._locks.pop(webhook_id, None)

    async def _process_claimed(self, webhook_id: UUID) -> Optional[WebhookEvent]:
        async with self._uow_factory() as uow:
            webhook = await uow.webhooks.claim(webhook_id, stale_before=utcnow() - self.claim_ttl)
            await uow.commit()

        if webhook is None:
            logger.debug("webhook_not_claimed", webhook_id=str(webhook_id))
            return None

        error_message: Optional[str] = None
        try:
            await self.handlers.dispatch(webhook.event_type, webhook.payload)
        except Exception as exc:
            error_message = str(exc) or exc.__class__.__name__
            logger.error(
                "webhook_processing_failed",
                webhook_id=str(webhook_id),
                event_type=webhook.event_type,
                error=error_message,
                exc_info=exc,
            )

        async with self._uow_factory() as uow:
            processed = await uow.webhooks.mark_as_processed(webhook_id, error_message=error_message)
            await uow.commit()

        if processed is not None and error_message is None:
            logger.info("webhook_processed", webhook_id=str(webhook_id), event_type=webhook.event_type)
        return processed

    async def reprocess_all_unprocessed(self) -> ReprocessSummary:
        """
        Sequentially process every record still marked unprocessed.

        Records are read in pages of ``batch_size`` behind a (created_at, id)
        cursor, so records skipped in this pass are not revisited and never
        hide the ones after them.
        """
        summary = ReprocessSummary()
        cursor: Optional[Tuple[datetime, UUID]] = None
        while True:
            async with self._uow_factory() as uow:
                page = await uow.webhooks.find_unprocessed(limit=self.batch_size, after=cursor)
            if not page:
                break

            for webhook in page:
                summary.total += 1
                result = await self.process(webhook.id)
                if result is None:
                    summary.skipped += 1
                elif result.failed:
                    summary.failed += 1
                else:
                    summary.processed += 1
            cursor = (page[-1].created_at, page[-1].id)

        logger.info("webhooks_reprocessed", **summary.to_dict())
        return summary

    async def retry(self, webhook_id: UUID) -> Optional[WebhookEvent]:
        """
        Start a new processing lifecycle for one record and process it now.

        Returns None without touching the record while another run holds a
        live claim on it.
        """
        async with self._uow_factory() as uow:
            webhook = await uow.webhooks.reset(webhook_id, stale_before=utcnow() - self.claim_ttl)
            if webhook is None:
                if await uow.webhooks.find_by_id(webhook_id) is None:
                    raise WebhookNotFoundError(f"Webhook {webhook_id} not found")
                logger.info("webhook_retry_in_progress", webhook_id=str(webhook_id))
                return None
            await uow.commit()

        logger.info("webhook_retry", webhook_id=str(webhook_id), event_type=webhook.event_type)
        return await self.process(webhook_id)

    async def get_webhook(self, webhook_id: UUID) -> WebhookEvent:
        async with self._uow_factory() as uow:
            webhook = await uow.webhooks.find_by_id(webhook_id)
        if webhook is None:
            raise WebhookNotFoundError(f"Webhook {webhook_id} not found")
        return webhook

    async def list_unprocessed(self, limit: int = 100) -> List[WebhookEvent]:
        async with self._uow_factory() as uow:
            return await uow.webhooks.find_unprocessed(limit=limit)

    async def list_by_event_type(self, event_type: str, limit: int = 100) -> List[WebhookEvent]:
        async with self._uow_factory() as uow:
            return await uow.webhooks.find_by_event_type(event_type, limit=limit)
