"""
ASGI entrypoint.

Run with the app factory so settings and logging are read at startup, not
at import:

    uvicorn --factory src.main:create_app
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from functools import partial
from typing import AsyncIterator, Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.config import Settings, get_settings
from src.messaging.api import messaging_router
from src.messaging.application.handlers import build_default_registry
from src.messaging.application.services.message_service import MessageService
from src.messaging.application.services.webhook_service import WebhookService
from src.messaging.infrastructure.persistence.unit_of_work import MessagingUnitOfWork
from src.shared.database import Database
from src.shared.exceptions import register_exception_handlers  # central mapping
from src.shared.health import router as health_router
from src.shared.logging import configure_logging, get_logger
from src.shared.middleware import CorrelationIdMiddleware, RequestLoggingMiddleware
from src.shared.tasks import BackgroundTaskQueue
from src.simulation.api import simulation_router
from src.simulation.application.lifecycle_scheduler import LifecycleScheduler
from src.simulation.application.simulation_service import SimulationService
from src.simulation.infrastructure.webhook_dispatcher import WebhookDispatcher

logger = get_logger(__name__)


def _build_lifespan(http_client: Optional[httpx.AsyncClient]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        settings: Settings = app.state.settings

        db = Database(
            settings.DATABASE_URL,
            echo=settings.DATABASE_ECHO,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )
        if settings.DATABASE_CREATE_ALL:
            await db.create_all()

        task_queue = BackgroundTaskQueue(workers=settings.TASK_QUEUE_WORKERS)
        await task_queue.start()

        owns_client = http_client is None
        client = http_client or httpx.AsyncClient()

        uow_factory = partial(MessagingUnitOfWork, db.session_factory)
        message_service = MessageService(uow_factory)
        dispatcher = WebhookDispatcher(
            client,
            settings.CLIENT_WEBHOOK_URL,
            settings.APP_SECRET,
            waba_id=settings.SIM_WABA_ID,
            display_phone_number=settings.SIM_DISPLAY_PHONE_NUMBER,
            status_recorder=message_service.apply_provider_status,
        )
        scheduler = LifecycleScheduler(
            dispatcher,
            task_queue,
            sent_delay=settings.SIM_SENT_DELAY_SECONDS,
            delivered_delay=(settings.SIM_DELIVERED_DELAY_MIN_SECONDS, settings.SIM_DELIVERED_DELAY_MAX_SECONDS),
            read_delay=(settings.SIM_READ_DELAY_MIN_SECONDS, settings.SIM_READ_DELAY_MAX_SECONDS),
        )
        scheduler.start()

        app.state.db = db
        app.state.task_queue = task_queue
        app.state.http_client = client
        app.state.scheduler = scheduler
        app.state.message_service = message_service
        app.state.simulation_service = SimulationService(uow_factory, scheduler)
        app.state.webhook_service = WebhookService(
            uow_factory,
            task_queue,
            build_default_registry(message_service),
            claim_ttl_seconds=settings.WEBHOOK_CLAIM_TTL_SECONDS,
            batch_size=settings.REPROCESS_BATCH_SIZE,
        )
        logger.info(
            "app_started",
            env=settings.ENVIRONMENT,
            callbacks_enabled=dispatcher.enabled,
        )
        try:
            yield
        finally:
            scheduler.shutdown()
            await task_queue.stop(drain=True)
            if owns_client:
                await client.aclose()
            await db.dispose()
            logger.info("app_stopped")

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Application factory.

    ``http_client`` overrides the client used for outbound status callbacks;
    a caller-supplied client is not closed on shutdown.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_JSON, settings.LOG_CACHE_LOGGERS)

    app = FastAPI(
        title="WhatsApp Cloud API Simulator",
        version=settings.PROJECT_VERSION,
        lifespan=_build_lifespan(http_client),
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    # added last so it wraps the logging middleware and binds the id first
    app.add_middleware(CorrelationIdMiddleware)

    # Routers
    app.include_router(health_router)
    app.include_router(messaging_router, prefix=settings.API_PREFIX)
    app.include_router(simulation_router, prefix=settings.API_PREFIX)

    # Centralized error handling → {code, message, details?, correlation_id?}
    register_exception_handlers(app)

    # Root endpoint
    @app.get("/", tags=["Root"])
    async def root():
        return {
            "message": "WhatsApp Cloud API Simulator",
            "docs": "/docs",
            "health": "/health",
        }

    return app
