import json
from contextlib import asynccontextmanager
from typing import List, Optional

import httpx

from src.config import Settings
from src.main import create_app

CALLBACK_URL = "http://receiver.test/whatsapp/webhook"
APP_SECRET = "test-app-secret"


class CallbackRecorder:
    """httpx.MockTransport handler that keeps every outbound callback."""

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code)

    def payloads(self):
        return [json.loads(r.content) for r in self.requests]

    def statuses(self):
        return [p["entry"][0]["changes"][0]["value"]["statuses"][0]["status"] for p in self.payloads()]


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        ENV="test",
        LOG_LEVEL="WARNING",
        LOG_JSON=False,
        LOG_CACHE_LOGGERS=False,
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        DATABASE_CREATE_ALL=True,
        CLIENT_WEBHOOK_URL=CALLBACK_URL,
        APP_SECRET=APP_SECRET,
        WEBHOOK_SECRET=None,
        SIM_SENT_DELAY_SECONDS=0.02,
        SIM_DELIVERED_DELAY_MIN_SECONDS=0.05,
        SIM_DELIVERED_DELAY_MAX_SECONDS=0.08,
        SIM_READ_DELAY_MIN_SECONDS=0.05,
        SIM_READ_DELAY_MAX_SECONDS=0.08,
        # one worker keeps callbacks in firing order
        TASK_QUEUE_WORKERS=1,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@asynccontextmanager
async def running_app(settings: Settings, recorder: Optional[CallbackRecorder] = None):
    """App with its lifespan entered and outbound callbacks captured."""
    recorder = recorder or CallbackRecorder()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
    app = create_app(settings, http_client=http_client)
    try:
        async with app.router.lifespan_context(app):
            yield app
    finally:
        await http_client.aclose()
