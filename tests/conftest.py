from functools import partial

import httpx
import pytest

from src.config import Settings
from src.messaging.infrastructure.persistence.unit_of_work import MessagingUnitOfWork
from src.shared.database import Database
from src.shared.logging import configure_logging
from src.shared.tasks import BackgroundTaskQueue
from tests.support import CallbackRecorder, make_settings, running_app


@pytest.fixture(autouse=True)
def _uncached_loggers():
    # structlog.testing.capture_logs only reaches loggers that are not cached
    configure_logging("WARNING", json_logs=False, cache_loggers=False)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def callbacks() -> CallbackRecorder:
    return CallbackRecorder()


@pytest.fixture
async def app(settings, callbacks):
    async with running_app(settings, callbacks) as application:
        yield application


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def db(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'store.db'}")
    await database.create_all()
    yield database
    await database.dispose()


@pytest.fixture
def uow_factory(db):
    return partial(MessagingUnitOfWork, db.session_factory)


@pytest.fixture
async def task_queue():
    queue = BackgroundTaskQueue(workers=2)
    await queue.start()
    yield queue
    await queue.stop(drain=True)
