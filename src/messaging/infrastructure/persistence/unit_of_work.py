"""
Messaging Unit of Work
Binds the message and webhook repositories to one transaction.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from src.messaging.infrastructure.persistence.repositories import (
    SQLAlchemyMessageRepository,
    SQLAlchemyWebhookRepository,
)
from src.shared.database.unit_of_work import SQLAlchemyUnitOfWork


class MessagingUnitOfWork(SQLAlchemyUnitOfWork):
    messages: SQLAlchemyMessageRepository
    webhooks: SQLAlchemyWebhookRepository

    def _bind_repositories(self, session: AsyncSession) -> None:
        self.messages = SQLAlchemyMessageRepository(session)
        self.webhooks = SQLAlchemyWebhookRepository(session)
