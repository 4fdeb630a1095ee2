"""Messaging API module initialization."""

from fastapi import APIRouter

from src.messaging.api.routes import messages_router, webhook_router

messaging_router = APIRouter()
messaging_router.include_router(messages_router)
messaging_router.include_router(webhook_router)

__all__ = ["messaging_router"]
