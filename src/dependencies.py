# src/dependencies.py
"""
FastAPI dependencies.

Every collaborator is built once by ``create_app`` and kept on ``app.state``;
routes receive them through these getters.
"""
from __future__ import annotations

from fastapi import Request

from src.config import Settings
from src.messaging.application.services.message_service import MessageService
from src.messaging.application.services.webhook_service import WebhookService
from src.shared.database import Database
from src.simulation.application.simulation_service import SimulationService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.db


def get_message_service(request: Request) -> MessageService:
    return request.app.state.message_service


def get_webhook_service(request: Request) -> WebhookService:
    return request.app.state.webhook_service


def get_simulation_service(request: Request) -> SimulationService:
    return request.app.state.simulation_service
