from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request

from agrimandi.application.errors import AuthError
from agrimandi.application.notifications.types import NotificationSender
from agrimandi.application.services.authorization import Principal
from agrimandi.config.settings import Settings, get_settings
from agrimandi.infrastructure.auth.context import AuthContext
from agrimandi.infrastructure.auth.jwt_service import JWTService
from agrimandi.infrastructure.auth.password import PasswordHasher
from agrimandi.infrastructure.broadcast.commodity_channel import CommodityChannel
from agrimandi.infrastructure.db.session import SQLAlchemyUnitOfWork
from agrimandi.infrastructure.weather.openweather import OpenWeatherClient


async def get_auth_context(request: Request) -> AuthContext:
    context = getattr(request.state, "auth_context", None)
    if context is None:
        raise AuthError("Authentication required")
    return context


async def get_principal(request: Request) -> Principal:
    context = await get_auth_context(request)
    return context.principal


async def get_uow(request: Request) -> AsyncIterator[SQLAlchemyUnitOfWork]:
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise RuntimeError("Session factory not configured")
    uow = SQLAlchemyUnitOfWork(session_factory)
    async with uow:
        yield uow


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_password_hasher(request: Request) -> PasswordHasher:
    hasher = getattr(request.app.state, "password_hasher", None)
    if hasher is None:
        raise RuntimeError("Password hasher not configured")
    return hasher


def get_jwt_service(request: Request) -> JWTService:
    service = getattr(request.app.state, "jwt_service", None)
    if service is None:
        raise RuntimeError("JWT service not configured")
    return service


def get_notification_sender(request: Request) -> NotificationSender | None:
    return getattr(request.app.state, "notification_sender", None)


def get_commodity_channel(request: Request) -> CommodityChannel:
    channel = getattr(request.app.state, "commodity_channel", None)
    if channel is None:
        raise RuntimeError("Commodity channel not configured")
    return channel


def get_weather_client(request: Request) -> OpenWeatherClient:
    client = getattr(request.app.state, "weather_client", None)
    if client is None:
        raise RuntimeError("Weather client not configured")
    return client
