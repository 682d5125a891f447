from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agrimandi.config.settings import Settings, get_settings
from agrimandi.infrastructure.auth.jwt_service import JWTService
from agrimandi.infrastructure.auth.password import PasswordHasher
from agrimandi.infrastructure.broadcast.commodity_channel import CommodityChannel
from agrimandi.infrastructure.db.session import create_engine, create_session_factory
from agrimandi.infrastructure.email.models import EmailService
from agrimandi.infrastructure.email.providers.logging_provider import LoggingEmailService
from agrimandi.infrastructure.email.renderer.engine import EmailTemplateRenderer
from agrimandi.infrastructure.services.notification_service import (
    EmailNotificationSender,
    session_account_loader,
)
from agrimandi.infrastructure.weather.openweather import OpenWeatherClient
from agrimandi.interfaces.http.deps import get_app_settings
from agrimandi.interfaces.http.routers import accounts as accounts_router
from agrimandi.interfaces.http.routers import auth as auth_router
from agrimandi.interfaces.http.routers import commodities as commodities_router
from agrimandi.interfaces.http.routers import mandi as mandi_router
from agrimandi.interfaces.http.routers import requests as requests_router
from agrimandi.interfaces.http.routers import weather as weather_router
from agrimandi.interfaces.http.schemas.commodities import serialize_commodity
from agrimandi.interfaces.middleware.auth_middleware import AuthMiddleware
from agrimandi.interfaces.middleware.error_handler import register_error_handlers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        yield
    finally:
        sender = getattr(app.state, "notification_sender", None)
        if sender is not None and hasattr(sender, "aclose"):
            await sender.aclose()
        engine = getattr(app.state, "engine", None)
        if engine is not None:
            await engine.dispose()


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    # Avoid adding duplicate handlers on reload
    if not any(isinstance(h, logging.StreamHandler) for h in root.handlers):
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        )
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(level)
    # Align common libraries
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx"):
        logging.getLogger(name).setLevel(level)
    # SQL parameters carry token digests and password hashes at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def _build_email_service(settings: Settings) -> EmailService:
    if settings.email_provider == "smtp":
        if not settings.smtp_host:
            raise RuntimeError("EMAIL_PROVIDER=smtp requires SMTP_HOST")
        from agrimandi.infrastructure.email.providers.smtp_provider import SMTPEmailService

        return SMTPEmailService(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_username,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            use_tls=settings.smtp_use_tls,
            use_ssl=settings.smtp_use_ssl,
        )
    return LoggingEmailService()


def create_app(
    *,
    settings: Settings | None = None,
    password_hasher: PasswordHasher | None = None,
    jwt_service: JWTService | None = None,
    email_service: EmailService | None = None,
    weather_client: OpenWeatherClient | None = None,
) -> FastAPI:
    settings = settings or get_settings()
    _configure_logging(settings.log_level)
    app = FastAPI(
        title="AgriMandi Connect",
        version="0.1.0",
        description="Buyer and farmer request marketplace with live commodity prices",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = create_engine(settings.database_url)
    app.state.session_factory = create_session_factory(app.state.engine)
    app.state.password_hasher = password_hasher or PasswordHasher()
    app.state.jwt_service = jwt_service or JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        algorithm=settings.jwt_algorithm,
        access_token_expires_minutes=settings.jwt_access_token_expires_minutes,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
    )
    app.state.email_service = email_service or _build_email_service(settings)
    app.state.email_renderer = EmailTemplateRenderer.create_default()
    app.state.notification_sender = EmailNotificationSender(
        load_account=session_account_loader(app.state.session_factory),
        email_service=app.state.email_service,
        renderer=app.state.email_renderer,
        settings=settings,
    )
    app.state.commodity_channel = CommodityChannel(serializer=serialize_commodity)
    app.state.weather_client = weather_client or OpenWeatherClient(
        api_key=settings.weather_api_key.get_secret_value() if settings.weather_api_key else None,
        base_url=settings.weather_api_url,
        timeout=settings.weather_timeout_seconds,
    )
    register_error_handlers(app)

    # Group all API routes behind a single versioned prefix
    api = APIRouter(prefix="/api/v1")
    api.include_router(auth_router.router)
    api.include_router(accounts_router.router)
    api.include_router(requests_router.router)
    api.include_router(commodities_router.router)
    api.include_router(mandi_router.router)
    api.include_router(weather_router.router)

    @api.get("/health", tags=["health"])
    async def health(_: Settings = Depends(get_app_settings)) -> dict[str, str]:  # noqa: ANN001
        return {"status": "ok"}

    app.include_router(api)

    # Add Auth first, then CORS last so CORS runs outermost and can handle preflight OPTIONS
    app.add_middleware(AuthMiddleware, settings=settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    logger.info("AgriMandi API configured (environment=%s)", settings.environment)
    return app


app = create_app()
