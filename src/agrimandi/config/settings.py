from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str
    log_level: str = "INFO"
    environment: str = "dev"
    jwt_secret_key: SecretStr
    jwt_algorithm: str = "HS256"
    jwt_access_token_expires_minutes: int = 60 * 24 * 7
    jwt_issuer: str | None = None
    jwt_audience: str | None = None
    # CORS
    cors_allow_origins: str = "*"
    # Public URL used in email links
    app_url: str = "http://localhost:8000"
    # Email
    email_provider: str = "logging"  # logging | smtp
    email_from_name: str = "AgriMandi"
    email_from_address: str = "no-reply@agrimandi.local"
    email_default_locale: str = "en"
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_username: str | None = None
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    # One-time tokens (verify email / reset password)
    verification_token_ttl_minutes: int = 60 * 24
    # Admin self-registration is disabled unless a code is configured
    admin_registration_code: SecretStr | None = None
    # OpenWeather proxy
    weather_api_key: SecretStr | None = None
    weather_api_url: str = "https://api.openweathermap.org/data/2.5/weather"
    weather_timeout_seconds: float = 10.0

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("database_url")
    @classmethod
    def ensure_asyncpg_scheme(cls, value: str) -> str:
        if value.startswith("postgres://"):
            return value.replace("postgres://", "postgresql+asyncpg://", 1)
        if value.startswith("postgresql://") and "+" not in value.split("://", 1)[0]:
            return value.replace("postgresql://", "postgresql+asyncpg://", 1)
        return value

    @property
    def cors_allow_origins_list(self) -> list[str]:
        """Convert cors_allow_origins string to list"""
        if isinstance(self.cors_allow_origins, str):
            return [v.strip() for v in self.cors_allow_origins.split(",") if v.strip()]
        return self.cors_allow_origins


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
