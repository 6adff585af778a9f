from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# The project .env is loaded before Settings is built so values resolve the same
# regardless of the working directory. Tests configure the environment themselves.
_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_IN_TEST = (os.getenv("ENVIRONMENT") or "").lower() == "test" or bool(os.getenv("PYTEST_CURRENT_TEST"))
if _ENV_PATH.exists() and not _IN_TEST:
    load_dotenv(dotenv_path=_ENV_PATH, override=True)


def _normalize_email(value: str | None) -> str:
    return (value or "").strip().lower()


def _parse_origins(raw: Any) -> list[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple, set)):
        return [str(item).strip() for item in raw if str(item).strip()]
    s = str(raw).strip()
    if not s:
        return []
    # Support JSON array string or comma-separated string.
    if s.startswith("["):
        try:
            parsed = json.loads(s)
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        except ValueError:
            pass
    return [part.strip() for part in s.split(",") if part.strip()]


class Settings(BaseSettings):
    app_name: str = Field(default="Elite Jobs Backend")
    version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # DB_URL is kept for backwards compatibility; ORM_DB_URL wins when both are set.
    db_url: str | None = Field(default=None, validation_alias="DB_URL")
    orm_db_url: str | None = Field(default=None, validation_alias="ORM_DB_URL")

    jwt_secret: str = Field(default="change-me")
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_days: int = Field(default=7)
    bcrypt_rounds: int = Field(default=12)

    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://127.0.0.1:3000"],
        validation_alias="CORS_ORIGINS",
    )

    # The single admin account is provisioned from these values on first login
    # and re-synced from them on every later login.
    admin_name: str = Field(default="Admin", validation_alias="ADMIN_NAME")
    admin_email: str | None = Field(default=None, validation_alias="ADMIN_EMAIL")
    admin_password: str | None = Field(default=None, validation_alias="ADMIN_PASSWORD")

    # Object storage (local disk, served under /uploads)
    upload_dir: str = Field(default="./uploads", validation_alias="UPLOAD_DIR")
    public_base_url: str = Field(default="http://localhost:8000", validation_alias="PUBLIC_BASE_URL")
    max_upload_bytes: int = Field(default=5 * 1024 * 1024, validation_alias="MAX_UPLOAD_BYTES")

    # Transactional email (Resend HTTP API). Sending is disabled when the key is empty.
    resend_api_key: str = Field(default="", validation_alias="RESEND_API_KEY")
    email_from: str = Field(default="Elite Jobs <no-reply@elitejobs.local>", validation_alias="EMAIL_FROM")
    email_timeout: float = Field(default=10.0, validation_alias="EMAIL_TIMEOUT")

    # Google OAuth. Routes are registered only when both id and secret are present.
    google_client_id: str = Field(default="", validation_alias="GOOGLE_CLIENT_ID")
    google_client_secret: str = Field(default="", validation_alias="GOOGLE_CLIENT_SECRET")
    google_callback_url: str = Field(
        default="http://localhost:8000/auth/google/callback",
        validation_alias="GOOGLE_CALLBACK_URL",
    )
    oauth_pending_token_minutes: int = Field(default=15)

    otp_length: int = Field(default=6)
    otp_expire_minutes: int = Field(default=15)
    otp_resend_cooldown_minutes: int = Field(default=5)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _validate_cors_origins(cls, v: Any) -> list[str]:
        return _parse_origins(v)

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()


def build_sqlalchemy_db_url(settings: Settings) -> str:
    if settings.orm_db_url:
        return settings.orm_db_url
    if settings.db_url:
        return settings.db_url
    return "sqlite:///./dev.db"


def is_google_oauth_enabled(settings: Settings) -> bool:
    return bool(settings.google_client_id and settings.google_client_secret)


def is_admin_email(email: str | None) -> bool:
    configured = _normalize_email(settings.admin_email)
    return bool(configured) and _normalize_email(email) == configured
