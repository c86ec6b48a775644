"""Gatehouse settings — loaded from environment variables and an optional .env file."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_CORS_ORIGINS: list[str] = ["https://*", "http://*"]
DEV_COOKIE_STORE_KEY = "change-me-in-production"


def parse_port(value: str | None) -> int:
    """Parse a port string; anything that is not a non-negative integer maps to 0.

    Only ASCII digits with an optional leading sign count. Padding, digit
    group underscores and non-ASCII digits are rejected.
    """
    value = value or ""
    if not (value.isascii() and value.lstrip("+").isdigit()):
        return 0
    return int(value)


def parse_origins(value: str | None) -> list[str]:
    """Split a comma-separated origin list, dropping blanks."""
    origins = [o.strip() for o in (value or "").split(",")]
    return [o for o in origins if o]


class Settings(BaseSettings):
    """All configuration flows through this class. Never read env vars directly."""

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Environment ──────────────────────────────────────────────
    app_env: Literal["dev", "prod"] = "dev"

    # ── Server ───────────────────────────────────────────────────
    port: str = ""
    cors_allowed_origins: str = ""

    # ── OAuth ────────────────────────────────────────────────────
    google_client_id: str = ""
    google_client_secret: SecretStr = SecretStr("")
    github_client_id: str = ""
    github_client_secret: SecretStr = SecretStr("")
    oauth_callback_base_url: str = ""

    # ── Redirects & session ──────────────────────────────────────
    app_uri: str = "/"
    post_logout_redirect_url: str = "/"
    cookie_store_key: SecretStr = SecretStr(DEV_COOKIE_STORE_KEY)

    # ── Infrastructure ───────────────────────────────────────────
    database_url: SecretStr = SecretStr("")

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = "INFO"
    log_json: bool = False

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"

    @property
    def bound_port(self) -> int:
        return parse_port(self.port)

    @property
    def allowed_origins(self) -> list[str]:
        return parse_origins(self.cors_allowed_origins) or list(DEFAULT_CORS_ORIGINS)

    @property
    def callback_base_url(self) -> str:
        base = self.oauth_callback_base_url.strip().rstrip("/")
        return base or f"http://localhost:{self.bound_port}"

    @model_validator(mode="after")
    def _check_prod_secrets(self) -> "Settings":
        """Prevent production deployment with the placeholder session key."""
        if self.is_prod:
            key = self.cookie_store_key.get_secret_value()
            if key in (DEV_COOKIE_STORE_KEY, ""):
                msg = (
                    "COOKIE_STORE_KEY must be set to a strong random value "
                    "in production. Generate one with: openssl rand -base64 32"
                )
                raise ValueError(msg)
        return self


_settings_instance: Settings | None = None


def get_settings() -> Settings:
    """Singleton settings loader — reads .env once, reuses thereafter."""
    global _settings_instance  # noqa: PLW0603
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
