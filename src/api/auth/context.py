"""Auth initializer — session policy and provider registry built once at startup."""

from __future__ import annotations

from dataclasses import dataclass

from config.settings import Settings
from src.api.auth.providers import (
    GITHUB,
    GOOGLE,
    OAuthProviderConfig,
    ProviderRegistry,
    RegisteredProvider,
)
from src.api.auth.session import SessionPolicy
from src.core.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Everything the auth routes need; immutable after startup."""

    registry: ProviderRegistry
    session: SessionPolicy

    @property
    def state_secret(self) -> str:
        return self.session.secret_key


def callback_url(settings: Settings, provider: str) -> str:
    return f"{settings.callback_base_url}/auth/{provider}/callback"


def _register(
    settings: Settings, config: OAuthProviderConfig, client_id: str, client_secret: str
) -> RegisteredProvider:
    return RegisteredProvider(
        config=config,
        client_id=client_id,
        client_secret=client_secret,
        callback_url=callback_url(settings, config.name),
    )


def new_auth(settings: Settings) -> AuthContext:
    """Build the session policy and register OAuth providers.

    Google is always registered, mirroring the starter's single-provider
    setup; GitHub joins only when its client id is configured.
    """
    session = SessionPolicy(
        secret_key=settings.cookie_store_key.get_secret_value(),
        secure=settings.is_prod,
    )

    providers = [
        _register(
            settings,
            GOOGLE,
            settings.google_client_id,
            settings.google_client_secret.get_secret_value(),
        )
    ]
    if settings.github_client_id:
        providers.append(
            _register(
                settings,
                GITHUB,
                settings.github_client_id,
                settings.github_client_secret.get_secret_value(),
            )
        )

    registry = ProviderRegistry(providers)
    if not settings.google_client_id:
        log.warning("oauth_credentials_missing", provider=GOOGLE.name)
    log.info(
        "auth_initialized",
        providers=sorted(registry),
        secure_cookies=session.secure,
        callback_base=settings.callback_base_url,
    )
    return AuthContext(registry=registry, session=session)
