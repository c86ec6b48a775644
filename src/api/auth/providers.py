"""OAuth provider endpoints and the per-process provider registry."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass

from src.core.constants import PROVIDER_GITHUB, PROVIDER_GOOGLE
from src.core.exceptions import UnknownProviderError


@dataclass(frozen=True)
class OAuthProviderConfig:
    """Immutable OAuth provider endpoints."""

    name: str
    authorize_url: str
    token_url: str
    userinfo_url: str
    scopes: tuple[str, ...]


GOOGLE = OAuthProviderConfig(
    name=PROVIDER_GOOGLE,
    authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
    token_url="https://oauth2.googleapis.com/token",
    userinfo_url="https://www.googleapis.com/oauth2/v3/userinfo",
    scopes=("openid", "email", "profile"),
)

GITHUB = OAuthProviderConfig(
    name=PROVIDER_GITHUB,
    authorize_url="https://github.com/login/oauth/authorize",
    token_url="https://github.com/login/oauth/access_token",
    userinfo_url="https://api.github.com/user",
    scopes=("read:user", "user:email"),
)


@dataclass(frozen=True)
class RegisteredProvider:
    """A provider bound to this deployment's credentials and callback URL."""

    config: OAuthProviderConfig
    client_id: str
    client_secret: str
    callback_url: str

    @property
    def name(self) -> str:
        return self.config.name


class ProviderRegistry(Mapping[str, RegisteredProvider]):
    """Read-only name -> provider mapping, populated once at startup."""

    def __init__(self, providers: list[RegisteredProvider] | None = None) -> None:
        self._providers: dict[str, RegisteredProvider] = {}
        for provider in providers or []:
            self._providers[provider.name] = provider

    def __getitem__(self, name: str) -> RegisteredProvider:
        return self._providers[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._providers)

    def __len__(self) -> int:
        return len(self._providers)

    def lookup(self, name: str) -> RegisteredProvider:
        """Return the provider or raise ``UnknownProviderError``."""
        provider = self._providers.get(name)
        if provider is None:
            raise UnknownProviderError(
                f"no provider for {name!r} exists",
                context={"provider": name, "registered": sorted(self._providers)},
            )
        return provider
