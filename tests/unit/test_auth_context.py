"""Tests for the auth initializer, provider registry, and session policy."""

from __future__ import annotations

import pytest

from src.api.auth.context import AuthContext, new_auth
from src.api.auth.providers import GOOGLE, ProviderRegistry, RegisteredProvider
from src.api.auth.session import SessionPolicy
from src.core.exceptions import UnknownProviderError


class TestNewAuth:
    def test_registers_google(self, make_settings) -> None:
        settings = make_settings(
            port="3000",
            google_client_id="test_google_client_id",
            google_client_secret="test_google_secret",
        )
        auth = new_auth(settings)

        assert isinstance(auth, AuthContext)
        google = auth.registry.lookup("google")
        assert google.name == "google"
        assert google.client_id == "test_google_client_id"
        assert google.client_secret == "test_google_secret"
        assert google.callback_url == "http://localhost:3000/auth/google/callback"

    def test_google_only_by_default(self, make_settings) -> None:
        auth = new_auth(make_settings())
        assert list(auth.registry) == ["google"]

    def test_github_when_configured(self, make_settings) -> None:
        settings = make_settings(github_client_id="gh-id", github_client_secret="gh-secret")
        auth = new_auth(settings)

        assert sorted(auth.registry) == ["github", "google"]
        assert auth.registry.lookup("github").client_secret == "gh-secret"

    def test_callback_base_override(self, make_settings) -> None:
        auth = new_auth(make_settings(oauth_callback_base_url="https://api.example.com"))
        assert auth.registry.lookup("google").callback_url == "https://api.example.com/auth/google/callback"

    def test_session_policy(self, make_settings) -> None:
        auth = new_auth(make_settings(cookie_store_key="k"))
        policy = auth.session

        assert policy.secret_key == "k"
        assert policy.max_age == 86400 * 30
        assert policy.path == "/"
        assert policy.same_site == "lax"
        assert policy.secure is False
        assert auth.state_secret == "k"

    def test_secure_cookies_in_prod(self, make_settings) -> None:
        auth = new_auth(make_settings(app_env="prod", cookie_store_key="strong-key"))
        assert auth.session.secure is True

    def test_does_not_need_env_file(self, make_settings) -> None:
        # make_settings disables the .env file entirely
        assert new_auth(make_settings()).registry


class TestProviderRegistry:
    def _provider(self) -> RegisteredProvider:
        return RegisteredProvider(config=GOOGLE, client_id="id", client_secret="s", callback_url="cb")

    def test_lookup_unknown(self) -> None:
        registry = ProviderRegistry([self._provider()])
        with pytest.raises(UnknownProviderError, match="facebook"):
            registry.lookup("facebook")

    def test_mapping_interface(self) -> None:
        registry = ProviderRegistry([self._provider()])
        assert len(registry) == 1
        assert "google" in registry
        assert registry["google"].client_id == "id"

    def test_read_only(self) -> None:
        registry = ProviderRegistry([self._provider()])
        with pytest.raises(TypeError):
            registry["github"] = self._provider()  # type: ignore[index]


class TestSessionPolicy:
    def test_middleware_kwargs(self) -> None:
        kwargs = SessionPolicy(secret_key="k", secure=True).middleware_kwargs()
        assert kwargs == {
            "secret_key": "k",
            "session_cookie": "gatehouse_session",
            "max_age": 86400 * 30,
            "path": "/",
            "same_site": "lax",
            "https_only": True,
        }
