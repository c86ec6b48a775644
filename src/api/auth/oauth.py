"""OAuth 2.0 flow — authorization redirect, code exchange, and logout with HMAC-signed state."""

from __future__ import annotations

import secrets
from dataclasses import asdict, dataclass
from urllib.parse import urlencode

import httpx
from itsdangerous import BadData, URLSafeTimedSerializer
from starlette.requests import Request

from src.api.auth.context import AuthContext
from src.api.auth.providers import RegisteredProvider
from src.core.constants import (
    OAUTH_HTTP_TIMEOUT_SECONDS,
    OAUTH_STATE_MAX_AGE_SECONDS,
    OAUTH_STATE_SESSION_PREFIX,
    PROVIDER_GOOGLE,
    SESSION_USER_KEY,
)
from src.core.exceptions import StateMismatchError, TokenExchangeError
from src.core.logging import get_logger

log = get_logger(__name__)

STATE_SALT = "gatehouse-oauth-state-v1"


@dataclass(frozen=True)
class OAuthUser:
    """Identity returned by a completed login."""

    provider: str
    provider_id: str
    email: str
    name: str
    avatar_url: str = ""


# ── State tokens ──────────────────────────────────────────────────


def _get_signer(secret: str) -> URLSafeTimedSerializer:
    """HMAC signer for OAuth state tokens."""
    return URLSafeTimedSerializer(secret, salt=STATE_SALT)


def generate_state(secret: str, provider: str) -> str:
    """Create a signed, tamper-proof state token for CSRF protection."""
    nonce = secrets.token_urlsafe(16)
    return _get_signer(secret).dumps({"provider": provider, "nonce": nonce})  # type: ignore[return-value]


def verify_state(
    secret: str, state: str, max_age: int = OAUTH_STATE_MAX_AGE_SECONDS
) -> dict[str, str] | None:
    """Verify and decode the state token. Returns None if invalid/expired."""
    try:
        data = _get_signer(secret).loads(state, max_age=max_age)
    except BadData:
        log.warning("oauth_state_invalid")
        return None
    if not isinstance(data, dict):
        return None
    return data


def _state_key(provider: str) -> str:
    return f"{OAUTH_STATE_SESSION_PREFIX}{provider}"


# ── Provider calls ────────────────────────────────────────────────


def build_authorize_url(provider: RegisteredProvider, state: str) -> str:
    """Build the OAuth authorization redirect URL."""
    params = {
        "client_id": provider.client_id,
        "redirect_uri": provider.callback_url,
        "state": state,
        "scope": " ".join(provider.config.scopes),
    }
    if provider.name == PROVIDER_GOOGLE:
        params["response_type"] = "code"
        params["access_type"] = "offline"

    return f"{provider.config.authorize_url}?{urlencode(params)}"


async def exchange_code(
    provider: RegisteredProvider,
    code: str,
    client: httpx.AsyncClient | None = None,
) -> OAuthUser:
    """Exchange authorization code for access token + user info."""
    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=OAUTH_HTTP_TIMEOUT_SECONDS)
    try:
        # Step 1: Exchange code for token
        token_resp = await http.post(
            provider.config.token_url,
            data={
                "client_id": provider.client_id,
                "client_secret": provider.client_secret,
                "code": code,
                "redirect_uri": provider.callback_url,
                "grant_type": "authorization_code",
            },
            headers={"Accept": "application/json"},
        )
        token_resp.raise_for_status()
        token_data = token_resp.json()

        access_token = token_data.get("access_token")
        if not access_token:
            error = token_data.get("error_description") or token_data.get("error") or "no access token"
            raise TokenExchangeError(f"token exchange failed: {error}", context={"provider": provider.name})

        # Step 2: Fetch user info
        user_resp = await http.get(
            provider.config.userinfo_url,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
        user_resp.raise_for_status()
        user_info = user_resp.json()
    finally:
        if owns_client:
            await http.aclose()

    return _normalize_user_info(provider.name, user_info)


def _normalize_user_info(provider: str, info: dict[str, object]) -> OAuthUser:
    """Normalize provider-specific user info to a common format."""
    if provider == PROVIDER_GOOGLE:
        return OAuthUser(
            provider=provider,
            provider_id=str(info.get("sub", "")),
            email=str(info.get("email", "")),
            name=str(info.get("name", "")),
            avatar_url=str(info.get("picture", "")),
        )

    # GitHub
    email = str(info.get("email") or "")
    if not email:
        # GitHub may not return email in the main response
        email = f'{info.get("login", "unknown")}@github.noreply.com'

    return OAuthUser(
        provider=provider,
        provider_id=str(info.get("id", "")),
        email=email,
        name=str(info.get("name") or info.get("login", "")),
        avatar_url=str(info.get("avatar_url", "")),
    )


# ── Request-level flow ────────────────────────────────────────────


def begin_auth(request: Request, auth: AuthContext, provider_name: str) -> str:
    """Store a fresh state in the session and return the consent-screen URL."""
    provider = auth.registry.lookup(provider_name)
    state = generate_state(auth.state_secret, provider.name)
    request.session[_state_key(provider.name)] = state
    log.info("oauth_begin", provider=provider.name)
    return build_authorize_url(provider, state)


async def complete_user_auth(
    request: Request,
    auth: AuthContext,
    provider_name: str,
    client: httpx.AsyncClient | None = None,
) -> OAuthUser:
    """Validate the callback, exchange the code, and remember the user in the session."""
    provider = auth.registry.lookup(provider_name)
    params = request.query_params

    expected_state = request.session.pop(_state_key(provider.name), None)

    provider_error = params.get("error")
    if provider_error:
        description = params.get("error_description") or provider_error
        raise TokenExchangeError(
            f"{provider.name} returned an error: {description}",
            context={"provider": provider.name},
        )

    state = params.get("state")
    if not expected_state or not state or state != expected_state:
        raise StateMismatchError("state token mismatch", context={"provider": provider.name})
    state_data = verify_state(auth.state_secret, state)
    if state_data is None or state_data.get("provider") != provider.name:
        raise StateMismatchError("state token invalid or expired", context={"provider": provider.name})

    code = params.get("code")
    if not code:
        raise TokenExchangeError("missing authorization code", context={"provider": provider.name})

    try:
        user = await exchange_code(provider, code, client=client)
    except (httpx.HTTPError, ValueError) as exc:
        raise TokenExchangeError(
            f"token exchange failed: {exc}", context={"provider": provider.name}
        ) from exc

    request.session[SESSION_USER_KEY] = asdict(user)
    return user


def logout(request: Request) -> None:
    """Drop everything the session holds; the middleware then expires the cookie."""
    request.session.clear()
