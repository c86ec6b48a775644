"""Authentication routes — OAuth login, callback, logout."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse

from config.settings import Settings
from src.api.auth import oauth
from src.api.auth.context import AuthContext
from src.api.deps import get_app_settings, get_auth
from src.core.exceptions import AuthError, UnknownProviderError
from src.core.logging import get_logger

log = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.get("/auth/{provider}")
async def begin_auth(
    provider: str,
    request: Request,
    auth: AuthContext = Depends(get_auth),
) -> RedirectResponse:
    """Redirect user to OAuth provider's authorization page."""
    try:
        url = oauth.begin_auth(request, auth, provider)
    except UnknownProviderError as exc:
        log.warning("oauth_unknown_provider", provider=provider)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return RedirectResponse(url=url, status_code=status.HTTP_307_TEMPORARY_REDIRECT)


@router.get("/auth/{provider}/callback")
async def auth_callback(
    provider: str,
    request: Request,
    auth: AuthContext = Depends(get_auth),
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """Handle OAuth callback — exchange code, remember user, bounce to the app."""
    try:
        user = await oauth.complete_user_auth(request, auth, provider)
    except AuthError as exc:
        log.warning("oauth_callback_failed", provider=provider, error=str(exc))
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Authentication failed: {exc}",
        ) from exc

    log.info("user_authenticated", provider=provider, name=user.name, email=user.email)
    return RedirectResponse(url=settings.app_uri, status_code=status.HTTP_302_FOUND)


@router.get("/logout/{provider}")
async def logout(
    provider: str,
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> RedirectResponse:
    """Clear the session and send the browser to the post-logout page."""
    oauth.logout(request)
    log.info("user_logged_out", provider=provider)
    return RedirectResponse(
        url=settings.post_logout_redirect_url,
        status_code=status.HTTP_307_TEMPORARY_REDIRECT,
    )
