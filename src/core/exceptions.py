"""Custom exception hierarchy for Gatehouse."""

from __future__ import annotations

from typing import Any


class GatehouseError(Exception):
    """Base exception for all Gatehouse errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.context: dict[str, Any] = context or {}


# ── Auth Layer ───────────────────────────────────────────────────

class AuthError(GatehouseError):
    """OAuth flow failed; the message is safe to show to the client."""


class UnknownProviderError(AuthError):
    """No provider is registered under the requested name."""


class StateMismatchError(AuthError):
    """Returned OAuth state is missing, tampered, expired, or for another provider."""


class TokenExchangeError(AuthError):
    """Provider rejected the authorization code or the user info request."""
