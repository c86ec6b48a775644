"""System-wide constants. All magic numbers and strings live here."""

from __future__ import annotations

# ── Server ───────────────────────────────────────────────────────
SERVER_HOST = "0.0.0.0"
SERVER_IDLE_TIMEOUT_SECONDS = 60.0
SERVER_READ_TIMEOUT_SECONDS = 10.0
SERVER_WRITE_TIMEOUT_SECONDS = 30.0

# ── CORS ─────────────────────────────────────────────────────────
CORS_ALLOWED_METHODS: list[str] = ["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"]
CORS_ALLOWED_HEADERS: list[str] = ["Accept", "Authorization", "Content-Type"]
CORS_MAX_AGE_SECONDS = 300

# ── Session ──────────────────────────────────────────────────────
SESSION_COOKIE_NAME = "gatehouse_session"
SESSION_MAX_AGE_SECONDS = 86400 * 30
SESSION_COOKIE_PATH = "/"
SESSION_SAME_SITE = "lax"
SESSION_USER_KEY = "user"

# ── OAuth ────────────────────────────────────────────────────────
OAUTH_STATE_MAX_AGE_SECONDS = 600
OAUTH_STATE_SESSION_PREFIX = "oauth_state:"
OAUTH_HTTP_TIMEOUT_SECONDS = 15.0
PROVIDER_GOOGLE = "google"
PROVIDER_GITHUB = "github"

# ── Health ───────────────────────────────────────────────────────
HEALTH_STATUS_UP = "up"
HEALTH_STATUS_DOWN = "down"
HEALTH_MESSAGE_OK = "It's healthy"
DB_PING_TIMEOUT_SECONDS = 1.0
