"""
botengine/security/auth.py — API-key authentication and per-tenant quotas.

authenticate() runs the full check chain for one request:
  1. key present           → else 401 MISSING_API_KEY
  2. key well formed       → else 401 INVALID_API_KEY_FORMAT
  3. key belongs to tenant → else 401 UNAUTHORIZED
  4. endpoint allowed      → else 403 ENDPOINT_FORBIDDEN
  5. quota not exhausted   → else 429 RATE_LIMIT_EXCEEDED
and then records the request in the usage log.

The HTTP mapping lives in api/deps.py; this module only raises AuthError.
"""

import logging
import math
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from botengine.clients.registry import ClientConfig, ClientRegistry
from botengine.db import repository

logger = logging.getLogger(__name__)

# prefix_environment_random, e.g. bot_prod_abc123def456ghi789jkl012
API_KEY_RE = re.compile(r"^bot_(dev|staging|prod)_[a-zA-Z0-9]{24,32}$")


class AuthError(Exception):
    """Authentication/authorization failure with an HTTP status and error code."""

    def __init__(self, status_code: int, code: str, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.retry_after = retry_after


@dataclass
class RateLimitStatus:
    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime
    retry_after: Optional[int] = None      # seconds


@dataclass
class AuthContext:
    client: ClientConfig
    endpoint: str
    rate_limit: RateLimitStatus


def is_valid_api_key_format(api_key) -> bool:
    return isinstance(api_key, str) and API_KEY_RE.match(api_key) is not None


def extract_api_key(authorization: Optional[str], x_api_key: Optional[str]) -> Optional[str]:
    """Read the key from 'Authorization: Bearer <key>' or the X-API-Key header."""
    if authorization:
        token = authorization.strip()
        if token.lower().startswith("bearer "):
            token = token[7:].strip()
        if token:
            return token
    return x_api_key.strip() if x_api_key else None


def check_rate_limit(db: Session, client: ClientConfig, endpoint: str, window: timedelta) -> RateLimitStatus:
    """Sliding-window quota: at most client.max_requests per endpoint per window."""
    now = repository.utcnow()
    window_start = now - window
    used = repository.count_requests_since(db, client.client_id, endpoint, window_start)
    remaining = max(0, client.max_requests - used)

    oldest = repository.oldest_request_since(db, client.client_id, endpoint, window_start)
    reset_at = (oldest + window) if oldest else now + window

    status = RateLimitStatus(
        allowed=used < client.max_requests,
        limit=client.max_requests,
        remaining=remaining,
        reset_at=reset_at,
    )
    if not status.allowed:
        status.retry_after = max(1, math.ceil((reset_at - now).total_seconds()))
    return status


def authenticate(
    db: Session,
    registry: ClientRegistry,
    api_key: Optional[str],
    endpoint: str,
    window: timedelta,
    method: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    request_id: Optional[str] = None,
) -> AuthContext:
    """
    Resolve the calling tenant and charge the request against its quota.

    Raises:
        AuthError: on any failed check (see module docstring for codes).
    """
    if not api_key:
        raise AuthError(401, "MISSING_API_KEY", "API key required")

    if not is_valid_api_key_format(api_key):
        raise AuthError(401, "INVALID_API_KEY_FORMAT", "Invalid API key format")

    client = registry.find_by_api_key(api_key)
    if client is None:
        logger.warning("Rejected unknown API key from %s.", ip_address)
        raise AuthError(401, "UNAUTHORIZED", "Invalid API key")

    if not client.allows(endpoint):
        raise AuthError(403, "ENDPOINT_FORBIDDEN", "Endpoint not allowed for your subscription tier")

    status = check_rate_limit(db, client, endpoint, window)
    if not status.allowed:
        logger.info("Quota exhausted for %s on %s (limit=%d).", client.client_id, endpoint, status.limit)
        raise AuthError(429, "RATE_LIMIT_EXCEEDED", "Rate limit exceeded", retry_after=status.retry_after)

    repository.record_usage(
        db,
        client_id=client.client_id,
        endpoint=endpoint,
        method=method,
        request_id=request_id,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    # This request counts against the quota too
    status.remaining = max(0, status.remaining - 1)
    return AuthContext(client=client, endpoint=endpoint, rate_limit=status)
