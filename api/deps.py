"""
api/deps.py — Shared FastAPI dependencies.

  require_client(endpoint)  → authenticates the API key and charges the quota
  get_lead_store()          → the Google Sheets lead store
  error_detail(...)         → the {"success": False, ...} body used by every error
"""

import logging
from datetime import timedelta
from typing import Callable, Optional

from fastapi import Depends, Header, HTTPException, Request, Response
from sqlalchemy.orm import Session

from botengine.clients.registry import ClientRegistry, get_client_registry
from botengine.config import settings
from botengine.db.session import get_db
from botengine.leads.sheets import SheetsLeadStore
from botengine.security.auth import AuthContext, AuthError, authenticate, extract_api_key

logger = logging.getLogger(__name__)


def error_detail(error: str, code: Optional[str] = None, **extra) -> dict:
    detail = {"success": False, "error": error}
    if code:
        detail["code"] = code
    detail.update(extra)
    return detail


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def require_client(endpoint: str) -> Callable[..., AuthContext]:
    """
    Build a dependency that authenticates the caller for one endpoint.

    On success the request is recorded against the tenant quota and the
    X-RateLimit-* headers are set on the response.
    """

    def dependency(
        request: Request,
        response: Response,
        db: Session = Depends(get_db),
        registry: ClientRegistry = Depends(get_client_registry),
        authorization: Optional[str] = Header(default=None),
        x_api_key: Optional[str] = Header(default=None),
    ) -> AuthContext:
        try:
            context = authenticate(
                db,
                registry,
                extract_api_key(authorization, x_api_key),
                endpoint,
                timedelta(minutes=settings.quota_window_minutes),
                method=request.method,
                ip_address=client_ip(request),
                user_agent=request.headers.get("user-agent"),
                request_id=getattr(request.state, "request_id", None),
            )
        except AuthError as exc:
            headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
            raise HTTPException(
                status_code=exc.status_code,
                detail=error_detail(exc.message, exc.code),
                headers=headers,
            ) from exc

        # Usage must survive a later 4xx/5xx from the route itself
        db.commit()

        status = context.rate_limit
        response.headers["X-RateLimit-Limit"] = str(status.limit)
        response.headers["X-RateLimit-Remaining"] = str(status.remaining)
        response.headers["X-RateLimit-Reset"] = status.reset_at.isoformat() + "Z"
        return context

    return dependency


def get_lead_store() -> SheetsLeadStore:
    return SheetsLeadStore()
