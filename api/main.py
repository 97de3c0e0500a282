"""
api/main.py — FastAPI application entry point.

Run with:
    uvicorn api.main:app --reload
"""

import logging
import time
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.endpoints.chat_routes import router as chat_router
from api.endpoints.lead_routes import router as lead_router
from api.endpoints.pricing_routes import router as pricing_router
from api.endpoints.usage_routes import router as usage_router
from botengine.clients.registry import get_client_registry
from botengine.config import settings
from botengine.db.session import create_tables, ping

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("api")

STARTED_AT = time.monotonic()

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-Powered-By": "Bot-Engine-API",
}

ENDPOINTS = {
    "POST /api/calculate-price": "Calculate project pricing based on questionnaire responses",
    "POST /api/validate-pincode": "Validate service availability for location",
    "POST /api/submit-lead": "Submit qualified lead data for processing",
    "POST /api/chat": "Chat with a design specialist persona",
    "GET /api/usage": "Usage statistics for your API key",
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ── Lifespan ─────────────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown logic."""
    create_tables()
    if ping():
        logger.info("✅ Database connection verified.")
    logger.info("Serving %d tenant(s) in %s mode.", len(get_client_registry()), settings.environment)
    yield
    logger.info("🛑 Application shutting down.")


# ── App ───────────────────────────────────────────────────────────────────────

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.global_rate_limit],
    enabled=settings.rate_limit_enabled,
)

app = FastAPI(
    title="Bot Engine API",
    description=(
        "Multi-tenant backend for persona-driven quote bots: pricing, "
        "service-area checks and lead capture into Google Sheets."
    ),
    version=settings.app_version,
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins) + get_client_registry().all_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key", "X-Client-ID", "X-Request-ID"],
    expose_headers=["X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset", "Retry-After"],
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for header, value in SECURITY_HEADERS.items():
        response.headers[header] = value
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Tag each request with an id and log method, path, status and duration."""
    request.state.request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    logger.info(
        "%s %s - %d - %.0fms", request.method, request.url.path, response.status_code, duration_ms,
    )
    return response


# ── Routers ───────────────────────────────────────────────────────────────────

app.include_router(pricing_router, prefix="/api", tags=["Pricing"])
app.include_router(lead_router, prefix="/api", tags=["Leads"])
app.include_router(chat_router, prefix="/api", tags=["Chat"])
app.include_router(usage_router, prefix="/api", tags=["Usage"])


# ── Error handlers ────────────────────────────────────────────────────────────

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and not isinstance(exc, FastAPIHTTPException):
        return JSONResponse(
            status_code=404,
            content={
                "error": "Endpoint not found",
                "message": "The requested API endpoint does not exist",
                "availableEndpoints": ["GET /", "GET /health", "GET /api/docs", *ENDPOINTS],
            },
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    is_development = settings.environment == "development"
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": str(exc) if is_development else "Something went wrong",
            "code": "INTERNAL_SERVER_ERROR",
        },
    )


# ── System ────────────────────────────────────────────────────────────────────

@app.get("/health", tags=["System"])
@limiter.exempt
def health_check():
    """Returns service liveness status."""
    return {
        "status": "healthy",
        "timestamp": _utc_now_iso(),
        "uptime": round(time.monotonic() - STARTED_AT, 3),
        "version": settings.app_version,
        "environment": settings.environment,
    }


@app.get("/ready", tags=["System"])
@limiter.exempt
def readiness_check():
    """200 when the database answers, 503 otherwise."""
    checks = {"server": True, "database": ping()}
    ready = all(checks.values())
    return JSONResponse(
        status_code=200 if ready else 503,
        content={
            "status": "ready" if ready else "not ready",
            "checks": checks,
            "timestamp": _utc_now_iso(),
        },
    )


@app.get("/", tags=["System"])
def root():
    return {
        "service": "Bot Engine API",
        "version": settings.app_version,
        "status": "operational",
        "documentation": "/api/docs",
        "health": "/health",
    }


@app.get("/api/docs", tags=["System"])
def api_docs():
    """Minimal endpoint listing for integrators (OpenAPI lives at /docs)."""
    return {
        "title": "Bot Engine API Documentation",
        "version": settings.app_version,
        "description": "Secure API for bot-powered lead generation and pricing calculations",
        "endpoints": ENDPOINTS,
        "authentication": {
            "type": "Bearer Token",
            "header": "Authorization: Bearer YOUR_API_KEY",
            "alternative": "X-API-Key: YOUR_API_KEY",
        },
        "support": {"email": settings.support_contact},
    }
