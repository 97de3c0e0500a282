"""
tests/conftest.py — Shared pytest configuration and fixtures.

Sets dummy environment variables BEFORE any botengine module is imported,
so that settings never pick up a developer's .env or real credentials.
"""

import os
import pytest

# ── Set dummy env vars before any botengine module is imported ───────────────
# This runs at collection time, before tests execute.
os.environ.setdefault("OPENROUTER_API_KEY", "test-key")
os.environ.setdefault("OPENROUTER_MODEL", "test-model")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CLIENTS_FILE", "tests/no-such-clients.json")
os.environ.setdefault("SHEETS_DRY_RUN", "true")
os.environ.setdefault("GEOCODING_ENABLED", "false")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from botengine.clients.registry import ClientConfig, ClientLocation, ClientRegistry, SheetConfig
from botengine.db.models import Base


# 28 alphanumerics after the environment prefix
INTERIORS_KEY = "bot_dev_interiorsKey0000000000000001"
SALON_KEY = "bot_dev_salonKey00000000000000000001"


# ── In-memory DB fixtures ─────────────────────────────────────────────────────

@pytest.fixture
def db_engine():
    """A single shared in-memory SQLite connection (works across threads)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    """Provide a fresh in-memory SQLite session for each test."""
    Session = sessionmaker(bind=db_engine, autoflush=False, expire_on_commit=False)
    session = Session()
    try:
        yield session
    finally:
        session.close()


# ── Tenants ───────────────────────────────────────────────────────────────────

@pytest.fixture
def interiors_client() -> ClientConfig:
    return ClientConfig(
        client_id="test_interiors",
        api_key=INTERIORS_KEY,
        tier="professional",
        max_requests=3,
        domains=["interiors.example.com"],
        service_category="interiors",
        sheet=SheetConfig(spreadsheet_id="sheet-123"),
        location=ClientLocation(lat=19.076, lon=72.8777, radius_km=60),
    )


@pytest.fixture
def salon_client() -> ClientConfig:
    return ClientConfig(
        client_id="test_salon",
        api_key=SALON_KEY,
        allowed_endpoints=["calculate-price", "validate-pincode"],
        service_category="salon",
    )


@pytest.fixture
def registry(interiors_client, salon_client) -> ClientRegistry:
    return ClientRegistry([interiors_client, salon_client])
