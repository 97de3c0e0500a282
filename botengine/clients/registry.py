"""
botengine/clients/registry.py — Tenant (client) configuration.

Each tenant gets its own API key, quota, allowed endpoints, CORS domains,
service category, spreadsheet and optional service radius. Tenants are read
from the JSON file named by settings.clients_file:

    {
      "clients": [
        {"client_id": "tener_interiors", "api_key": "bot_prod_...", ...}
      ]
    }
"""

import hmac
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from botengine.config import settings

logger = logging.getLogger(__name__)

ALL_ENDPOINTS = ["calculate-price", "validate-pincode", "submit-lead", "chat"]

# Open to every authenticated tenant regardless of tier
ALWAYS_ALLOWED = frozenset({"usage"})


# ── Schemas ───────────────────────────────────────────────────────────────────

class SheetConfig(BaseModel):
    spreadsheet_id: str
    worksheet_name: str = "Leads"


class ClientLocation(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)
    radius_km: float = Field(default=50.0, gt=0)


class ClientConfig(BaseModel):
    client_id: str = Field(..., pattern=r"^[a-zA-Z0-9_-]+$")
    api_key: str
    tier: str = "starter"
    max_requests: int = Field(default=500, gt=0, description="Requests per endpoint per quota window")
    allowed_endpoints: list[str] = Field(default_factory=lambda: list(ALL_ENDPOINTS))
    domains: list[str] = Field(default_factory=list)
    service_category: str = "interiors"
    sheet: Optional[SheetConfig] = None
    location: Optional[ClientLocation] = None

    def allows(self, endpoint: str) -> bool:
        return endpoint in ALWAYS_ALLOWED or endpoint in self.allowed_endpoints

    @property
    def origins(self) -> list[str]:
        return [f"https://{domain}" for domain in self.domains]


# ── Registry ──────────────────────────────────────────────────────────────────

class ClientRegistry:
    """In-memory, read-only view of every configured tenant."""

    def __init__(self, clients: list[ClientConfig]):
        self._clients = {client.client_id: client for client in clients}

    def __len__(self) -> int:
        return len(self._clients)

    def __iter__(self):
        return iter(self._clients.values())

    def get(self, client_id: str) -> Optional[ClientConfig]:
        return self._clients.get(client_id)

    def find_by_api_key(self, api_key: str) -> Optional[ClientConfig]:
        """Constant-time comparison against every configured key."""
        for client in self._clients.values():
            if hmac.compare_digest(client.api_key.encode(), api_key.encode()):
                return client
        return None

    def all_origins(self) -> list[str]:
        return [origin for client in self for origin in client.origins]

    @classmethod
    def from_file(cls, path: str | Path) -> "ClientRegistry":
        path = Path(path)
        if not path.exists():
            logger.warning("Clients file %s not found — no tenants configured.", path)
            return cls([])

        data = json.loads(path.read_text(encoding="utf-8"))
        clients = [ClientConfig.model_validate(item) for item in data.get("clients", [])]
        logger.info("Loaded %d tenant(s) from %s.", len(clients), path)
        return cls(clients)


@lru_cache(maxsize=1)
def get_client_registry() -> ClientRegistry:
    """Load the tenant registry once per process (also used as a FastAPI dependency)."""
    return ClientRegistry.from_file(settings.clients_file)
