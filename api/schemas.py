"""
api/schemas.py — Pydantic response models for all API endpoints.

These are the API contract — separate from DB ORM models and from the
engine dataclasses so we control exactly what is exposed over HTTP.
Request bodies are plain JSON objects checked by botengine.security.sanitize,
which reports every problem at once with a 400.
"""

from typing import Optional

from pydantic import BaseModel


# ── Pricing ───────────────────────────────────────────────────────────────────

class PriceRangeOut(BaseModel):
    min: int
    max: int
    display: str


class PricingOut(BaseModel):
    range: PriceRangeOut
    currency: str


class SpecialistOut(BaseModel):
    name: str
    expertise: str


class QuoteMetadata(BaseModel):
    calculatedAt: str
    validUntil: str


class QuoteResponse(BaseModel):
    success: bool = True
    quote: str
    pricing: PricingOut
    specialist: SpecialistOut
    metadata: QuoteMetadata


# ── Service area ──────────────────────────────────────────────────────────────

class PincodeResponse(BaseModel):
    success: bool = True
    serviceable: bool
    delivery: str
    serviceLevel: str
    message: str
    withinRadius: Optional[bool] = None


# ── Leads ─────────────────────────────────────────────────────────────────────

class LeadSubmissionResponse(BaseModel):
    success: bool = True
    message: str
    leadId: str
    estimatedResponse: str
    nextSteps: str


# ── Chat ──────────────────────────────────────────────────────────────────────

class ChatResponse(BaseModel):
    success: bool = True
    reply: str
    sessionId: str


# ── Usage ─────────────────────────────────────────────────────────────────────

class UsageResponse(BaseModel):
    success: bool = True
    clientId: str
    timeframe: str
    totalRequests: int
    endpointBreakdown: dict[str, int]
    eventBreakdown: dict[str, int]
    quota: dict[str, int]
