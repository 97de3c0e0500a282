"""
botengine/services/quote_service.py — Public quote payloads.

Wraps the pricing engine for the API: runs the estimate for a tenant and
shapes what the end user is allowed to see (range, currency, specialist,
validity) without exposing the individual factors.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping, Optional

from botengine.config import settings
from botengine.pricing import personas
from botengine.pricing.engine import PriceEstimate, PricingOutcome, estimate

logger = logging.getLogger(__name__)


def quote_valid_until(calculated_at: datetime, days: Optional[int] = None) -> datetime:
    return calculated_at + timedelta(days=days if days is not None else settings.quote_validity_days)


def calculate_quote(
    responses: Mapping[str, Any],
    persona_id: str,
    client_type: Optional[str] = None,
) -> PricingOutcome:
    """Run the engine with the configured fallback quote."""
    outcome = estimate(responses, persona_id, client_type, fallback_quote=settings.fallback_quote)
    if outcome.success:
        logger.info(
            "Quote calculated — persona=%s client_type=%s final=%d",
            persona_id, client_type, outcome.estimate.final_price,
        )
    return outcome


def quote_payload(result: PriceEstimate, persona_id: str) -> dict:
    """Shape an estimate for the calculate-price response."""
    calculated_at = result.calculated_at.astimezone(timezone.utc)
    return {
        "success": True,
        "quote": result.price_range.display,
        "pricing": {
            "range": {
                "min": result.price_range.min,
                "max": result.price_range.max,
                "display": result.price_range.display,
            },
            "currency": result.currency,
        },
        "specialist": {
            "name": personas.display_name(persona_id),
            "expertise": personas.expertise(persona_id),
        },
        "metadata": {
            "calculatedAt": calculated_at.isoformat(),
            "validUntil": quote_valid_until(calculated_at).isoformat(),
        },
    }
