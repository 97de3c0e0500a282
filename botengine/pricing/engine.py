"""
botengine/pricing/engine.py — Questionnaire → price estimate.

One public function:
  estimate(responses, persona_id, client_category) → PricingOutcome

The engine is a total function over the response shape: missing or unknown
values fall back to documented defaults and neutral multipliers. Only an
unexpected internal fault produces a failed outcome, and that outcome still
carries a fallback range the caller can show.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from botengine.pricing.formatting import format_price_range, round_half_up
from botengine.pricing.tables import DEFAULT_TABLES, MATERIAL_CATEGORIES, PricingTables

logger = logging.getLogger(__name__)

NEUTRAL = 1.0
FALLBACK_QUOTE = "₹15,00,000 - ₹25,00,000"
PRICING_FAILED = "Pricing calculation failed"

_LEADING_NUMBER = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


# ── Output dataclasses ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PriceRange:
    min: int
    max: int
    display: str


@dataclass(frozen=True)
class PriceBreakdown:
    persona: Optional[str]
    persona_factor: float
    material_factor: float
    region_factor: float
    timeline_factor: float
    scope_factor: float

    def to_dict(self) -> dict:
        return {
            "persona": self.persona,
            "personaFactor": self.persona_factor,
            "materialFactor": self.material_factor,
            "regionFactor": self.region_factor,
            "timelineFactor": self.timeline_factor,
            "scopeFactor": self.scope_factor,
        }


@dataclass(frozen=True)
class PriceEstimate:
    base_price: int
    final_price: int
    price_range: PriceRange
    currency: str
    breakdown: PriceBreakdown
    calculated_at: datetime
    area: float
    project_type: str
    finish_tier: str
    client_category: Optional[str] = None

    def to_dict(self) -> dict:
        """JSON-serializable record using the public camelCase field names."""
        return {
            "basePrice": self.base_price,
            "finalPrice": self.final_price,
            "priceRange": {
                "min": self.price_range.min,
                "max": self.price_range.max,
                "display": self.price_range.display,
            },
            "currency": self.currency,
            "breakdown": self.breakdown.to_dict(),
            "calculatedAt": self.calculated_at.isoformat(),
            "metadata": {
                "area": self.area,
                "projectType": self.project_type,
                "finishTier": self.finish_tier,
                "clientCategory": self.client_category,
            },
        }


@dataclass(frozen=True)
class PricingOutcome:
    success: bool
    estimate: Optional[PriceEstimate] = None
    error: Optional[str] = None
    fallback_quote: Optional[str] = field(default=None)


# ── Lookups ───────────────────────────────────────────────────────────────────

def lookup_factor(table: Mapping[str, float], key: Any) -> float:
    """
    Look up a multiplier, returning 1.0 for absent, unhashable or unknown keys
    and for any non-positive value in the table.
    """
    if key is None or key == "":
        return NEUTRAL
    try:
        value = table.get(key)
    except TypeError:
        return NEUTRAL
    if not isinstance(value, (int, float)) or isinstance(value, bool) or value <= 0:
        return NEUTRAL
    return float(value)


def parse_area(raw: Any, default: float) -> float:
    """
    Parse a floor area in sqft. Numbers are used as-is, strings by their
    leading numeric prefix ("1200 sqft" → 1200). Anything non-finite,
    non-positive or unparseable yields the default.
    """
    if isinstance(raw, bool) or raw is None:
        return default
    if isinstance(raw, (int, float)):
        area = float(raw)
    elif isinstance(raw, str):
        match = _LEADING_NUMBER.match(raw)
        if not match:
            return default
        area = float(match.group())
    else:
        return default
    if not math.isfinite(area) or area <= 0:
        return default
    return area


def resolve_base_rate(project_type: str, finish_tier: str, tables: PricingTables) -> float:
    tiers = tables.base_rates.get(project_type) if isinstance(project_type, str) else None
    rate = tiers.get(finish_tier) if tiers and isinstance(finish_tier, str) else None
    return float(rate) if rate else float(tables.fallback_rate)


def persona_factor(persona_id: Any, tables: PricingTables) -> float:
    if not isinstance(persona_id, str):
        return NEUTRAL
    return lookup_factor(tables.persona_multipliers, persona_id.strip().lower())


def material_factor(responses: Mapping[str, Any], tables: PricingTables) -> float:
    """Product of the per-category material multipliers that are present."""
    nested = responses.get("materials")
    if not isinstance(nested, Mapping):
        nested = {}

    factor = NEUTRAL
    for category in MATERIAL_CATEGORIES:
        choice = responses.get(category) or nested.get(category)
        if choice:
            factor *= lookup_factor(tables.material_multipliers[category], choice)
    return factor


def region_for_pincode(pincode: Any, tables: PricingTables) -> Optional[str]:
    """Return the region bucket for a pincode, or None when no pincode is given."""
    if not pincode:
        return None
    code = str(pincode)
    for rule in tables.region_rules:
        if rule.matches(code):
            return rule.region
    return tables.default_region


def region_factor(pincode: Any, tables: PricingTables) -> float:
    region = region_for_pincode(pincode, tables)
    if region is None:
        return NEUTRAL
    return lookup_factor(tables.region_multipliers, region)


# ── Estimate ──────────────────────────────────────────────────────────────────

def _calculate(
    responses: Mapping[str, Any],
    persona_id: Any,
    client_category: Optional[str],
    tables: PricingTables,
) -> PriceEstimate:
    area = parse_area(responses.get("areaSqft"), tables.default_area)
    project_type = (
        responses.get("projectType") or responses.get("projectCategory") or tables.default_project_type
    )
    finish_tier = responses.get("finishTier") or tables.default_finish_tier

    base_rate = resolve_base_rate(project_type, finish_tier, tables)
    total = base_rate * area

    # Fixed order: persona, materials, region, timeline, scope
    breakdown = PriceBreakdown(
        persona=persona_id if isinstance(persona_id, str) else None,
        persona_factor=persona_factor(persona_id, tables),
        material_factor=material_factor(responses, tables),
        region_factor=region_factor(responses.get("pincode"), tables),
        timeline_factor=lookup_factor(tables.timeline_multipliers, responses.get("timeline")),
        scope_factor=lookup_factor(tables.scope_multipliers, responses.get("projectScope")),
    )
    for factor in (
        breakdown.persona_factor,
        breakdown.material_factor,
        breakdown.region_factor,
        breakdown.timeline_factor,
        breakdown.scope_factor,
    ):
        total *= factor

    final_price = max(0, round_half_up(total))
    low = round_half_up(final_price * tables.range_low)
    high = round_half_up(final_price * tables.range_high)

    return PriceEstimate(
        base_price=round_half_up(base_rate * area),
        final_price=final_price,
        price_range=PriceRange(min=low, max=high, display=format_price_range(low, high)),
        currency=tables.currency,
        breakdown=breakdown,
        calculated_at=datetime.now(timezone.utc),
        area=area,
        project_type=str(project_type),
        finish_tier=str(finish_tier),
        client_category=client_category,
    )


def estimate(
    responses: Mapping[str, Any],
    persona_id: Any,
    client_category: Optional[str] = None,
    *,
    tables: PricingTables = DEFAULT_TABLES,
    fallback_quote: str = FALLBACK_QUOTE,
) -> PricingOutcome:
    """
    Turn a questionnaire response into a price estimate.

    Args:
        responses:       Questionnaire answers (camelCase keys, all optional).
        persona_id:      Selected persona, matched case-insensitively.
        client_category: Tenant industry (interiors / salon / tutor); recorded only.
        tables:          Rate and factor tables, DEFAULT_TABLES unless overridden.
        fallback_quote:  Range string returned if the calculation itself fails.

    Returns:
        PricingOutcome with the estimate, or success=False and the fallback quote.
    """
    try:
        if responses is None:
            responses = {}
        result = _calculate(responses, persona_id, client_category, tables)
    except Exception:
        logger.exception("Pricing calculation failed for persona=%r", persona_id)
        return PricingOutcome(success=False, error=PRICING_FAILED, fallback_quote=fallback_quote)

    logger.debug(
        "Estimate: persona=%s base=%d final=%d factors=%s",
        persona_id, result.base_price, result.final_price, result.breakdown.to_dict(),
    )
    return PricingOutcome(success=True, estimate=result)
