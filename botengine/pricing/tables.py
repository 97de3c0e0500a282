"""
botengine/pricing/tables.py — Rate model and adjustment-factor tables.

Everything here is built once at import time and frozen: mappings are
wrapped in MappingProxyType, rule lists are tuples and the containers are
frozen dataclasses. The engine receives a PricingTables instance by reference
and never writes to it.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from botengine.pricing.personas import PERSONAS


# ── Containers ────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RegionRule:
    """A postal-code prefix rule. Rules are evaluated in order, first match wins."""
    prefixes: tuple[str, ...]
    region: str

    def matches(self, pincode: str) -> bool:
        return pincode.startswith(self.prefixes)


@dataclass(frozen=True)
class PricingTables:
    base_rates: Mapping[str, Mapping[str, float]]
    fallback_rate: float
    default_project_type: str
    default_finish_tier: str
    default_area: float
    persona_multipliers: Mapping[str, float]
    material_multipliers: Mapping[str, Mapping[str, float]]
    region_multipliers: Mapping[str, float]
    region_rules: tuple[RegionRule, ...]
    default_region: str
    timeline_multipliers: Mapping[str, float]
    scope_multipliers: Mapping[str, float]
    currency: str = "INR"
    range_low: float = 0.85
    range_high: float = 1.15


def _freeze(table: dict) -> Mapping:
    """Recursively wrap nested dicts in read-only proxies."""
    return MappingProxyType({
        key: _freeze(value) if isinstance(value, dict) else value
        for key, value in table.items()
    })


# ── Default tables ────────────────────────────────────────────────────────────

# Base rate per sqft by project type and finish tier
BASE_RATES = _freeze({
    "Residential": {"Economy": 1200, "Standard": 1500, "Premium": 2000},
    "Commercial": {"Economy": 800, "Standard": 1000, "Premium": 1200},
})

MATERIAL_CATEGORIES = ("flooring", "kitchen", "lighting", "paint", "furniture")

MATERIAL_MULTIPLIERS = _freeze({
    "flooring": {
        "marble-granite": 1.8,
        "premium-tiles": 1.4,
        "engineered-wood": 1.6,
        "laminate": 1.2,
        "standard-tiles": 1.0,
        "vinyl": 0.8,
    },
    "kitchen": {
        "premium-modular": 2.2,
        "standard-modular": 1.5,
        "semi-modular": 1.2,
        "basic": 0.9,
    },
    "lighting": {
        "designer": 2.0,
        "premium": 1.5,
        "standard": 1.2,
        "basic": 0.8,
    },
    "paint": {
        "premium": 1.4,
        "standard": 1.0,
        "economy": 0.7,
    },
    "furniture": {
        "custom": 2.5,
        "premium-modular": 1.8,
        "standard-modular": 1.3,
        "ready-made": 1.0,
    },
})

REGION_MULTIPLIERS = _freeze({
    "mumbai": 1.3,
    "delhi": 1.25,
    "bangalore": 1.2,
    "pune": 1.15,
    "hyderabad": 1.1,
    "default": 0.85,    # tier-2 and tier-3 cities
})

REGION_RULES = (
    RegionRule(("400",), "mumbai"),
    RegionRule(("110", "121", "122"), "delhi"),
    RegionRule(("560",), "bangalore"),
    RegionRule(("411", "412"), "pune"),
    RegionRule(("500",), "hyderabad"),
)

TIMELINE_MULTIPLIERS = _freeze({
    "rush": 1.4,        # 15-30 days
    "normal": 1.0,      # 45-60 days
    "flexible": 0.95,   # 90+ days
})

SCOPE_MULTIPLIERS = _freeze({
    "full-renovation": 1.2,
    "partial-renovation": 1.0,
    "fresh-interiors": 0.9,
    "single-room": 0.8,
})


def build_default_tables() -> PricingTables:
    return PricingTables(
        base_rates=BASE_RATES,
        fallback_rate=1200,
        default_project_type="Residential",
        default_finish_tier="Standard",
        default_area=1000.0,
        persona_multipliers=_freeze({key: p.multiplier for key, p in PERSONAS.items()}),
        material_multipliers=MATERIAL_MULTIPLIERS,
        region_multipliers=REGION_MULTIPLIERS,
        region_rules=REGION_RULES,
        default_region="default",
        timeline_multipliers=TIMELINE_MULTIPLIERS,
        scope_multipliers=SCOPE_MULTIPLIERS,
    )


# Built once at import
DEFAULT_TABLES = build_default_tables()
