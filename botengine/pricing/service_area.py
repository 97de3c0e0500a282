"""
botengine/pricing/service_area.py — Pincode prefix → service coverage.

Coverage is decided per service category; delivery window and service level
come from the metro prefix set alone, so an uncovered metro pincode still
reports the metro delivery expectations.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Mapping

PREFIX_LENGTH = 3


@dataclass(frozen=True)
class ServiceAreaResult:
    serviceable: bool
    delivery: str
    service_level: str

    def to_dict(self) -> dict:
        return {
            "serviceable": self.serviceable,
            "delivery": self.delivery,
            "serviceLevel": self.service_level,
        }


@dataclass(frozen=True)
class ServiceAreaTables:
    coverage: Mapping[str, frozenset]
    default_category: str
    metro_prefixes: frozenset
    metro_delivery: str = "45-60 days"
    standard_delivery: str = "60-90 days"
    metro_level: str = "premium"
    standard_level: str = "standard"


METRO_PREFIXES = frozenset({"400", "110", "560", "411", "500"})   # Mumbai, Delhi, Bangalore, Pune, Hyderabad

SERVICE_PINCODES = MappingProxyType({
    # metros + Chennai, Kolkata, Ahmedabad, Jaipur, Lucknow
    "interiors": frozenset(METRO_PREFIXES | {"600", "700", "380", "302", "226"}),
    "salon": frozenset(METRO_PREFIXES | {"600"}),
    "tutor": frozenset(METRO_PREFIXES | {"600", "700"}),
})

DEFAULT_SERVICE_AREAS = ServiceAreaTables(
    coverage=SERVICE_PINCODES,
    default_category="interiors",
    metro_prefixes=METRO_PREFIXES,
)


def pincode_prefix(pincode: Any) -> str:
    """First three characters of the pincode. Format is the caller's responsibility."""
    return str(pincode)[:PREFIX_LENGTH]


def coverage_for(service_category: Any, tables: ServiceAreaTables) -> frozenset:
    key = service_category.strip().lower() if isinstance(service_category, str) else None
    return tables.coverage.get(key) or tables.coverage[tables.default_category]


def classify(
    pincode: Any,
    service_category: Any = "interiors",
    *,
    tables: ServiceAreaTables = DEFAULT_SERVICE_AREAS,
) -> ServiceAreaResult:
    """
    Classify a (pre-validated, 6-digit) pincode for a service category.

    Unknown categories use the default category's coverage set.
    """
    prefix = pincode_prefix(pincode)
    is_metro = prefix in tables.metro_prefixes
    return ServiceAreaResult(
        serviceable=prefix in coverage_for(service_category, tables),
        delivery=tables.metro_delivery if is_metro else tables.standard_delivery,
        service_level=tables.metro_level if is_metro else tables.standard_level,
    )
