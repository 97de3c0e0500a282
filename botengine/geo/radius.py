"""
botengine/geo/radius.py — Is a pincode within a tenant's service radius?

Geocodes the pincode through OpenStreetMap Nominatim (free, no auth, needs a
real User-Agent) and compares the great-circle distance with the tenant's
configured centre and radius.
  Docs: https://nominatim.org/release-docs/latest/api/Search/
"""

import logging
import math
import re
from typing import Optional

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from botengine.clients.registry import ClientLocation
from botengine.config import settings

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
PINCODE_RE = re.compile(r"^[0-9]{6}$")

HEADERS = {
    "User-Agent": "BotEngine/1.0 (pincode service-area check)"
}


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two lat/lon points, in km."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


@retry(
    retry=retry_if_exception_type(requests.RequestException),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
def _geocode_raw(pincode: str) -> list[dict]:
    response = requests.get(
        settings.nominatim_url,
        headers=HEADERS,
        params={"postalcode": pincode, "country": "India", "format": "json"},
        timeout=10,
    )
    response.raise_for_status()
    return response.json()


def geocode_pincode(pincode: str) -> Optional[tuple[float, float]]:
    """Return (lat, lon) of the first Nominatim match, or None."""
    try:
        places = _geocode_raw(pincode)
    except requests.RequestException as e:
        logger.error("Geocoding failed for pincode %s after retries: %s", pincode, e)
        return None

    if not places:
        logger.info("No geocoding match for pincode %s.", pincode)
        return None

    try:
        return float(places[0]["lat"]), float(places[0]["lon"])
    except (KeyError, TypeError, ValueError):
        logger.warning("Unexpected Nominatim payload for %s: %s", pincode, str(places[0])[:200])
        return None


def is_within_radius(pincode: str, location: ClientLocation) -> bool:
    """
    True if the pincode geocodes to a point within location.radius_km of the
    tenant's centre. Malformed pincodes and geocoding misses return False.
    """
    if not PINCODE_RE.match(str(pincode)):
        return False

    point = geocode_pincode(str(pincode))
    if point is None:
        return False

    distance = haversine_km(point[0], point[1], location.lat, location.lon)
    logger.debug("Pincode %s is %.1f km from centre (radius %.1f km).", pincode, distance, location.radius_km)
    return distance <= location.radius_km
