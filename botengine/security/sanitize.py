"""
botengine/security/sanitize.py — Request body validation and sanitization.

Two entry points used by every API route:
  validate_request_data(data, required, optional) → ValidationResult
  sanitize_input(data)                             → cleaned dict

Markup is stripped from strings with BeautifulSoup; strings, lists and
objects are bounded in size so a single request cannot balloon memory.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional

from bs4 import BeautifulSoup

from botengine.pricing.personas import PERSONAS
from botengine.pricing.tables import MATERIAL_MULTIPLIERS

logger = logging.getLogger(__name__)

MAX_STRING_LENGTH = 1000
MAX_COLLECTION_ITEMS = 50
NUMBER_BOUND = 1_000_000

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
INDIAN_MOBILE_RE = re.compile(r"^[6-9]\d{9}$")
PINCODE_RE = re.compile(r"^\d{6}$")
NAME_RE = re.compile(r"^[a-zA-Z\s.'-]+$")
CLIENT_ID_RE = re.compile(r"^[a-zA-Z0-9_-]+$")

PROJECT_TYPES = ("Residential", "Commercial")
FINISH_TIERS = ("Economy", "Standard", "Premium")
CLIENT_TYPES = ("interiors", "salon", "tutor")
TIMELINES = ("rush", "normal", "flexible")
RESIDENTIAL_SPACES = ("full-home", "kitchen", "bedroom", "living-room", "bathroom", "dining-room")
COMMERCIAL_SPACES = ("office", "retail", "restaurant", "clinic", "showroom", "warehouse")


@dataclass
class ValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


# ── Sanitization ──────────────────────────────────────────────────────────────

def strip_markup(text: str) -> str:
    """Drop all HTML tags (and script/style contents), keep the visible text."""
    if "<" not in text and "&" not in text:
        return text
    soup = BeautifulSoup(text, "html.parser")
    for tag in soup(["script", "style"]):
        tag.decompose()
    return soup.get_text()


def sanitize_value(value: Any) -> Any:
    """Recursively clean a JSON value."""
    if value is None:
        return None

    if isinstance(value, bool):
        return value

    if isinstance(value, str):
        return strip_markup(value).strip()[:MAX_STRING_LENGTH]

    if isinstance(value, (int, float)):
        if not math.isfinite(value) or value < -NUMBER_BOUND or value > NUMBER_BOUND:
            return 0
        return value

    if isinstance(value, (list, tuple)):
        return [sanitize_value(item) for item in list(value)[:MAX_COLLECTION_ITEMS]]

    if isinstance(value, dict):
        cleaned = {}
        for key, item in value.items():
            if len(cleaned) >= MAX_COLLECTION_ITEMS:
                break
            clean_key = sanitize_value(str(key))
            if clean_key:
                cleaned[clean_key] = sanitize_value(item)
        return cleaned

    return sanitize_value(str(value))


def sanitize_input(data: Any) -> dict:
    """Sanitize a request body. Non-dict bodies become an empty dict."""
    if not isinstance(data, dict):
        return {}
    return {key: sanitize_value(value) for key, value in data.items()}


# ── Field rules ───────────────────────────────────────────────────────────────

def _one_of(options: Iterable[str], message: str, lower: bool = True) -> Callable[[Any], Optional[str]]:
    allowed = set(options)

    def check(value: Any) -> Optional[str]:
        candidate = str(value).lower() if lower else value
        return None if candidate in allowed else message

    return check


def _is_object(message: str) -> Callable[[Any], Optional[str]]:
    return lambda value: None if isinstance(value, dict) else message


def _check_email(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not EMAIL_RE.match(value):
        return "Invalid email format"
    return None


def _check_phone(value: Any) -> Optional[str]:
    digits = re.sub(r"\D", "", str(value))
    if len(digits) < 10 or len(digits) > 12:
        return "Invalid phone number length"
    if not INDIAN_MOBILE_RE.match(digits[-10:]):
        return "Invalid Indian mobile number format"
    return None


def _check_pincode(value: Any) -> Optional[str]:
    return None if PINCODE_RE.match(str(value)) else "Pincode must be 6 digits"


def _check_name(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not 2 <= len(value) <= 50:
        return "Name must be between 2-50 characters"
    if not NAME_RE.match(value):
        return "Name contains invalid characters"
    return None


def _check_area(value: Any) -> Optional[str]:
    try:
        area = float(value)
    except (TypeError, ValueError):
        area = math.nan
    if math.isnan(area) or area < 100 or area > 50000:
        return "Area must be between 100-50000 sq ft"
    return None


def _check_session_id(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not 10 <= len(value) <= 100:
        return "Invalid session ID format"
    return None


def _check_client_id(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not CLIENT_ID_RE.match(value):
        return "Invalid client ID format"
    return None


def _check_consent(value: Any) -> Optional[str]:
    return None if isinstance(value, bool) else "Marketing consent must be boolean"


def _check_requirements(value: Any) -> Optional[str]:
    if isinstance(value, str) and len(value) > 500:
        return "Requirements text too long (max 500 characters)"
    return None


FIELD_RULES: dict[str, Callable[[Any], Optional[str]]] = {
    "email": _check_email,
    "phone": _check_phone,
    "pincode": _check_pincode,
    "name": _check_name,
    "botType": _one_of(PERSONAS.keys(), "Invalid bot type specified"),
    "projectType": _one_of(PROJECT_TYPES, "Invalid project type", lower=False),
    "finishTier": _one_of(FINISH_TIERS, "Invalid finish tier", lower=False),
    "clientType": _one_of(CLIENT_TYPES, "Invalid client type"),
    "timeline": _one_of(TIMELINES, "Invalid timeline option"),
    "areaSqft": _check_area,
    "sessionId": _check_session_id,
    "clientId": _check_client_id,
    "responses": _is_object("Responses must be an object"),
    "userData": _is_object("User data must be an object"),
    "pricing": _is_object("Pricing data must be an object"),
    "marketingConsent": _check_consent,
    "spaceType": _one_of(RESIDENTIAL_SPACES + COMMERCIAL_SPACES, "Invalid space type"),
    "requirements": _check_requirements,
}
for _category, _options in MATERIAL_MULTIPLIERS.items():
    FIELD_RULES[_category] = _one_of(_options.keys(), f"Invalid {_category} option")


def validate_field(name: str, value: Any) -> Optional[str]:
    """Return an error message for an invalid field value, or None."""
    rule = FIELD_RULES.get(name)
    if rule is not None:
        return rule(value)
    if isinstance(value, str) and len(value) > MAX_STRING_LENGTH:
        return f"Field {name} is too long"
    return None


def validate_fields(data: dict) -> list[str]:
    """Apply field rules to every key of a nested object (e.g. userData)."""
    errors = [validate_field(name, value) for name, value in data.items() if not _is_missing(value)]
    return [error for error in errors if error]


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def validate_request_data(
    data: Any,
    required: Iterable[str] = (),
    optional: Iterable[str] = (),
) -> ValidationResult:
    """
    Validate a request body against a required/optional field list.

    Reports missing required fields, unexpected fields and per-field rule
    failures. Only top-level fields are checked.
    """
    required = list(required)
    allowed = set(required) | set(optional)
    errors: list[str] = []

    if not isinstance(data, dict):
        data = {}

    for name in required:
        if _is_missing(data.get(name)):
            errors.append(f"Missing required field: {name}")

    for name, value in data.items():
        if name not in allowed:
            errors.append(f"Unexpected field: {name}")
            continue
        if _is_missing(value):
            continue
        error = validate_field(name, value)
        if error:
            errors.append(error)

    if errors:
        logger.debug("Request validation failed: %s", errors)
    return ValidationResult(is_valid=not errors, errors=errors)
