"""
botengine/leads/formatting.py — Turns a lead submission into a spreadsheet row.

LEAD_SCHEMA fixes both the column order and the header text of every tenant
sheet. format_lead_row() maps a LeadData onto those headers; validate_lead_row()
checks the formatted row before it is written.
"""

import json
import re
import secrets
import time
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Optional
from zoneinfo import ZoneInfo

from botengine.pricing.tables import MATERIAL_CATEGORIES

IST = ZoneInfo("Asia/Kolkata")

# field name → sheet column header (dict order is column order)
LEAD_SCHEMA = {
    "timestamp": "Submission Date",
    "lead_id": "Lead ID",
    "name": "Customer Name",
    "phone": "Phone Number",
    "email": "Email Address",
    "project_type": "Project Type",
    "space_type": "Space Type",
    "finish_tier": "Finish Tier",
    "timeline": "Timeline",
    "special_requirements": "Special Requirements",
    "quoted_price": "Quoted Price",
    "persona": "Bot Specialist",
    "materials": "Material Preferences",
    "primary_consent": "Primary Consent",
    "marketing_consent": "Marketing Consent",
    "session_id": "Session ID",
    "ip_address": "IP Address",
    "user_agent": "User Agent",
}
SHEET_HEADERS = list(LEAD_SCHEMA.values())

REQUIRED_COLUMNS = (
    "Customer Name",
    "Phone Number",
    "Email Address",
    "Project Type",
    "Quoted Price",
    "Primary Consent",
)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_SHEET_PHONE_RE = re.compile(r"^\+91-\d{10}$|^\d{10}$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass
class LeadData:
    """Everything captured about one lead, before sheet formatting."""
    name: str
    phone: str
    email: str
    client_id: str
    project_type: Optional[str] = None
    space_type: Optional[str] = None
    finish_tier: Optional[str] = None
    timeline: Optional[str] = None
    special_requirements: str = ""
    materials: Any = None
    quoted_price: Optional[str] = None
    persona: Optional[str] = None
    primary_consent: bool = True
    marketing_consent: bool = False
    session_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    lead_id: Optional[str] = None
    timestamp: Optional[str] = None


# ── Field formatters ──────────────────────────────────────────────────────────

def _base36(number: int) -> str:
    if number == 0:
        return "0"
    out = []
    while number:
        number, rem = divmod(number, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def generate_lead_id(client_id: str) -> str:
    """e.g. 'TENE-M1ABC2DE-9F3A1C' — client prefix, base36 millis, 3 random bytes."""
    millis = int(time.time() * 1000)
    return f"{client_id[:4]}-{_base36(millis)}-{secrets.token_hex(3)}".upper()


def format_timestamp(moment: Optional[datetime] = None) -> str:
    """Submission time in IST, en-IN style: '16/10/2026, 07:35:12 pm'."""
    moment = (moment or datetime.now(IST)).astimezone(IST)
    return moment.strftime("%d/%m/%Y, %I:%M:%S ") + moment.strftime("%p").lower()


def format_phone_number(phone: Optional[str]) -> str:
    """Normalise Indian mobiles to '+91-XXXXXXXXXX'; anything else is returned unchanged."""
    if not phone:
        return ""
    digits = re.sub(r"\D", "", phone)
    if digits.startswith("91") and len(digits) == 12:
        digits = digits[2:]
    if len(digits) == 10 and digits[0] in "6789":
        return f"+91-{digits}"
    return phone


def format_materials(materials: Any) -> str:
    """Render a materials mapping (or its JSON string) as 'Flooring: vinyl, Paint: premium'."""
    if not materials:
        return ""
    if isinstance(materials, str):
        try:
            materials = json.loads(materials)
        except json.JSONDecodeError:
            return materials
    if isinstance(materials, dict):
        parts = [
            f"{category.capitalize()}: {materials[category]}"
            for category in MATERIAL_CATEGORIES
            if materials.get(category)
        ]
        return ", ".join(parts)
    return str(materials)


def anonymize_ip_address(ip_address: Optional[str]) -> str:
    """Mask the last IPv4 octet; anything else is fully masked."""
    if not ip_address:
        return ""
    parts = ip_address.split(".")
    if len(parts) == 4:
        return f"{parts[0]}.{parts[1]}.{parts[2]}.xxx"
    return "xxx.xxx.xxx.xxx"


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


# ── Row assembly ──────────────────────────────────────────────────────────────

def format_lead_row(lead: LeadData) -> dict[str, str]:
    """Map a LeadData onto the sheet headers, formatting each column."""
    values = asdict(lead)
    row = {}
    for key, header in LEAD_SCHEMA.items():
        value = values.get(key)
        if key == "phone":
            value = format_phone_number(value)
        elif key == "materials":
            value = format_materials(value)
        elif key in ("primary_consent", "marketing_consent"):
            value = "Yes" if value else "No"
        elif key == "special_requirements":
            value = _as_text(value)[:500]
        elif key == "ip_address":
            value = anonymize_ip_address(value)
        elif key == "user_agent":
            value = _as_text(value)[:200]
        else:
            value = _as_text(value)
        row[header] = value
    return row


def row_values(row: dict[str, str]) -> list[str]:
    """Values in sheet column order."""
    return [row.get(header, "") for header in SHEET_HEADERS]


def validate_lead_row(row: dict[str, str]) -> list[str]:
    """Return a list of problems with a formatted row (empty when valid)."""
    errors = [
        f"Missing required field: {column}"
        for column in REQUIRED_COLUMNS
        if not str(row.get(column, "")).strip()
    ]

    email = row.get("Email Address")
    if email and not _EMAIL_RE.match(email):
        errors.append("Invalid email format")

    phone = row.get("Phone Number")
    if phone and not _SHEET_PHONE_RE.match(re.sub(r"\s", "", phone)):
        errors.append("Invalid phone format")

    return errors
