"""
botengine/db/repository.py — All database read/write operations.

Business logic should never write raw SQL or ORM queries directly —
everything goes through this module. This keeps DB logic centralized
and easy to test/mock.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from botengine.db.models import ApiUsage, ChatSession, Lead, StorageStatus

logger = logging.getLogger(__name__)

REQUEST_ACTION = "request"


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# ── API usage ─────────────────────────────────────────────────────────────────

def record_usage(
    db: Session,
    client_id: str,
    endpoint: str,
    action: str = REQUEST_ACTION,
    method: Optional[str] = None,
    request_id: Optional[str] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
    details: Optional[dict[str, Any]] = None,
) -> ApiUsage:
    """Append a usage record (an authenticated request or a business event)."""
    record = ApiUsage(
        client_id=client_id,
        action=action,
        endpoint=endpoint,
        method=method,
        request_id=request_id,
        ip_address=ip_address,
        user_agent=(user_agent or "")[:255] or None,
        details=json.dumps(details, default=str) if details else None,
        created_at=utcnow(),
    )
    db.add(record)
    db.flush()
    return record


def count_requests_since(db: Session, client_id: str, endpoint: str, since: datetime) -> int:
    """Count authenticated requests a client made to an endpoint since a point in time."""
    return (
        db.query(func.count(ApiUsage.id))
        .filter(
            ApiUsage.client_id == client_id,
            ApiUsage.endpoint == endpoint,
            ApiUsage.action == REQUEST_ACTION,
            ApiUsage.created_at > since,
        )
        .scalar()
    ) or 0


def oldest_request_since(db: Session, client_id: str, endpoint: str, since: datetime) -> Optional[datetime]:
    """Timestamp of the oldest request still inside the window (for Retry-After)."""
    return (
        db.query(func.min(ApiUsage.created_at))
        .filter(
            ApiUsage.client_id == client_id,
            ApiUsage.endpoint == endpoint,
            ApiUsage.action == REQUEST_ACTION,
            ApiUsage.created_at > since,
        )
        .scalar()
    )


def get_usage_since(db: Session, client_id: str, since: datetime) -> list[ApiUsage]:
    return (
        db.query(ApiUsage)
        .filter(ApiUsage.client_id == client_id, ApiUsage.created_at > since)
        .order_by(ApiUsage.created_at.asc())
        .all()
    )


def get_client_usage_stats(db: Session, client_id: str, window: timedelta) -> dict[str, Any]:
    """
    Aggregate a client's usage over the given window.

    Returns:
        {"totalRequests", "endpointBreakdown", "eventBreakdown"}
    """
    records = get_usage_since(db, client_id, utcnow() - window)
    endpoints: dict[str, int] = {}
    events: dict[str, int] = {}

    for record in records:
        if record.action == REQUEST_ACTION:
            endpoints[record.endpoint] = endpoints.get(record.endpoint, 0) + 1
        else:
            events[record.action] = events.get(record.action, 0) + 1

    return {
        "totalRequests": sum(endpoints.values()),
        "endpointBreakdown": endpoints,
        "eventBreakdown": events,
    }


# ── Lead ledger ───────────────────────────────────────────────────────────────

def create_lead(
    db: Session,
    lead_id: str,
    client_id: str,
    name: str,
    phone: str,
    email: str,
    project_type: Optional[str] = None,
    quoted_price: Optional[str] = None,
    persona: Optional[str] = None,
    marketing_consent: bool = False,
    session_id: Optional[str] = None,
) -> Lead:
    """Record a lead submission before it is sent to the tenant spreadsheet."""
    lead = Lead(
        lead_id=lead_id,
        client_id=client_id,
        session_id=session_id,
        name=name,
        phone=phone,
        email=email,
        project_type=project_type,
        quoted_price=quoted_price,
        persona=persona,
        marketing_consent=marketing_consent,
        storage_status=StorageStatus.PENDING,
    )
    db.add(lead)
    db.flush()
    logger.debug("Lead %s recorded for client %s.", lead_id, client_id)
    return lead


def update_lead_storage_status(
    db: Session,
    lead_id: str,
    status: StorageStatus,
    row_number: Optional[int] = None,
    error_message: Optional[str] = None,
) -> None:
    """Update a lead's spreadsheet status after a storage attempt."""
    update_data: dict = {"storage_status": status}
    if status == StorageStatus.STORED:
        update_data["stored_at"] = utcnow()
        update_data["row_number"] = row_number
    if error_message:
        update_data["error_message"] = error_message
    db.query(Lead).filter(Lead.lead_id == lead_id).update(update_data)


def get_lead(db: Session, lead_id: str) -> Optional[Lead]:
    return db.query(Lead).filter(Lead.lead_id == lead_id).first()


def get_leads_by_status(db: Session, status: StorageStatus, limit: int = 50) -> list[Lead]:
    """Fetch leads filtered by spreadsheet status (e.g. FAILED for a retry script)."""
    return (
        db.query(Lead)
        .filter(Lead.storage_status == status)
        .order_by(Lead.created_at.asc())
        .limit(limit)
        .all()
    )


# ── Chat sessions ─────────────────────────────────────────────────────────────

def _chat_session(db: Session, session_id: str, client_id: Optional[str]) -> Optional[ChatSession]:
    # Session ids are only unique within a tenant
    return (
        db.query(ChatSession)
        .filter(ChatSession.client_id == client_id, ChatSession.session_id == session_id)
        .first()
    )


def get_chat_history(db: Session, session_id: str, client_id: Optional[str] = None) -> list[dict]:
    """Return the stored history for a tenant's session, or an empty history."""
    chat = _chat_session(db, session_id, client_id)
    if not chat:
        return []
    try:
        history = json.loads(chat.history or "[]")
    except json.JSONDecodeError:
        logger.warning("Corrupt history for session %s — starting fresh.", session_id)
        return []
    return history if isinstance(history, list) else []


def save_chat_history(
    db: Session,
    session_id: str,
    history: list[dict],
    client_id: Optional[str] = None,
    persona: Optional[str] = None,
) -> ChatSession:
    """Create or overwrite the history for a tenant's session."""
    chat = _chat_session(db, session_id, client_id)
    if not chat:
        chat = ChatSession(session_id=session_id, client_id=client_id, persona=persona)
        db.add(chat)
    chat.history = json.dumps(history)
    if persona:
        chat.persona = persona
    db.flush()
    return chat
