"""
botengine/services/lead_service.py — Business logic for lead submission.

This is the "glue" layer that coordinates:
  - Building a LeadData from the submitted user data, answers and quote
  - Recording the lead in the local ledger (PENDING)
  - Appending it to the tenant's Google Sheet
  - Marking the ledger row STORED or FAILED
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy.orm import Session

from botengine.clients.registry import ClientConfig
from botengine.db import repository
from botengine.db.models import StorageStatus
from botengine.leads.formatting import LeadData, generate_lead_id
from botengine.leads.sheets import SheetsLeadStore, SubmissionResult
from botengine.pricing import personas

logger = logging.getLogger(__name__)

REQUIRED_USER_FIELDS = ("name", "phone", "email")


def missing_user_fields(user_data: dict) -> list[str]:
    return [name for name in REQUIRED_USER_FIELDS if not user_data.get(name)]


def build_lead_data(
    user_data: dict,
    responses: dict,
    pricing: dict,
    persona_id: str,
    client_id: str,
    session_id: Optional[str] = None,
    marketing_consent: Any = False,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> LeadData:
    """Assemble the lead record stored for the tenant."""
    materials = responses.get("materials") or {
        key: responses[key]
        for key in ("flooring", "kitchen", "lighting", "paint", "furniture")
        if responses.get(key)
    }
    return LeadData(
        name=str(user_data["name"]),
        phone=str(user_data["phone"]),
        email=str(user_data["email"]),
        client_id=client_id,
        project_type=responses.get("projectType"),
        space_type=responses.get("spaceType"),
        finish_tier=responses.get("finishTier"),
        timeline=responses.get("timeline"),
        special_requirements=responses.get("requirements") or "",
        materials=json.dumps(materials),
        quoted_price=pricing.get("display"),
        persona=personas.display_name(persona_id),
        primary_consent=True,       # required for lead processing
        marketing_consent=bool(marketing_consent),
        session_id=session_id,
        ip_address=ip_address,
        user_agent=user_agent,
    )


def submit_lead(
    db: Session,
    store: SheetsLeadStore,
    client: ClientConfig,
    lead: LeadData,
) -> SubmissionResult:
    """
    Persist a lead to the ledger and the tenant sheet.

    The ledger row is committed as PENDING before the sheet call. A failed or
    raising sheet call marks it FAILED so the retry script picks it up.
    """
    lead.lead_id = lead.lead_id or generate_lead_id(client.client_id)

    repository.create_lead(
        db,
        lead_id=lead.lead_id,
        client_id=client.client_id,
        name=lead.name,
        phone=lead.phone,
        email=lead.email,
        project_type=lead.project_type,
        quoted_price=lead.quoted_price,
        persona=lead.persona,
        marketing_consent=lead.marketing_consent,
        session_id=lead.session_id,
    )
    db.commit()

    try:
        result = store.submit(client.client_id, client.sheet, lead)
    except Exception as exc:
        repository.update_lead_storage_status(
            db, lead.lead_id, StorageStatus.FAILED, error_message=f"Unexpected storage error: {exc}",
        )
        db.commit()
        logger.exception("❌ Lead %s crashed during storage for %s.", lead.lead_id, client.client_id)
        raise

    if result.success:
        repository.update_lead_storage_status(
            db, lead.lead_id, StorageStatus.STORED, row_number=result.row_number,
        )
        repository.record_usage(
            db,
            client_id=client.client_id,
            endpoint="submit-lead",
            action="lead_submission",
            details={
                "leadId": lead.lead_id,
                "persona": lead.persona,
                "quotedPrice": lead.quoted_price,
                "hasMarketingConsent": lead.marketing_consent,
            },
        )
        logger.info("✅ Lead %s stored for %s.", lead.lead_id, client.client_id)
    else:
        repository.update_lead_storage_status(
            db, lead.lead_id, StorageStatus.FAILED, error_message=result.error,
        )
        logger.error("❌ Lead %s not stored for %s: %s", lead.lead_id, client.client_id, result.error)

    db.commit()
    return result


def retry_failed_leads(db: Session, store: SheetsLeadStore, registry, limit: int = 20) -> dict:
    """
    Re-attempt sheet storage for leads whose first attempt failed.

    Only the ledger columns are available on retry, so the row carries the
    contact details, project type, quote and persona.

    Returns:
        A summary dict: {"attempted": int, "stored": int, "failed": int}
    """
    stats = {"attempted": 0, "stored": 0, "failed": 0}
    for record in repository.get_leads_by_status(db, StorageStatus.FAILED, limit=limit):
        client = registry.get(record.client_id)
        if client is None:
            logger.warning("Skipping lead %s — client %s no longer configured.", record.lead_id, record.client_id)
            continue

        stats["attempted"] += 1
        lead = LeadData(
            name=record.name,
            phone=record.phone,
            email=record.email,
            client_id=record.client_id,
            project_type=record.project_type,
            quoted_price=record.quoted_price,
            persona=record.persona,
            marketing_consent=record.marketing_consent,
            session_id=record.session_id,
            lead_id=record.lead_id,
        )
        result = store.submit(client.client_id, client.sheet, lead)
        if result.success:
            repository.update_lead_storage_status(
                db, record.lead_id, StorageStatus.STORED, row_number=result.row_number,
            )
            stats["stored"] += 1
        else:
            repository.update_lead_storage_status(
                db, record.lead_id, StorageStatus.FAILED, error_message=result.error,
            )
            stats["failed"] += 1

    db.commit()
    logger.info("Lead retry done: %s", stats)
    return stats
